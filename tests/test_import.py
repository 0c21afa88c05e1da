"""Verify package imports work correctly."""


def test_import_plantilla() -> None:
    """Test that plantilla can be imported and version matches pyproject."""
    import tomllib
    from pathlib import Path

    import plantilla

    with (Path(__file__).resolve().parent.parent / "pyproject.toml").open("rb") as f:
        expected = tomllib.load(f)["project"]["version"]
    assert plantilla.__version__ == expected


def test_version_format() -> None:
    """Test version string format."""
    from plantilla import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_api_exports() -> None:
    """Every name in __all__ is importable from the package root."""
    import plantilla

    for name in plantilla.__all__:
        assert hasattr(plantilla, name), name
