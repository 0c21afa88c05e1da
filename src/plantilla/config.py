"""ContextVar-based lex configuration for Plantilla.

Provides the lexing policy as an immutable object plus a thread-local
"active" configuration using Python's ContextVars (PEP 567). The policy holds
everything a template dialect may want to vary without touching the lexer:
the namespaces that can never carry helpers, the raw-exclusion element, the
placeholder element name and the directive comment pattern.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed and race conditions are impossible.

Usage:
    # Explicit policy
    lexer = Lexer(LexConfig(raw_local_name="Verbatim"))
    stream = lexer.scan(tree)

    # Active policy for everything lexed in this context
    from plantilla.config import set_lex_config, reset_lex_config, LexConfig

    set_lex_config(LexConfig(strict=True))
    try:
        stream = lex(tree)
    finally:
        reset_lex_config()

    # Or use the context manager
    with lex_config_context(LexConfig(strict=True)):
        stream = lex(tree)

"""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator

# Namespaces that may be declared in templates but never contain helpers.
DEFAULT_NON_HELPER_NAMESPACES: frozenset[str] = frozenset(
    {
        "http://www.w3.org/2001/XInclude",
        "http://www.w3.org/XML/1998/namespace",
        "http://www.w3.org/1999/xhtml",
        "http://www.w3.org/1999/XSL/Transform",
        "http://www.w3.org/1998/Math/MathML",
        "http://www.w3.org/1999/Math/MathML",
        "http://www.w3.org/2000/svg",
        "http://www.w3.org/1999/xlink",
    }
)

# Core template namespace; hosts the raw-exclusion element.
CORE_NAMESPACE = "http://elixir.mohiva.com"

PLACEHOLDER_TAG = "__N_-_O_-_D_-_E__"


@dataclass(frozen=True, slots=True)
class LexConfig:
    """Immutable lexing policy.

    Set once per Lexer (or per context), read for the whole pass.
    Frozen dataclass ensures thread-safety (immutable after creation).

    Note: source_file is intentionally excluded—it's per-call state,
    not configuration. It is passed to Lexer.scan().

    Attributes:
        non_helper_namespaces: Well-known namespaces that never carry helpers.
            Always takes precedence over helper_namespaces.
        helper_namespaces: Restrict helpers to these URIs (None = every
            declared namespace that is not deny-listed)
        raw_namespace: Namespace of the raw-exclusion element
        raw_local_name: Local name of the raw-exclusion element
        placeholder_tag: Element name substituted for processed nodes
        directive_comment_pattern: Comments whose body matches are compiled away
        id_algorithm: hashlib algorithm used to derive node ids from paths
        strict: Raise instead of warn on ambiguous helper namespaces

    """

    non_helper_namespaces: frozenset[str] = DEFAULT_NON_HELPER_NAMESPACES
    helper_namespaces: frozenset[str] | None = None
    raw_namespace: str = CORE_NAMESPACE
    raw_local_name: str = "Raw"
    placeholder_tag: str = PLACEHOLDER_TAG
    directive_comment_pattern: str = r"^%.*%$"
    id_algorithm: str = "sha1"
    strict: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict) -> "LexConfig":
        """Create LexConfig from dictionary.

        Useful for framework integration where config may come from external
        sources (settings modules, YAML files, etc.).

        Only includes keys that are valid LexConfig fields; unknown keys
        are silently ignored. Namespace collections are frozen.

        Args:
            config_dict: Dictionary with config values. Keys should match
                LexConfig attribute names.

        Returns:
            New LexConfig instance with values from dict.

        Example:
            >>> config = LexConfig.from_dict({
            ...     "raw_local_name": "Verbatim",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.raw_local_name
            'Verbatim'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        for key in ("non_helper_namespaces", "helper_namespaces"):
            if filtered.get(key) is not None:
                filtered[key] = frozenset(filtered[key])
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: LexConfig = LexConfig()

# Thread-local configuration via ContextVar
_lex_config: ContextVar[LexConfig] = ContextVar(
    "lex_config",
    default=_DEFAULT_CONFIG,
)


def get_lex_config() -> LexConfig:
    """Get current lex configuration (thread-local).

    Returns:
        The active LexConfig for this thread/context.

    """
    return _lex_config.get()


def set_lex_config(config: LexConfig) -> None:
    """Set lex configuration for current context.

    Args:
        config: LexConfig instance to use for this context.

    """
    _lex_config.set(config)


def reset_lex_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.

    """
    _lex_config.set(_DEFAULT_CONFIG)


@contextmanager
def lex_config_context(config: LexConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Useful for tests and isolated lexing operations.

    Args:
        config: LexConfig to use within the context.

    Yields:
        None

    Example:
        >>> with lex_config_context(LexConfig(strict=True)):
        ...     stream = lex(tree)
        >>> # Automatically reset to previous config

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        config even if an exception is raised.

    """
    previous = _lex_config.get()
    _lex_config.set(config)
    try:
        yield
    finally:
        _lex_config.set(previous)


__all__ = [
    "CORE_NAMESPACE",
    "DEFAULT_NON_HELPER_NAMESPACES",
    "PLACEHOLDER_TAG",
    "LexConfig",
    "get_lex_config",
    "set_lex_config",
    "reset_lex_config",
    "lex_config_context",
]
