"""Loading template documents into lxml trees.

The lexer needs CDATA sections, whitespace, entity references and line
numbers exactly as written, so templates are parsed with a dedicated
parser instead of lxml's defaults.

Example:
    >>> tree = load_string('<root xmlns:ex="urn:ex"><p ex:If="{% a %}"/></root>')
    >>> tree.getroot().tag
    'root'

"""

from __future__ import annotations

import re
from pathlib import Path

from lxml import etree

from plantilla.errors import DocumentLoadError
from plantilla.utils.logger import get_logger

logger = get_logger(__name__)

_DECLARATION = re.compile(r"""\s*<\?xml\b(?:[^>]*?\bencoding\s*=\s*["']([A-Za-z0-9._-]+)["'])?[^>]*\?>""")

xml_parser = etree.XMLParser(
    strip_cdata=False,
    remove_blank_text=False,
    remove_comments=False,
    remove_pis=False,
    resolve_entities=False,
)


def load_string(source: str | bytes, source_file: str | None = None) -> etree._ElementTree:
    """Parse template source into an element tree.

    Args:
        source: Template markup (text or bytes)
        source_file: Optional file name, used as base URL and in errors

    Returns:
        The parsed document.

    Raises:
        DocumentLoadError: If the markup is not well-formed.
    """
    if isinstance(source, str):
        # lxml refuses text that carries its own encoding declaration
        match = _DECLARATION.match(source)
        if match:
            encoding = match.group(1) or "utf-8"
            try:
                source = source.encode(encoding)
            except LookupError as exc:
                raise DocumentLoadError(
                    f"Unknown encoding {encoding!r} in XML declaration",
                    lineno=1,
                    source_file=source_file,
                ) from exc
            except UnicodeEncodeError as exc:
                raise DocumentLoadError(
                    f"Text cannot be encoded as declared ({encoding}): {exc.reason}",
                    lineno=source.count("\n", 0, exc.start) + 1,
                    source_file=source_file,
                ) from exc
    try:
        root = etree.fromstring(source, xml_parser, base_url=source_file)
    except etree.XMLSyntaxError as exc:
        raise DocumentLoadError(exc.msg, lineno=exc.lineno, source_file=source_file) from exc
    return root.getroottree()


def load_file(path: str | Path) -> etree._ElementTree:
    """Parse a template file into an element tree.

    Raises:
        DocumentLoadError: If the file is not well-formed XML.
    """
    path = Path(path)
    logger.debug("Loading template %s", path)
    return load_string(path.read_bytes(), source_file=str(path))


def serialize(tree: etree._ElementTree) -> str:
    """Serialize a document (without XML declaration) for diagnostics."""
    return etree.tostring(tree, encoding="unicode")
