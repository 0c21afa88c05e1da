"""Helper namespace classification.

A template may declare any number of namespaces. Those that are not
well-known markup vocabularies (XHTML, SVG, MathML, ...) are helper
namespaces: their elements and attributes mark extension points.

Example:
    >>> tree = load_string('<r xmlns:ex="urn:ex" xmlns:h="http://www.w3.org/1999/xhtml"/>')
    >>> NamespaceClassifier().classify(tree)
    ('urn:ex',)

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plantilla.config import LexConfig, get_lex_config
from plantilla.errors import AmbiguousHelperNamespaceError
from plantilla.utils.logger import get_logger

if TYPE_CHECKING:
    from lxml import etree

logger = get_logger(__name__)


def declared_namespaces(tree: etree._ElementTree) -> tuple[str, ...]:
    """Collect every namespace URI declared in the document.

    Returns:
        URIs in first-seen document order, without duplicates.
    """
    seen: dict[str, None] = {}
    for element in tree.getroot().iter():
        if not isinstance(element.tag, str):
            continue
        for uri in element.nsmap.values():
            seen.setdefault(uri, None)
    return tuple(seen)


class NamespaceClassifier:
    """Computes the helper namespaces of a document.

    The deny-list (``LexConfig.non_helper_namespaces``) always takes
    precedence. When ``LexConfig.helper_namespaces`` names a deny-listed
    URI, strict configs raise AmbiguousHelperNamespaceError; otherwise
    the URI is dropped with a warning.

    """

    __slots__ = ("_config",)

    def __init__(self, config: LexConfig | None = None) -> None:
        self._config = config or get_lex_config()

    def check_policy(self) -> frozenset[str]:
        """Validate configured helper namespaces against the deny-list.

        Returns:
            The configured helper namespaces that survive precedence
            (empty when no explicit allow-list is configured).

        Raises:
            AmbiguousHelperNamespaceError: In strict mode, on collision.
        """
        config = self._config
        if config.helper_namespaces is None:
            return frozenset()

        collisions = config.helper_namespaces & config.non_helper_namespaces
        for uri in sorted(collisions):
            if config.strict:
                raise AmbiguousHelperNamespaceError(uri)
            logger.warning("Ignoring helper namespace %s: it is a non-helper namespace", uri)
        return config.helper_namespaces - collisions

    def classify(self, tree: etree._ElementTree) -> tuple[str, ...]:
        """Return the helper namespaces declared in the document.

        Args:
            tree: The template document

        Returns:
            Helper namespace URIs in first-seen document order.
        """
        config = self._config
        allowed = self.check_policy()
        helpers = tuple(
            uri
            for uri in declared_namespaces(tree)
            if uri not in config.non_helper_namespaces
            and (config.helper_namespaces is None or uri in allowed)
        )
        logger.debug("Classified %d helper namespace(s)", len(helpers))
        return helpers
