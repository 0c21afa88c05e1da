"""Exception classes for Plantilla.

Provides standardized exceptions for error handling throughout Plantilla.
Lexing failures carry the node path and line number of the offending site.
"""

from __future__ import annotations


class PlantillaError(Exception):
    """Base exception for all Plantilla errors.

    Subclass this for specific error categories.
    """

    pass


class LexError(PlantillaError):
    """Error during document lexing.

    Raised when a lexing pass cannot complete. There is no partial result:
    the token stream under construction is discarded.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        lineno: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize lex error with optional location.

        Args:
            message: Error description
            path: Node path of the offending site (e.g. "/root/p[2]/@title")
            lineno: Line number where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.path = path
        self.lineno = lineno
        self.source_file = source_file

        # Build formatted message
        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
        if location:
            location = location.rstrip(":") + " "

        suffix = f" [{path}]" if path else ""
        super().__init__(f"{location}{message}{suffix}")


class MalformedExpressionError(LexError):
    """An expression was opened with {% but never closed.

    Raised at the end of the attribute value or element content that
    holds the unterminated expression.
    """

    pass


class UnresolvedPlaceholderError(LexError):
    """A placeholder references a node that was never tokenized.

    Indicates a selector or ordering bug; never retried.
    """

    def __init__(
        self,
        node_id: str,
        path: str | None = None,
        lineno: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize unresolved placeholder error.

        Args:
            node_id: The id carried by the placeholder
            path: Path of the node whose lookup failed
            lineno: Line number of that node
            source_file: Path to source file (optional)
        """
        self.node_id = node_id
        super().__init__(
            f"Placeholder '{node_id}' has no tokenized node",
            path=path,
            lineno=lineno,
            source_file=source_file,
        )


class AmbiguousHelperNamespaceError(LexError):
    """A configured helper namespace is also a well-known non-helper namespace.

    The deny-list always wins. This error is only raised in strict mode;
    otherwise the namespace is dropped with a warning.
    """

    def __init__(self, namespace: str) -> None:
        """Initialize ambiguous namespace error.

        Args:
            namespace: The colliding namespace URI
        """
        self.namespace = namespace
        super().__init__(f"Namespace '{namespace}' cannot carry helpers")


class DocumentLoadError(PlantillaError):
    """Error loading a template document.

    Wraps the XML parser's syntax error with the template location.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize document load error.

        Args:
            message: Parser error description
            lineno: Line reported by the XML parser
            source_file: Path to source file (optional)
        """
        self.lineno = lineno
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class StreamFrozenError(PlantillaError):
    """A token was pushed onto a stream that is already frozen."""

    pass
