"""Source location tracking for error messages and debugging.

Provides SourceLocation dataclass for tracking where a token came from.
Document tokens are addressed by line and node path rather than by
column, because the XML layer only tracks lines.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source location for error messages and debugging.

    All line numbers are 1-indexed; 0 means unknown.

    Attributes:
        lineno: Line number (1-indexed)
        path: Node path in the original document (optional)
        source_file: Source file path (optional)

    Examples:
            >>> loc = SourceLocation(lineno=3, path="/root/p")
            >>> str(loc)
            '3 /root/p'

            >>> loc = SourceLocation(3, None, "templates/page.xml")
            >>> str(loc)
            'templates/page.xml:3'

    """

    lineno: int
    path: str | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "file.xml:10 /root/p" or "10"
        """
        text = f"{self.source_file}:{self.lineno}" if self.source_file else f"{self.lineno}"
        if self.path:
            text += f" {self.path}"
        return text

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Create an unknown/placeholder location.

        Use for tokens created synthetically or when location is unavailable.
        """
        return cls(lineno=0)
