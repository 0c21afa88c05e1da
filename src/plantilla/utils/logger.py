"""Logger lookup for Plantilla modules.

Every module logs below the ``plantilla`` logger, so applications tune the
whole lexer from one place:

    >>> import logging
    >>> logging.getLogger("plantilla").setLevel(logging.DEBUG)

The library installs no handlers. Lexing passes log at DEBUG (namespaces
found, nodes discovered, tokens emitted); ignored helper namespaces are
reported at WARNING.
"""

from __future__ import annotations

import logging

_ROOT = "plantilla"


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, below the ``plantilla`` logger.

    Example:
        >>> get_logger("plantilla.lexer.core").name
        'plantilla.lexer.core'
        >>> get_logger("templates").name
        'plantilla.templates'
    """
    if name != _ROOT and not name.startswith(f"{_ROOT}."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
