"""
CursorScript Utilities Package.

Common utilities for error handling and source locations.
"""

from cursorscript.utils.errors import (
    CursorScriptError,
    LexerError,
    ParserError,
    SourceLocation,
)

__all__ = [
    "CursorScriptError",
    "LexerError",
    "ParserError",
    "SourceLocation",
]
