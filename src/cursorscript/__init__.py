"""
CursorScript - language intelligence for the CursorScript scripting language.

Provides a reference parser and a language server offering completion,
hover, go-to-definition, signature help, document outline, diagnostics
and formatting.
"""

from cursorscript.compiler import Lexer, Parser, parse

__version__ = "0.1.0"
__all__ = [
    "Lexer",
    "Parser",
    "parse",
]
