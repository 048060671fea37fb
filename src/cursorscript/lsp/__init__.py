"""
CursorScript Language Server Protocol (LSP) implementation.

This package provides the CursorScript language server, enabling IDE
features such as:
- Autocomplete suggestions, including namespace members after '.'
- Go-to-definition
- Hover information with inferred types and doc comments
- Signature help
- Document outline
- Parse error diagnostics
- Code formatting

Usage:
    # Start the LSP server (stdio mode)
    cursorscript-lsp

    # Or run as a module
    python -m cursorscript.lsp
"""

from cursorscript.lsp.engine import CursorScriptEngine
from cursorscript.lsp.server import CursorScriptLanguageServer, main

__all__ = [
    "CursorScriptEngine",
    "CursorScriptLanguageServer",
    "main",
]
