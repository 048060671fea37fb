"""
Entry point for running the CursorScript LSP server as a module.

Usage:
    python -m cursorscript.lsp
    python -m cursorscript.lsp --tcp --port 2087
"""

from cursorscript.lsp.server import main

if __name__ == "__main__":
    main()
