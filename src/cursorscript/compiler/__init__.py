"""
CursorScript Compiler Front End.

This package contains the reference front end the language server parses
documents with:
- Lexer: Tokenizes CursorScript source code
- Parser: Produces an Abstract Syntax Tree from tokens
- AST: Node definitions for the syntax tree
"""

from cursorscript.compiler.ast_nodes import Program
from cursorscript.compiler.lexer import Lexer, tokenize
from cursorscript.compiler.parser import Parser, parse

__all__ = [
    "Lexer",
    "Parser",
    "Program",
    "parse",
    "tokenize",
]
