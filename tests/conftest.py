"""
Pytest configuration and shared fixtures for CursorScript tests.
"""

import pytest

from cursorscript.compiler.ast_nodes import Program
from cursorscript.compiler.lexer import Lexer
from cursorscript.compiler.parser import Parser
from cursorscript.compiler.tokens import Token
from cursorscript.lsp.analyzer import DocumentAnalyzer
from cursorscript.lsp.engine import CursorScriptEngine
from cursorscript.lsp.symbols import SymbolInfo, extract_symbols

TEST_URI = "test://test.cs"


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = TEST_URI) -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory(lexer_factory):
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        lexer = lexer_factory(source)
        tokens = lexer.tokenize()
        return Parser(tokens, source=source, filename=TEST_URI)

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        lexer = lexer_factory(source)
        return lexer.tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code into AST."""

    def _parse(source: str) -> Program:
        parser = parser_factory(source)
        return parser.parse()

    return _parse


@pytest.fixture
def symbols_of(parse):
    """Fixture returning the local symbols declared by source code."""

    def _symbols(source: str) -> list[SymbolInfo]:
        return extract_symbols(parse(source))

    return _symbols


@pytest.fixture
def analyzer_factory(parse):
    """
    Factory fixture for creating analyzers.

    ``program_source`` lets a test query text that differs from the last
    successfully parsed version, as happens while the user is typing.
    """

    def _create_analyzer(source: str, program_source: str | None = None) -> DocumentAnalyzer:
        program = parse(source if program_source is None else program_source)
        return DocumentAnalyzer(source, TEST_URI, program)

    return _create_analyzer


@pytest.fixture
def engine() -> CursorScriptEngine:
    """A fresh engine with no open documents."""
    return CursorScriptEngine()
