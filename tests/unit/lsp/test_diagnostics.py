"""Tests for the CursorScript LSP diagnostics provider."""

from lsprotocol.types import DiagnosticSeverity, Position

from cursorscript.lsp.diagnostics import (
    DiagnosticProvider,
    diagnostic_from_error,
    get_diagnostics_for_document,
)
from cursorscript.utils.errors import ParserError, SourceLocation


def failing_parser(message: str):
    """A parse function that always raises ValueError(message)."""

    def _parse(source: str, uri: str):
        raise ValueError(message)

    return _parse


class TestDiagnosticProvider:
    """Test suite for DiagnosticProvider."""

    def test_valid_code_no_errors(self) -> None:
        """Test that valid code produces no diagnostics."""
        source = """
let x = 42
fn double(n) { return n * 2 }
"""
        assert get_diagnostics_for_document(source, "test://test.cs") == []

    def test_syntax_error_produces_one_diagnostic(self) -> None:
        """Test that a syntax error produces exactly one error."""
        diagnostics = get_diagnostics_for_document("let x = ", "test://test.cs")

        assert len(diagnostics) == 1
        diag = diagnostics[0]
        assert diag.severity == DiagnosticSeverity.Error
        assert diag.source == "cursorscript"
        assert diag.message == "Expected expression, found end of file"
        assert diag.range.start == Position(line=0, character=8)
        assert diag.range.end == Position(line=0, character=9)

    def test_range_covers_offending_token(self) -> None:
        """Test that the range extends over the token at the error."""
        diagnostics = get_diagnostics_for_document("let a = 1\nlet = 2", "test://test.cs")
        assert diagnostics[0].range.start == Position(line=1, character=4)
        assert diagnostics[0].range.end == Position(line=1, character=5)

    def test_unterminated_string_error(self) -> None:
        """Test diagnostic for an unterminated string."""
        diagnostics = get_diagnostics_for_document('let s = "hello', "test://test.cs")

        assert len(diagnostics) == 1
        assert "Unterminated string" in diagnostics[0].message
        assert diagnostics[0].range.start == Position(line=0, character=8)
        assert diagnostics[0].range.end == Position(line=0, character=14)

    def test_position_from_message(self) -> None:
        """Test that foreign failures are placed from ':line:column' in the message."""
        provider = DiagnosticProvider(
            "a\nb\nlet xyz", "file:///x.cs", failing_parser("boom at file.cs:3:5 here")
        )
        diagnostics = provider.get_diagnostics()

        assert len(diagnostics) == 1
        assert diagnostics[0].message == "boom at file.cs:3:5 here"
        assert diagnostics[0].range.start == Position(line=2, character=4)
        assert diagnostics[0].range.end == Position(line=2, character=7)

    def test_position_unknown(self) -> None:
        """Test that failures without any position land at the document start."""
        provider = DiagnosticProvider("x", "file:///x.cs", failing_parser("no position"))
        diagnostics = provider.get_diagnostics()

        assert len(diagnostics) == 1
        assert diagnostics[0].range.start == Position(line=0, character=0)

    def test_structured_location_wins(self) -> None:
        """Test that a SourceLocation is preferred over the message text."""
        error = ParserError("Bad token at 9:9", SourceLocation(line=1, column=2))
        diagnostic = diagnostic_from_error(error, "ab cd")
        assert diagnostic.range.start == Position(line=0, character=1)
        assert diagnostic.range.end == Position(line=0, character=2)
        assert diagnostic.message == "Bad token at 9:9"

    def test_lines_split_on_newline_only(self) -> None:
        """Test that form feeds inside a line do not shift the quoted line."""
        provider = DiagnosticProvider(
            "a\x0cb\nlet xyz", "file:///x.cs", failing_parser("bad at x.cs:2:5")
        )
        diagnostics = provider.get_diagnostics()
        assert diagnostics[0].range.start == Position(line=1, character=4)
        assert diagnostics[0].range.end == Position(line=1, character=7)
