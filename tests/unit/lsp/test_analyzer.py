"""Tests for the CursorScript LSP document analyzer."""

import pytest
from lsprotocol import types

from cursorscript.lsp.analyzer import DocumentAnalyzer, offset_at, position_at


class TestPositions:
    """Test suite for position conversion."""

    @pytest.mark.parametrize(
        "line,character,offset",
        [
            (0, 0, 0),
            (0, 3, 3),
            (1, 2, 6),
            (0, 99, 3),   # past end of line clamps to line end
            (9, 0, 9),    # past last line clamps to end of text
        ],
    )
    def test_offset_at(self, line: int, character: int, offset: int) -> None:
        """Test (line, character) to offset conversion with clamping."""
        assert offset_at("abc\nde\nfg", line, character) == offset

    def test_position_at(self) -> None:
        """Test offset to position conversion."""
        assert position_at("abc\nde", 5) == types.Position(line=1, character=1)

    def test_code_points(self) -> None:
        """Test that characters count code points."""
        assert offset_at("é😀x", 0, 2) == 2


class TestHover:
    """Test suite for hover."""

    def test_hover_local_function_with_doc(self, analyzer_factory) -> None:
        """Test hover markdown for a documented function."""
        analyzer = analyzer_factory("/// Adds two numbers.\nfn add(a, b) { return a + b }")
        hover = analyzer.get_hover(1, 4)

        assert hover is not None
        assert hover.contents.kind == types.MarkupKind.Markdown
        assert hover.contents.value == "**add**\n\nfn add(a, b)\n\nAdds two numbers."

    def test_hover_without_documentation(self, analyzer_factory) -> None:
        """Test that the documentation section is omitted when absent."""
        analyzer = analyzer_factory("let count = 3")
        hover = analyzer.get_hover(0, 5)
        assert hover.contents.value == "**count**\n\n(variable: number)"

    def test_hover_span_is_inclusive(self, analyzer_factory) -> None:
        """Test that the position just past a word still hovers it."""
        analyzer = analyzer_factory("let count = 3")
        hover = analyzer.get_hover(0, 9)
        assert hover.contents.value.startswith("**count**")
        assert hover.range.start == types.Position(line=0, character=4)
        assert hover.range.end == types.Position(line=0, character=9)

    def test_hover_builtin(self, analyzer_factory) -> None:
        """Test hover over a built-in function."""
        analyzer = analyzer_factory("print(1)")
        hover = analyzer.get_hover(0, 2)
        assert hover.contents.value.startswith("**print**\n\nprint(...values)\n\n")

    def test_hover_unknown_or_blank(self, analyzer_factory) -> None:
        """Test that unknown names and blank positions give no hover."""
        analyzer = analyzer_factory("let a = mystery\n\n")
        assert analyzer.get_hover(0, 10) is None
        assert analyzer.get_hover(1, 0) is None

    def test_hover_requires_program(self) -> None:
        """Test that hover needs a successfully parsed tree."""
        analyzer = DocumentAnalyzer("print(1)", "test://test.cs", None)
        assert analyzer.get_hover(0, 2) is None

    def test_hover_uses_stale_program(self, analyzer_factory) -> None:
        """Test that hover keeps working from the last good tree."""
        analyzer = analyzer_factory("let total = 1\ntotal +", program_source="let total = 1")
        hover = analyzer.get_hover(1, 2)
        assert hover.contents.value == "**total**\n\n(variable: number)"


class TestDefinition:
    """Test suite for go-to-definition."""

    def test_definition_of_local(self, analyzer_factory) -> None:
        """Test that a use jumps to the declared name."""
        analyzer = analyzer_factory("let x = 1\nprint(x)")
        location = analyzer.get_definition(1, 6)

        assert location is not None
        assert location.uri == "test://test.cs"
        assert location.range == types.Range(
            start=types.Position(line=0, character=4),
            end=types.Position(line=0, character=5),
        )

    def test_definition_of_builtin(self, analyzer_factory) -> None:
        """Test that names resolving only to built-ins have no definition."""
        analyzer = analyzer_factory("print(1)")
        assert analyzer.get_definition(0, 2) is None

    def test_parameter_resolves_to_function_position(self, analyzer_factory) -> None:
        """Test that a parameter jumps to its function's declaration site."""
        analyzer = analyzer_factory("fn add(a, b) {\n  return a\n}")
        location = analyzer.get_definition(1, 9)
        assert location.range.start == types.Position(line=0, character=3)
        assert location.range.end == types.Position(line=0, character=4)

    def test_definition_of_import(self, analyzer_factory) -> None:
        """Test that imported names jump to the import keyword."""
        analyzer = analyzer_factory('import { helper } from "lib"\nhelper()')
        location = analyzer.get_definition(1, 1)
        assert location.range.start == types.Position(line=0, character=0)


class TestSignatureHelp:
    """Test suite for signature help."""

    def test_local_function(self, analyzer_factory) -> None:
        """Test parameter labels and active parameter for a local call."""
        analyzer = analyzer_factory(
            "fn add(a, b) { return a + b }\nadd(1, ",
            program_source="fn add(a, b) { return a + b }",
        )
        help_ = analyzer.get_signature_help(1, 7)

        assert help_ is not None
        signature = help_.signatures[0]
        assert signature.label == "fn add(a, b)"
        assert [p.label for p in signature.parameters] == ["a", "b"]
        assert help_.active_signature == 0
        assert help_.active_parameter == 1

    def test_namespace_member(self, analyzer_factory) -> None:
        """Test signature help for a dotted built-in call."""
        analyzer = analyzer_factory("Math.pow(2", program_source="")
        help_ = analyzer.get_signature_help(0, 10)
        assert help_.signatures[0].label == "Math.pow(base, exponent)"
        assert [p.label for p in help_.signatures[0].parameters] == ["base", "exponent"]
        assert help_.active_parameter == 0

    def test_empty_parameter_list(self, analyzer_factory) -> None:
        """Test that () yields a signature without parameters."""
        analyzer = analyzer_factory("Math.random(", program_source="")
        help_ = analyzer.get_signature_help(0, 12)
        assert help_.signatures[0].parameters == []

    def test_whitespace_before_paren(self, analyzer_factory) -> None:
        """Test that whitespace between the name and '(' is allowed."""
        analyzer = analyzer_factory("len (x", program_source="")
        help_ = analyzer.get_signature_help(0, 6)
        assert help_.signatures[0].label == "len(value)"

    def test_lambda_variable(self, analyzer_factory) -> None:
        """Test that a variable holding a function lists its parameters."""
        source = "let f = fn(x, y) { return x }"
        analyzer = analyzer_factory(source + "\nf(1, 2, ", program_source=source)
        help_ = analyzer.get_signature_help(1, 8)
        assert [p.label for p in help_.signatures[0].parameters] == ["x", "y"]
        assert help_.active_parameter == 2

    def test_nearest_paren_wins(self, analyzer_factory) -> None:
        """Test that the backward scan stops at the nearest '('."""
        analyzer = analyzer_factory("print(len(", program_source="")
        help_ = analyzer.get_signature_help(0, 10)
        assert help_.signatures[0].label == "len(value)"

    def test_no_paren(self, analyzer_factory) -> None:
        """Test that no '(' before the cursor gives no help."""
        analyzer = analyzer_factory("let a = 1")
        assert analyzer.get_signature_help(0, 9) is None

    def test_unresolved_target(self, analyzer_factory) -> None:
        """Test that unknown call targets give no help."""
        analyzer = analyzer_factory("mystery(", program_source="")
        assert analyzer.get_signature_help(0, 8) is None

    def test_property_without_parens(self, analyzer_factory) -> None:
        """Test that members with no parameter list give no help."""
        analyzer = analyzer_factory("Math.PI(", program_source="")
        assert analyzer.get_signature_help(0, 8) is None


class TestDocumentSymbols:
    """Test suite for the document outline."""

    def test_outline_counts_all_declarations(self, analyzer_factory) -> None:
        """Test one outline entry per declared name, nested ones included."""
        source = """import { a, b } from "lib"
const LIMIT = 10
fn add(x, y) {
    let sum = x + y
    if (sum > LIMIT) { let capped = LIMIT }
    return sum
}
"""
        symbols = analyzer_factory(source).get_document_symbols()
        assert [s.name for s in symbols] == [
            "a", "b", "LIMIT", "add", "x", "y", "sum", "capped",
        ]

    def test_outline_of_function(self, analyzer_factory) -> None:
        """Test outline kinds for a function and its parameters."""
        symbols = analyzer_factory("fn add(a, b) { a + b }").get_document_symbols()
        assert [(s.name, s.kind) for s in symbols] == [
            ("add", types.SymbolKind.Function),
            ("a", types.SymbolKind.Variable),
            ("b", types.SymbolKind.Variable),
        ]

    def test_outline_without_program(self) -> None:
        """Test that a never-parsed document has an empty outline."""
        analyzer = DocumentAnalyzer("let = ", "test://test.cs", None)
        assert analyzer.get_document_symbols() == []
