"""Tests for the CursorScript built-in catalog."""

import pytest
from lsprotocol import types

from cursorscript.lsp.catalog import GLOBAL_INDEX, GLOBAL_SYMBOLS, lookup_global, resolve_symbol
from cursorscript.lsp.symbols import SymbolInfo, SymbolKind


class TestGlobalCatalog:
    """Test suite for the global catalog."""

    def test_window_members(self) -> None:
        """Test that Window exposes exactly create and clear."""
        window = lookup_global("Window")
        assert window is not None
        assert [m.name for m in window.members] == ["create", "clear"]

    def test_namespaces_are_modules(self) -> None:
        """Test that namespaces are module symbols with members."""
        for name in ("Math", "Window", "String", "Array", "Time", "File"):
            symbol = lookup_global(name)
            assert symbol.kind == SymbolKind.MODULE
            assert symbol.members

    def test_names_are_unique(self) -> None:
        """Test that every catalog name appears once."""
        assert len(GLOBAL_INDEX) == len(GLOBAL_SYMBOLS)

    def test_builtins_are_not_navigable(self) -> None:
        """Test that no built-in has a source position."""
        assert not any(symbol.is_navigable for symbol in GLOBAL_SYMBOLS)

    def test_index_is_read_only(self) -> None:
        """Test that the catalog index cannot be mutated."""
        with pytest.raises(TypeError):
            GLOBAL_INDEX["print"] = None

    def test_function_snippets(self) -> None:
        """Test that built-in functions complete as call snippets."""
        item = lookup_global("print").to_completion_item()
        assert item.insert_text == "print($1)"
        assert item.insert_text_format == types.InsertTextFormat.Snippet

    def test_member_details(self) -> None:
        """Test that member details read as namespace-qualified calls."""
        math = lookup_global("Math")
        assert math.find_member("pow").detail == "Math.pow(base, exponent)"
        assert math.find_member("PI").detail == "Math.PI"
        assert math.find_member("missing") is None


class TestResolveSymbol:
    """Test suite for name resolution."""

    def test_local_shadows_builtin(self) -> None:
        """Test that a local declaration wins over a built-in."""
        local = SymbolInfo("print", SymbolKind.VARIABLE, "(variable)", line=1, column=5)
        assert resolve_symbol("print", [local]) is local

    def test_first_local_wins(self) -> None:
        """Test that the first local with a name is returned."""
        first = SymbolInfo("x", SymbolKind.VARIABLE, "(variable: number)", line=1, column=5)
        second = SymbolInfo("x", SymbolKind.VARIABLE, "(variable: string)", line=2, column=5)
        assert resolve_symbol("x", [first, second]) is first

    def test_falls_back_to_catalog(self) -> None:
        """Test built-in resolution and unknown names."""
        assert resolve_symbol("Math", []) is lookup_global("Math")
        assert resolve_symbol("nothing", []) is None
