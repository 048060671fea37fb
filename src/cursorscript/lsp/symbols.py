"""
Symbol model and extraction for CursorScript LSP.

This module defines the symbol records shared by locally declared names and
the built-in catalog, and the extractor that walks a parsed Program into a
flat, declaration-ordered symbol list with inferred display types.

Scoping is flat: every declaration in the document, including
those inside function bodies and branches, lands in one list. Completion
filters that list by declaration line; hover and definition do not filter.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from lsprotocol import types

from cursorscript.compiler.ast_nodes import (
    ArrayLiteral,
    CallExpr,
    Expression,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    LambdaExpr,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Statement,
    StringLiteral,
    VarDeclaration,
)


class SymbolKind(Enum):
    """Kind of symbol in the CursorScript language."""

    VARIABLE = auto()
    CONSTANT = auto()
    FUNCTION = auto()
    PARAMETER = auto()
    MODULE = auto()
    PROPERTY = auto()


# Map symbol kinds to LSP completion item kinds
SYMBOL_KIND_TO_COMPLETION: dict[SymbolKind, types.CompletionItemKind] = {
    SymbolKind.VARIABLE: types.CompletionItemKind.Variable,
    SymbolKind.CONSTANT: types.CompletionItemKind.Constant,
    SymbolKind.FUNCTION: types.CompletionItemKind.Function,
    SymbolKind.PARAMETER: types.CompletionItemKind.Variable,
    SymbolKind.MODULE: types.CompletionItemKind.Module,
    SymbolKind.PROPERTY: types.CompletionItemKind.Property,
}

# Map symbol kinds to LSP symbol kinds for the outline view
SYMBOL_KIND_TO_LSP: dict[SymbolKind, types.SymbolKind] = {
    SymbolKind.FUNCTION: types.SymbolKind.Function,
    SymbolKind.CONSTANT: types.SymbolKind.Constant,
    SymbolKind.MODULE: types.SymbolKind.Module,
}


@dataclass(frozen=True, slots=True)
class SymbolInfo:
    """
    Represents one named symbol, either declared in the document or built in.

    Attributes:
        name: The symbol's identifier name
        kind: The kind of symbol (variable, function, etc.)
        detail: Display string, e.g. "(variable: number)" or "fn add(a, b)"
        documentation: Markdown documentation if available
        insert_text: Snippet inserted on completion instead of the name
        line: 1-indexed declaration line; 0 for built-ins (not navigable)
        column: 1-indexed declaration column; 0 for built-ins
        members: Ordered child symbols (object properties, namespace members)
    """

    name: str
    kind: SymbolKind
    detail: str
    documentation: Optional[str] = None
    insert_text: Optional[str] = None
    line: int = 0
    column: int = 0
    members: tuple["SymbolInfo", ...] = ()

    @property
    def is_navigable(self) -> bool:
        """Whether the symbol has a real declaration position."""
        return self.line > 0

    def to_completion_item(self) -> types.CompletionItem:
        """Convert to an LSP CompletionItem."""
        return types.CompletionItem(
            label=self.name,
            kind=SYMBOL_KIND_TO_COMPLETION.get(self.kind, types.CompletionItemKind.Variable),
            detail=self.detail,
            documentation=self.documentation,
            insert_text=self.insert_text,
            insert_text_format=(
                types.InsertTextFormat.Snippet
                if self.insert_text
                else types.InsertTextFormat.PlainText
            ),
        )

    def to_lsp_symbol_kind(self) -> types.SymbolKind:
        """Get the LSP symbol kind used in the outline."""
        return SYMBOL_KIND_TO_LSP.get(self.kind, types.SymbolKind.Variable)

    def to_lsp_range(self) -> types.Range:
        """Range covering the identifier at its declaration site (0-indexed)."""
        line = max(0, self.line - 1)
        character = max(0, self.column - 1)
        return types.Range(
            start=types.Position(line=line, character=character),
            end=types.Position(line=line, character=character + len(self.name)),
        )

    def to_document_symbol(self) -> types.DocumentSymbol:
        """Convert to a flat LSP DocumentSymbol."""
        range_ = self.to_lsp_range()
        return types.DocumentSymbol(
            name=self.name,
            kind=self.to_lsp_symbol_kind(),
            range=range_,
            selection_range=range_,
            detail=self.detail,
        )

    def find_member(self, name: str) -> Optional["SymbolInfo"]:
        """Look up a direct member by name."""
        for member in self.members:
            if member.name == name:
                return member
        return None


def infer_type_hint(value: Optional[Expression]) -> Optional[str]:
    """
    Infer a display type from the syntactic shape of an initializer.

    No evaluation takes place: only the outermost node kind is inspected.

    Args:
        value: The initializer expression, if any

    Returns:
        The type suffix (e.g. "number"), or None when nothing can be said
    """
    if isinstance(value, NumericLiteral):
        return "number"
    if isinstance(value, StringLiteral):
        return "string"
    if isinstance(value, ArrayLiteral):
        return "array"
    if isinstance(value, ObjectLiteral):
        return "object"
    if isinstance(value, LambdaExpr):
        return f"fn({', '.join(value.parameters)})"
    if isinstance(value, Identifier):
        if value.name in ("true", "false"):
            return "boolean"
        if value.name == "null":
            return "null"
        return None
    if isinstance(value, CallExpr):
        return "(result of call)"
    return None


class SymbolExtractor:
    """
    Collects the locally declared symbols of a Program.

    The walk is pre-order and depth-first; every nested statement sequence
    is visited exactly once, so the output order is declaration order.
    """

    # Statement attributes that may hold a nested statement sequence
    NESTED_SLOTS: tuple[str, ...] = ("body", "then_branch", "else_branch")

    def __init__(self) -> None:
        self.symbols: list[SymbolInfo] = []

    def extract(self, program: Program) -> list[SymbolInfo]:
        """
        Collect all symbols from the AST.

        Args:
            program: The parsed program AST

        Returns:
            Symbols in declaration order
        """
        self.symbols = []
        self._collect_block_symbols(program.body)
        return self.symbols

    def _collect_block_symbols(self, statements: Sequence[Statement]) -> None:
        """Collect symbols from a statement sequence."""
        for stmt in statements:
            self._collect_statement_symbols(stmt)

    def _collect_statement_symbols(self, stmt: Statement) -> None:
        """Collect symbols from a statement."""
        if isinstance(stmt, VarDeclaration):
            self._collect_var_symbols(stmt)
        elif isinstance(stmt, FunctionDeclaration):
            self._collect_function_symbols(stmt)
            # The function body was already walked
            return
        elif isinstance(stmt, ImportDeclaration):
            self._collect_import_symbols(stmt)

        for slot in self.NESTED_SLOTS:
            nested = getattr(stmt, slot, None)
            if isinstance(nested, (tuple, list)):
                self._collect_block_symbols(nested)

    def _collect_var_symbols(self, stmt: VarDeclaration) -> None:
        """Collect symbols from a let/const declaration."""
        type_hint = "constant" if stmt.constant else "variable"
        suffix = infer_type_hint(stmt.value)
        if suffix:
            type_hint = f"{type_hint}: {suffix}"

        members: tuple[SymbolInfo, ...] = ()
        if isinstance(stmt.value, ObjectLiteral):
            # One level only: nested objects are not flattened
            members = tuple(
                SymbolInfo(
                    name=prop.key,
                    kind=SymbolKind.PROPERTY,
                    detail=f"(property of {stmt.identifier})",
                )
                for prop in stmt.value.properties
            )

        self.symbols.append(
            SymbolInfo(
                name=stmt.identifier,
                kind=SymbolKind.CONSTANT if stmt.constant else SymbolKind.VARIABLE,
                detail=f"({type_hint})",
                documentation=stmt.doc_comment,
                line=stmt.line,
                column=stmt.column,
                members=members,
            )
        )

    def _collect_function_symbols(self, func: FunctionDeclaration) -> None:
        """Collect the function, its parameters, then its body."""
        self.symbols.append(
            SymbolInfo(
                name=func.name,
                kind=SymbolKind.FUNCTION,
                detail=f"fn {func.name}({', '.join(func.parameters)})",
                documentation=func.doc_comment,
                line=func.line,
                column=func.column,
            )
        )

        # Parameters share the function's declaration position
        for param in func.parameters:
            self.symbols.append(
                SymbolInfo(
                    name=param,
                    kind=SymbolKind.PARAMETER,
                    detail=f"(parameter of {func.name})",
                    line=func.line,
                    column=func.column,
                )
            )

        self._collect_block_symbols(func.body)

    def _collect_import_symbols(self, stmt: ImportDeclaration) -> None:
        """Collect one module symbol per imported name."""
        for spec in stmt.specifiers:
            self.symbols.append(
                SymbolInfo(
                    name=spec,
                    kind=SymbolKind.MODULE,
                    detail=f'(imported from "{stmt.source}")',
                    line=stmt.line,
                    column=stmt.column,
                )
            )


def extract_symbols(program: Program) -> list[SymbolInfo]:
    """Convenience function returning the local symbols of a program."""
    return SymbolExtractor().extract(program)
