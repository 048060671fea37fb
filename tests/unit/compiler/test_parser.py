"""Tests for the CursorScript parser."""

import pytest

from cursorscript.compiler.ast_nodes import (
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    ExpressionStatement,
    FunctionDeclaration,
    IfStatement,
    ImportDeclaration,
    LambdaExpr,
    MemberExpr,
    ObjectLiteral,
    VarDeclaration,
    WhileStatement,
)
from cursorscript.compiler.parser import parse as parse_source
from cursorscript.utils.errors import CursorScriptError, ParserError


class TestDeclarations:
    """Test suite for declaration parsing."""

    def test_let_and_const(self, parse) -> None:
        """Test let and const declarations with optional semicolons."""
        program = parse("let x = 1;\nconst Y = 2\nlet z")
        assert len(program.body) == 3

        x, y, z = program.body
        assert isinstance(x, VarDeclaration) and not x.constant
        assert isinstance(y, VarDeclaration) and y.constant
        assert z.value is None

    def test_declaration_location_is_identifier(self, parse) -> None:
        """Test that a declaration is located at its name."""
        program = parse("\n  let total = 0")
        decl = program.body[0]
        assert decl.line == 2
        assert decl.column == 7

    def test_function_declaration(self, parse) -> None:
        """Test a named function with parameters and a body."""
        program = parse("fn add(a, b) {\n  return a + b\n}")
        func = program.body[0]
        assert isinstance(func, FunctionDeclaration)
        assert func.name == "add"
        assert func.parameters == ("a", "b")
        assert len(func.body) == 1

    def test_doc_comment_attaches(self, parse) -> None:
        """Test that a /// comment attaches to the next declaration."""
        program = parse("/// The answer.\nconst ANSWER = 42")
        assert program.body[0].doc_comment == "The answer."

    def test_imports(self, parse) -> None:
        """Test braced and default import forms."""
        program = parse('import { a, b } from "lib"\nimport c from "other"')
        first, second = program.body
        assert isinstance(first, ImportDeclaration)
        assert first.specifiers == ("a", "b")
        assert first.source == "lib"
        assert second.specifiers == ("c",)


class TestStatements:
    """Test suite for control flow and expressions."""

    def test_if_else_if(self, parse) -> None:
        """Test that else-if chains nest as a single IfStatement."""
        program = parse("if (a) { x() } else if (b) { y() } else { z() }")
        stmt = program.body[0]
        assert isinstance(stmt, IfStatement)
        assert isinstance(stmt.else_branch[0], IfStatement)
        assert stmt.else_branch[0].else_branch is not None

    def test_while(self, parse) -> None:
        """Test a while loop."""
        program = parse("while (i < 10) { i = i + 1 }")
        stmt = program.body[0]
        assert isinstance(stmt, WhileStatement)
        assert isinstance(stmt.body[0].expression, AssignmentExpr)

    def test_precedence(self, parse) -> None:
        """Test that multiplication binds tighter than addition."""
        program = parse("1 + 2 * 3")
        expr = program.body[0].expression
        assert isinstance(expr, BinaryExpr)
        assert expr.operator == "+"
        assert isinstance(expr.right, BinaryExpr)
        assert expr.right.operator == "*"

    def test_member_call(self, parse) -> None:
        """Test a call on a namespace member."""
        program = parse("Math.sqrt(16)")
        stmt = program.body[0]
        assert isinstance(stmt, ExpressionStatement)
        assert isinstance(stmt.expression, CallExpr)
        assert isinstance(stmt.expression.callee, MemberExpr)

    def test_object_and_lambda(self, parse) -> None:
        """Test object literals and anonymous functions."""
        program = parse("let p = {x: 1, y}\nlet f = fn(a) { return a }")
        assert isinstance(program.body[0].value, ObjectLiteral)
        assert [prop.key for prop in program.body[0].value.properties] == ["x", "y"]
        assert isinstance(program.body[1].value, LambdaExpr)


class TestParserErrors:
    """Test suite for syntax errors."""

    def test_missing_value(self, parse) -> None:
        """Test that an incomplete declaration raises a ParserError."""
        with pytest.raises(ParserError) as exc_info:
            parse("let x = ")
        assert "Expected expression" in exc_info.value.message

    def test_message_carries_position(self) -> None:
        """Test that the rendered message embeds uri:line:column."""
        with pytest.raises(CursorScriptError) as exc_info:
            parse_source("let a = 1\nlet = 2", "file:///a.cs")
        assert "[file:///a.cs:2:5]" in str(exc_info.value)
        assert exc_info.value.location.line == 2

    def test_invalid_assignment_target(self, parse) -> None:
        """Test that assigning to a literal is rejected."""
        with pytest.raises(ParserError):
            parse("1 = 2")
