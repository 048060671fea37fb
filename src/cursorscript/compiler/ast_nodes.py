"""
Abstract Syntax Tree (AST) node definitions for CursorScript.

This module defines the node types representing the structure of a
CursorScript program after parsing. Each node is immutable, owned by its
parent container, and carries source location information.
"""

from dataclasses import dataclass
from typing import Optional

from cursorscript.utils.errors import SourceLocation


class ASTNode:
    """Base class for all AST nodes."""

    location: Optional[SourceLocation]

    @property
    def line(self) -> int:
        """1-indexed line of the node, or 0 when the node has no location."""
        return self.location.line if self.location else 0

    @property
    def column(self) -> int:
        """1-indexed column of the node, or 0 when the node has no location."""
        return self.location.column if self.location else 0


class Expression(ASTNode):
    """Base class for all expressions."""

    pass


class Statement(ASTNode):
    """Base class for all statements."""

    pass


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NumericLiteral(Expression):
    """A numeric literal: 42, 3.14"""

    value: float
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class StringLiteral(Expression):
    """A string literal: "hello" or 'world'"""

    value: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    """
    A reference to a name.

    CursorScript has no dedicated boolean or null literals: ``true``,
    ``false`` and ``null`` are identifiers resolved by the runtime.
    """

    name: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ArrayLiteral(Expression):
    """An array literal: [1, 2, 3]"""

    elements: tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class Property:
    """
    A single ``key: value`` entry of an object literal.

    ``value`` is None for the shorthand form ``{ key }``.
    """

    key: str
    value: Optional[Expression] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ObjectLiteral(Expression):
    """An object literal: {a: 1, b: 2}. Properties keep source order."""

    properties: tuple[Property, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class LambdaExpr(Expression):
    """An anonymous function: fn(a, b) { a + b }"""

    parameters: tuple[str, ...] = ()
    body: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CallExpr(Expression):
    """A call: callee(arg1, arg2)"""

    callee: Expression
    arguments: tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class MemberExpr(Expression):
    """
    Member access.

    Examples:
        obj.prop   (computed=False, property is an Identifier)
        obj[expr]  (computed=True)
    """

    object: Expression
    property: Expression
    computed: bool = False
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class BinaryExpr(Expression):
    """A binary operation: left <operator> right"""

    left: Expression
    operator: str
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class UnaryExpr(Expression):
    """A prefix operation: -x, !x"""

    operator: str
    operand: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class AssignmentExpr(Expression):
    """An assignment: target = value"""

    assignee: Expression
    value: Expression
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VarDeclaration(Statement):
    """
    A variable or constant declaration.

    Examples:
        let x = 42;
        const NAME = "cursor";
        let pending;
    """

    identifier: str
    constant: bool = False
    value: Optional[Expression] = None
    doc_comment: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class FunctionDeclaration(Statement):
    """
    A named function declaration.

    Example:
        fn add(a, b) {
            return a + b;
        }
    """

    name: str
    parameters: tuple[str, ...] = ()
    body: tuple[Statement, ...] = ()
    doc_comment: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ImportDeclaration(Statement):
    """
    An import of named bindings from another script.

    Example:
        import { draw, clear } from "./canvas.cs";
    """

    specifiers: tuple[str, ...]
    source: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class IfStatement(Statement):
    """
    A conditional statement.

    ``else if`` chains are represented as an ``else_branch`` holding a
    single nested IfStatement.
    """

    condition: Expression
    then_branch: tuple[Statement, ...] = ()
    else_branch: Optional[tuple[Statement, ...]] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class WhileStatement(Statement):
    """A while loop: while (cond) { ... }"""

    condition: Expression
    body: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ReturnStatement(Statement):
    """A return statement with an optional value."""

    value: Optional[Expression] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""

    expression: Expression
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Program
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Program(ASTNode):
    """Root node: the ordered top-level statements of a document."""

    body: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = None
