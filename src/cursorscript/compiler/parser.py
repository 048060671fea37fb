"""
CursorScript Parser.

A recursive descent parser that transforms a token stream into an Abstract
Syntax Tree (AST). Expressions use precedence climbing.
"""

from dataclasses import replace
from typing import Optional

from cursorscript.compiler.ast_nodes import (
    ArrayLiteral,
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    Expression,
    ExpressionStatement,
    FunctionDeclaration,
    Identifier,
    IfStatement,
    ImportDeclaration,
    LambdaExpr,
    MemberExpr,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Property,
    ReturnStatement,
    Statement,
    StringLiteral,
    UnaryExpr,
    VarDeclaration,
    WhileStatement,
)
from cursorscript.compiler.lexer import Lexer
from cursorscript.compiler.tokens import KEYWORDS, Token, TokenType
from cursorscript.utils.errors import ParserError, SourceLocation


class Precedence:
    """Operator precedence levels."""

    NONE = 0
    OR = 1              # ||
    AND = 2             # &&
    EQUALITY = 3        # == !=
    COMPARISON = 4      # < > <= >=
    ADDITIVE = 5        # + -
    MULTIPLICATIVE = 6  # * / %
    POSTFIX = 7         # () [] .


# Map token types to their precedence.
# Assignment is handled separately because it is right associative.
PRECEDENCE_MAP: dict[TokenType, int] = {
    TokenType.OR: Precedence.OR,
    TokenType.AND: Precedence.AND,
    TokenType.EQ: Precedence.EQUALITY,
    TokenType.NE: Precedence.EQUALITY,
    TokenType.LT: Precedence.COMPARISON,
    TokenType.GT: Precedence.COMPARISON,
    TokenType.LE: Precedence.COMPARISON,
    TokenType.GE: Precedence.COMPARISON,
    TokenType.PLUS: Precedence.ADDITIVE,
    TokenType.MINUS: Precedence.ADDITIVE,
    TokenType.STAR: Precedence.MULTIPLICATIVE,
    TokenType.SLASH: Precedence.MULTIPLICATIVE,
    TokenType.PERCENT: Precedence.MULTIPLICATIVE,
    TokenType.LPAREN: Precedence.POSTFIX,
    TokenType.LBRACKET: Precedence.POSTFIX,
    TokenType.DOT: Precedence.POSTFIX,
}

# Keywords that may appear as member names after a dot (e.g. `File.import`)
MEMBER_NAME_KEYWORDS: set[TokenType] = set(KEYWORDS.values())


class Parser:
    """
    Recursive descent parser for CursorScript.

    Parses a list of tokens into an Abstract Syntax Tree. The first syntax
    error aborts parsing with a ParserError whose message renders as
    ``[<filename>:<line>:<column>] <message>``.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str = "",
                 filename: str = "<input>") -> None:
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            source: Optional source code, used to quote the failing line
            filename: Optional filename for error reporting
        """
        self.tokens = tokens
        self.pos = 0
        self._source_lines: list[str] = source.splitlines() if source else []
        self._filename = filename

    @property
    def _current(self) -> Token:
        """Get the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    @property
    def _previous(self) -> Token:
        """Get the previous token."""
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def _is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        """Check if the current token is one of the given types."""
        return self._current.type in types

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Consume current token if it matches one of the given types."""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume current token if it matches, else raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error(message)

    def _error(self, message: str) -> ParserError:
        """Create a parser error located at the current token."""
        token = self._current
        found = "end of file" if token.type == TokenType.EOF else repr(token.value)
        location = token.location
        if location.filename is None:
            location = replace(location, filename=self._filename)

        source_line = None
        if 0 < location.line <= len(self._source_lines):
            source_line = self._source_lines[location.line - 1]

        return ParserError(f"{message}, found {found}", location, source_line)

    def _skip_doc_comments(self) -> Optional[str]:
        """Consume doc comments, returning the last one seen."""
        doc_comment = None
        while self._check(TokenType.DOC_COMMENT):
            doc_comment = self._advance().value
        return doc_comment

    def _consume_semicolons(self) -> None:
        """Statement terminators are optional."""
        while self._match(TokenType.SEMICOLON):
            pass

    # -------------------------------------------------------------------------
    # Program Parsing
    # -------------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the entire program.

        Returns:
            The root Program AST node.
        """
        loc = self._current.location
        statements: list[Statement] = []

        while True:
            self._consume_semicolons()
            doc_comment = self._skip_doc_comments()
            if self._is_at_end():
                break
            statements.append(self._parse_statement(doc_comment))

        return Program(tuple(statements), location=loc)

    # -------------------------------------------------------------------------
    # Statement Parsing
    # -------------------------------------------------------------------------

    def _parse_statement(self, doc_comment: Optional[str] = None) -> Statement:
        """Parse a single statement."""
        if self._check(TokenType.IMPORT):
            stmt = self._parse_import()
        elif self._check(TokenType.LET, TokenType.CONST):
            stmt = self._parse_var_declaration(doc_comment)
        elif self._check(TokenType.FN) and self._peek_is_identifier():
            return self._parse_function_declaration(doc_comment)
        elif self._check(TokenType.IF):
            return self._parse_if()
        elif self._check(TokenType.WHILE):
            return self._parse_while()
        elif self._check(TokenType.RETURN):
            stmt = self._parse_return()
        else:
            loc = self._current.location
            stmt = ExpressionStatement(self._parse_assignment(), location=loc)

        self._consume_semicolons()
        return stmt

    def _peek_is_identifier(self) -> bool:
        """Check whether the token after the current one is an identifier."""
        pos = self.pos + 1
        return pos < len(self.tokens) and self.tokens[pos].type == TokenType.IDENTIFIER

    def _parse_import(self) -> ImportDeclaration:
        """
        Parse an import declaration.

        Handles:
            import { a, b } from "source"
            import name from "source"
        """
        loc = self._current.location
        self._advance()  # consume 'import'

        specifiers: list[str] = []
        if self._match(TokenType.LBRACE):
            while not self._check(TokenType.RBRACE):
                name = self._expect(TokenType.IDENTIFIER, "Expected import name").value
                if name not in specifiers:
                    specifiers.append(name)
                if not self._match(TokenType.COMMA):
                    break
            self._expect(TokenType.RBRACE, "Expected '}' after import names")
        else:
            specifiers.append(
                self._expect(TokenType.IDENTIFIER, "Expected import name").value
            )

        self._expect(TokenType.FROM, "Expected 'from' after import names")
        source = self._expect(TokenType.STRING, "Expected module path string").value

        return ImportDeclaration(specifiers=tuple(specifiers), source=source, location=loc)

    def _parse_var_declaration(self, doc_comment: Optional[str]) -> VarDeclaration:
        """
        Parse a let/const declaration.

        Handles:
            let x = value
            let x
            const X = value   (constants must have a value)
        """
        constant = self._advance().type == TokenType.CONST
        name_token = self._expect(TokenType.IDENTIFIER, "Expected variable name")

        value: Optional[Expression] = None
        if constant:
            self._expect(TokenType.ASSIGN, "Expected '=' in const declaration")
            value = self._parse_assignment()
        elif self._match(TokenType.ASSIGN):
            value = self._parse_assignment()

        return VarDeclaration(
            identifier=name_token.value,
            constant=constant,
            value=value,
            doc_comment=doc_comment,
            location=name_token.location,
        )

    def _parse_function_declaration(self, doc_comment: Optional[str]) -> FunctionDeclaration:
        """
        Parse a named function declaration.

        Handles:
            fn name(a, b) { body }
        """
        self._advance()  # consume 'fn'
        name_token = self._expect(TokenType.IDENTIFIER, "Expected function name")
        params = self._parse_parameters()
        body = self._parse_block()

        return FunctionDeclaration(
            name=name_token.value,
            parameters=params,
            body=body,
            doc_comment=doc_comment,
            location=name_token.location,
        )

    def _parse_parameters(self) -> tuple[str, ...]:
        """Parse a parenthesized, comma separated parameter name list."""
        self._expect(TokenType.LPAREN, "Expected '(' before parameters")
        params: list[str] = []
        while not self._check(TokenType.RPAREN):
            params.append(self._expect(TokenType.IDENTIFIER, "Expected parameter name").value)
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN, "Expected ')' after parameters")
        return tuple(params)

    def _parse_condition(self, keyword: str) -> Expression:
        """Parse the parenthesized condition of an if/while."""
        self._expect(TokenType.LPAREN, f"Expected '(' after '{keyword}'")
        condition = self._parse_assignment()
        self._expect(TokenType.RPAREN, "Expected ')' after condition")
        return condition

    def _parse_if(self) -> IfStatement:
        """
        Parse an if statement with optional else / else-if clauses.

        Handles:
            if (cond) { body }
            if (cond) { body } else { body }
            if (cond) { body } else if (cond) { body }
        """
        loc = self._current.location
        self._advance()  # consume 'if'

        condition = self._parse_condition("if")
        then_branch = self._parse_block()

        else_branch: Optional[tuple[Statement, ...]] = None
        if self._match(TokenType.ELSE):
            if self._check(TokenType.IF):
                else_branch = (self._parse_if(),)
            else:
                else_branch = self._parse_block()

        return IfStatement(
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
            location=loc,
        )

    def _parse_while(self) -> WhileStatement:
        """Parse a while loop."""
        loc = self._current.location
        self._advance()  # consume 'while'

        condition = self._parse_condition("while")
        body = self._parse_block()
        return WhileStatement(condition=condition, body=body, location=loc)

    def _parse_return(self) -> ReturnStatement:
        """Parse a return statement."""
        loc = self._current.location
        self._advance()  # consume 'return'

        value: Optional[Expression] = None
        if not self._check(TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF):
            value = self._parse_assignment()
        return ReturnStatement(value=value, location=loc)

    def _parse_block(self) -> tuple[Statement, ...]:
        """
        Parse a block of statements enclosed in braces.

        Handles:
            { stmt1; stmt2; ... }
        """
        self._expect(TokenType.LBRACE, "Expected '{' to start block")

        statements: list[Statement] = []
        while True:
            self._consume_semicolons()
            doc_comment = self._skip_doc_comments()
            if self._check(TokenType.RBRACE, TokenType.EOF):
                break
            statements.append(self._parse_statement(doc_comment))

        self._expect(TokenType.RBRACE, "Expected '}' to end block")
        return tuple(statements)

    # -------------------------------------------------------------------------
    # Expression Parsing
    # -------------------------------------------------------------------------

    def _parse_assignment(self) -> Expression:
        """Parse an expression, handling right-associative assignment."""
        target = self._parse_expression()

        if self._check(TokenType.ASSIGN):
            if not isinstance(target, (Identifier, MemberExpr)):
                raise self._error("Invalid assignment target")
            self._advance()
            value = self._parse_assignment()
            return AssignmentExpr(assignee=target, value=value, location=target.location)

        return target

    def _parse_expression(self, min_precedence: int = Precedence.NONE) -> Expression:
        """Parse an expression using precedence climbing."""
        left = self._parse_prefix()

        while True:
            precedence = PRECEDENCE_MAP.get(self._current.type, Precedence.NONE)
            if precedence <= min_precedence:
                break
            left = self._parse_infix(left, precedence)

        return left

    def _parse_prefix(self) -> Expression:
        """Parse a prefix expression (unary operators, literals, etc.)."""
        loc = self._current.location

        if self._check(TokenType.MINUS, TokenType.BANG):
            operator = self._advance().value
            operand = self._parse_prefix()
            return UnaryExpr(operator=operator, operand=operand, location=loc)

        return self._parse_primary()

    def _parse_infix(self, left: Expression, precedence: int) -> Expression:
        """Parse an infix (binary or postfix) expression."""
        if self._check(TokenType.LPAREN, TokenType.LBRACKET, TokenType.DOT):
            return self._continue_postfix(left)

        operator = self._advance().value
        right = self._parse_expression(precedence)
        return BinaryExpr(left=left, operator=operator, right=right, location=left.location)

    def _continue_postfix(self, expr: Expression) -> Expression:
        """Continue parsing postfix operations (calls, indexing, member access)."""
        while True:
            if self._match(TokenType.LPAREN):
                arguments = self._parse_arguments()
                expr = CallExpr(callee=expr, arguments=arguments, location=expr.location)
            elif self._match(TokenType.LBRACKET):
                index = self._parse_assignment()
                self._expect(TokenType.RBRACKET, "Expected ']' after index")
                expr = MemberExpr(
                    object=expr, property=index, computed=True, location=expr.location
                )
            elif self._match(TokenType.DOT):
                member = self._parse_member_name()
                expr = MemberExpr(object=expr, property=member, location=expr.location)
            else:
                break
        return expr

    def _parse_member_name(self) -> Identifier:
        """Parse a member name (identifier or keyword) after a dot."""
        token = self._current
        if token.type == TokenType.IDENTIFIER or token.type in MEMBER_NAME_KEYWORDS:
            self._advance()
            return Identifier(name=token.value, location=token.location)
        raise self._error("Expected member name after '.'")

    def _parse_arguments(self) -> tuple[Expression, ...]:
        """Parse call arguments up to and including the closing paren."""
        arguments: list[Expression] = []
        while not self._check(TokenType.RPAREN):
            arguments.append(self._parse_assignment())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN, "Expected ')' after arguments")
        return tuple(arguments)

    def _parse_primary(self) -> Expression:
        """Parse a primary expression (literals, identifiers, etc.)."""
        loc = self._current.location

        if self._match(TokenType.NUMBER):
            return NumericLiteral(value=self._previous.value, location=loc)

        if self._match(TokenType.STRING):
            return StringLiteral(value=self._previous.value, location=loc)

        if self._match(TokenType.IDENTIFIER):
            return Identifier(name=self._previous.value, location=loc)

        if self._match(TokenType.LPAREN):
            expr = self._parse_assignment()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if self._match(TokenType.LBRACKET):
            return self._parse_array_literal(loc)

        if self._match(TokenType.LBRACE):
            return self._parse_object_literal(loc)

        if self._match(TokenType.FN):
            parameters = self._parse_parameters()
            body = self._parse_block()
            return LambdaExpr(parameters=parameters, body=body, location=loc)

        raise self._error("Expected expression")

    def _parse_array_literal(self, loc: SourceLocation) -> ArrayLiteral:
        """Parse the elements of an array literal after its '['."""
        elements: list[Expression] = []
        while not self._check(TokenType.RBRACKET):
            elements.append(self._parse_assignment())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACKET, "Expected ']' after array elements")
        return ArrayLiteral(elements=tuple(elements), location=loc)

    def _parse_object_literal(self, loc: SourceLocation) -> ObjectLiteral:
        """
        Parse the properties of an object literal after its '{'.

        Handles:
            { a: 1, "b": 2 }
            { a, b }          (shorthand)
        """
        properties: list[Property] = []
        while not self._check(TokenType.RBRACE):
            key_token = self._current
            if not self._match(TokenType.IDENTIFIER, TokenType.STRING):
                raise self._error("Expected property name")

            value: Optional[Expression] = None
            if self._match(TokenType.COLON):
                value = self._parse_assignment()
            properties.append(
                Property(key=key_token.value, value=value, location=key_token.location)
            )
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "Expected '}' after object properties")
        return ObjectLiteral(properties=tuple(properties), location=loc)


def parse(source: str, filename: str = "<input>") -> Program:
    """
    Tokenize and parse CursorScript source code.

    This is the parser entry point the language server consumes.

    Args:
        source: CursorScript source code
        filename: Document identifier embedded in error messages

    Returns:
        The parsed Program

    Raises:
        LexerError: On an invalid character or unterminated literal
        ParserError: On the first syntax error
    """
    tokens = Lexer(source, filename).tokenize()
    return Parser(tokens, source=source, filename=filename).parse()
