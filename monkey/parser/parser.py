"""
Monkey Pratt Parser Implementation

Implements a top-down operator precedence (Pratt) parser for Monkey:
statements are parsed by recursive descent, expressions by precedence
climbing over per-token-type tables of prefix and infix parse functions.

The parser never raises on malformed input. Every failure is appended to
``Parser.errors`` as a ``Diagnostic`` and the failing parse function returns
None; the statement loop then resynchronizes at the next semicolon.
"""

import logging
from enum import IntEnum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic
from .ast_nodes import (
    BlockStatement, BooleanLiteral, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, Identifier, IfExpression, InfixExpression, InfixOperator,
    IntegerLiteral, LetStatement, PrefixExpression, PrefixOperator, Program,
    ReturnStatement, Statement,
)
from .errors import (
    ParseError, SyntaxErrorRecovery, create_unexpected_token_error,
    create_no_prefix_parse_error, create_invalid_integer_error,
    create_unclosed_delimiter_error, create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)

# Integer literals are unsigned 64-bit values
MAX_INTEGER = 2 ** 64 - 1
MAX_INTEGER_DIGITS = len(str(MAX_INTEGER))

# Nested expression levels (parentheses, prefix operators, blocks, calls)
MAX_NESTING_DEPTH = 100


class Precedence(IntEnum):
    """Operator precedence levels for Pratt parsing."""
    LOWEST = 1
    EQUALS = 2          # ==, !=
    LESS_GREATER = 3    # <, >
    SUM = 4             # +, -
    PRODUCT = 5         # *, /
    PREFIX = 6          # !x, -x
    CALL = 7            # f(x)


PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class Parser:
    """
    Monkey Pratt parser.

    Holds exactly two tokens of lookahead: ``current_token`` (the token being
    interpreted) and ``peek_token`` (the next one). Tokens are pulled from the
    lexer on demand and never pushed back.
    """

    def __init__(self, lexer: Lexer):
        """
        Initialize parser over a lexer.

        Args:
            lexer: Token source; the parser owns it from here on
        """
        self.lexer = lexer
        self.errors: List[Diagnostic] = []
        self._depth = 0

        eof = Token(TokenType.EOF, "")
        self.current_token = eof
        self.peek_token = eof

        self._init_parsing_tables()

        # Fill both lookahead slots
        self.next_token()
        self.next_token()

    def _init_parsing_tables(self):
        """Initialize operator precedence and parsing function tables."""

        # Prefix parsing functions (for tokens that can start expressions)
        self.prefix_parsers: Dict[TokenType, PrefixParseFn] = {
            TokenType.IDENTIFIER: self._parse_identifier,
            TokenType.INTEGER: self._parse_integer_literal,
            TokenType.TRUE: self._parse_boolean_literal,
            TokenType.FALSE: self._parse_boolean_literal,

            # Unary operators
            TokenType.BANG: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,

            # Grouping and compound expressions
            TokenType.LEFT_PAREN: self._parse_grouped_expression,
            TokenType.IF: self._parse_if_expression,
            TokenType.FUNCTION: self._parse_function_literal,
        }

        # Infix parsing functions (for binary operators and calls)
        self.infix_parsers: Dict[TokenType, InfixParseFn] = {
            TokenType.PLUS: self._parse_infix_expression,
            TokenType.MINUS: self._parse_infix_expression,
            TokenType.ASTERISK: self._parse_infix_expression,
            TokenType.SLASH: self._parse_infix_expression,
            TokenType.EQUAL: self._parse_infix_expression,
            TokenType.NOT_EQUAL: self._parse_infix_expression,
            TokenType.LESS_THAN: self._parse_infix_expression,
            TokenType.GREATER_THAN: self._parse_infix_expression,

            TokenType.LEFT_PAREN: self._parse_call_expression,
        }

        # Operator precedence table
        self.precedences: Dict[TokenType, Precedence] = {
            TokenType.EQUAL: Precedence.EQUALS,
            TokenType.NOT_EQUAL: Precedence.EQUALS,
            TokenType.LESS_THAN: Precedence.LESS_GREATER,
            TokenType.GREATER_THAN: Precedence.LESS_GREATER,
            TokenType.PLUS: Precedence.SUM,
            TokenType.MINUS: Precedence.SUM,
            TokenType.ASTERISK: Precedence.PRODUCT,
            TokenType.SLASH: Precedence.PRODUCT,
            TokenType.LEFT_PAREN: Precedence.CALL,
        }

    def register_prefix(self, token_type: TokenType, parse_fn: PrefixParseFn):
        """Register (or replace) the prefix parse function for a token type."""
        self.prefix_parsers[token_type] = parse_fn

    def register_infix(self, token_type: TokenType, parse_fn: InfixParseFn,
                       precedence: Precedence):
        """Register (or replace) an infix parse function and its binding power."""
        self.infix_parsers[token_type] = parse_fn
        self.precedences[token_type] = precedence

    # Program and statements

    def parse_program(self) -> Program:
        """
        Parse the whole token stream.

        Statements that fail to parse are dropped after their diagnostics are
        recorded; parsing resumes after the next semicolon. Always returns a
        Program, possibly with fewer statements than the source holds.
        """
        statements: List[Statement] = []

        while not self.current_token_is(TokenType.EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            else:
                self._synchronize(SyntaxErrorRecovery.STATEMENT_BOUNDARIES)
            self.next_token()

        logger.debug(
            "parsed %d statement(s) from %s with %d error(s)",
            len(statements), self.lexer.filename, len(self.errors),
        )
        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        """Parse a statement starting at the current token."""
        if self.current_token_is(TokenType.LET):
            return self.parse_let_statement()
        elif self.current_token_is(TokenType.RETURN):
            return self.parse_return_statement()
        else:
            return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        """Parse ``let <identifier> = <expression>[;]``."""
        start_token = self.current_token

        if not self.expect_peek(TokenType.IDENTIFIER):
            return None
        name = Identifier(self.current_token.literal, self.current_token.location)

        if not self.expect_peek(TokenType.ASSIGN):
            return None
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        self._skip_optional_semicolon()
        return LetStatement(name, value, start_token.location)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        """Parse ``return <expression>[;]``."""
        start_token = self.current_token
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        self._skip_optional_semicolon()
        return ReturnStatement(value, start_token.location)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        """Parse a bare expression used as a statement."""
        start_token = self.current_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        self._skip_optional_semicolon()
        return ExpressionStatement(expression, start_token.location)

    def parse_block_statement(self) -> Optional[BlockStatement]:
        """Parse ``{ <statement>* }``; the current token is the opening brace."""
        open_brace = self.current_token
        statements: List[Statement] = []
        self.next_token()

        while not self.current_token_is(TokenType.RIGHT_BRACE) and not self.current_token_is(TokenType.EOF):
            statement = self.parse_statement()
            if statement is None:
                self._synchronize(SyntaxErrorRecovery.BLOCK_BOUNDARIES)
                if not self.current_token_is(TokenType.SEMICOLON):
                    continue
            else:
                statements.append(statement)
            self.next_token()

        if self.current_token_is(TokenType.EOF):
            self._error(create_unclosed_delimiter_error("{", open_brace.location, self.current_token))
            return None

        return BlockStatement(tuple(statements), open_brace.location)

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        """
        Parse an expression whose operators bind tighter than ``precedence``.

        Every nested sub-expression passes through here, so this is also where
        nesting depth is bounded; past ``MAX_NESTING_DEPTH`` a diagnostic is
        recorded instead of recursing further.
        """
        if self._depth >= MAX_NESTING_DEPTH:
            self._error(create_nesting_too_deep_error(self.current_token, MAX_NESTING_DEPTH))
            return None

        self._depth += 1
        try:
            return self._parse_expression(precedence)
        finally:
            self._depth -= 1

    def _parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix_parser = self.prefix_parsers.get(self.current_token.type)
        if prefix_parser is None:
            self._error(create_no_prefix_parse_error(self.current_token))
            return None

        left = prefix_parser()
        if left is None:
            return None

        while (not self.peek_token_is(TokenType.SEMICOLON)
               and not self.peek_token_is(TokenType.EOF)
               and precedence < self.peek_precedence()):
            infix_parser = self.infix_parsers.get(self.peek_token.type)
            if infix_parser is None:
                return left

            self.next_token()
            left = infix_parser(left)
            if left is None:
                return None

        return left

    def peek_precedence(self) -> Precedence:
        return self.precedences.get(self.peek_token.type, Precedence.LOWEST)

    def current_precedence(self) -> Precedence:
        return self.precedences.get(self.current_token.type, Precedence.LOWEST)

    # Prefix parsers (tokens that can start expressions)

    def _parse_identifier(self) -> Identifier:
        token = self.current_token
        return Identifier(token.literal, token.location)

    def _parse_integer_literal(self) -> Optional[IntegerLiteral]:
        """Convert the digit text of the current token to an unsigned 64-bit value."""
        token = self.current_token
        text = token.literal
        digits = text.lstrip("0") or "0"

        # Length check first: int() refuses very long digit strings
        if (not (text.isascii() and text.isdigit())
                or len(digits) > MAX_INTEGER_DIGITS
                or int(digits) > MAX_INTEGER):
            self._error(create_invalid_integer_error(text, token.location))
            return None

        return IntegerLiteral(int(digits), token.location)

    def _parse_boolean_literal(self) -> BooleanLiteral:
        token = self.current_token
        return BooleanLiteral(token.type == TokenType.TRUE, token.location)

    def _parse_prefix_expression(self) -> Optional[PrefixExpression]:
        """Parse ``!x`` / ``-x``; the operand binds at PREFIX precedence."""
        operator_token = self.current_token
        self.next_token()

        operand = self.parse_expression(Precedence.PREFIX)
        if operand is None:
            return None

        return PrefixExpression(
            PrefixOperator.from_token_type(operator_token.type), operand, operator_token.location
        )

    def _parse_grouped_expression(self) -> Optional[Expression]:
        """Parse parenthesized expression."""
        open_paren = self.current_token
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if not self._expect_closing(TokenType.RIGHT_PAREN, open_paren):
            return None
        return expression

    def _parse_if_expression(self) -> Optional[IfExpression]:
        """Parse ``if (<cond>) { ... } [else { ... }]``."""
        start_token = self.current_token

        if not self.expect_peek(TokenType.LEFT_PAREN):
            return None
        open_paren = self.current_token
        self.next_token()

        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self._expect_closing(TokenType.RIGHT_PAREN, open_paren):
            return None

        if not self.expect_peek(TokenType.LEFT_BRACE):
            return None
        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LEFT_BRACE):
                return None
            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(condition, consequence, alternative, start_token.location)

    def _parse_function_literal(self) -> Optional[FunctionLiteral]:
        """Parse ``fn(<params>) { ... }``."""
        start_token = self.current_token

        if not self.expect_peek(TokenType.LEFT_PAREN):
            return None
        parameters = self._parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LEFT_BRACE):
            return None
        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(parameters, body, start_token.location)

    def _parse_function_parameters(self) -> Optional[Tuple[Identifier, ...]]:
        open_paren = self.current_token
        parameters: List[Identifier] = []

        if self.peek_token_is(TokenType.RIGHT_PAREN):
            self.next_token()
            return ()

        if not self.expect_peek(TokenType.IDENTIFIER):
            return None
        parameters.append(self._parse_identifier())

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENTIFIER):
                return None
            parameters.append(self._parse_identifier())

        if not self._expect_closing(TokenType.RIGHT_PAREN, open_paren):
            return None
        return tuple(parameters)

    # Infix parsers (binary operators and calls)

    def _parse_infix_expression(self, left: Expression) -> Optional[InfixExpression]:
        """Parse a left-associative binary operation."""
        operator_token = self.current_token
        precedence = self.current_precedence()
        self.next_token()

        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(
            left, InfixOperator.from_token_type(operator_token.type), right, left.location
        )

    def _parse_call_expression(self, function: Expression) -> Optional[CallExpression]:
        """Parse ``<function>(<args>)``; the current token is the opening paren."""
        arguments = self._parse_expression_list(TokenType.RIGHT_PAREN)
        if arguments is None:
            return None
        return CallExpression(function, arguments, function.location)

    def _parse_expression_list(self, end: TokenType) -> Optional[Tuple[Expression, ...]]:
        open_token = self.current_token
        items: List[Expression] = []

        if self.peek_token_is(end):
            self.next_token()
            return ()

        self.next_token()
        item = self.parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            item = self.parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self._expect_closing(end, open_token):
            return None
        return tuple(items)

    # Utility methods

    def next_token(self):
        """Shift peek into current and pull a fresh token into peek."""
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def current_token_is(self, token_type: TokenType) -> bool:
        return self.current_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> bool:
        """
        Advance if the next token has the expected type.

        Otherwise record a diagnostic and leave the cursor where it is; the
        caller must abandon the current sub-parse.
        """
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self._error(create_unexpected_token_error(token_type, self.peek_token))
        return False

    def has_errors(self) -> bool:
        """Check if the parser recorded any error-severity diagnostics."""
        return any(diagnostic.is_error for diagnostic in self.errors)

    def _expect_closing(self, closing: TokenType, opening: Token) -> bool:
        """Like ``expect_peek``, but report running off the end as an unclosed delimiter."""
        if self.peek_token_is(TokenType.EOF):
            self._error(create_unclosed_delimiter_error(opening.literal, opening.location, self.peek_token))
            return False
        return self.expect_peek(closing)

    def _skip_optional_semicolon(self):
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

    def _synchronize(self, boundaries: FrozenSet[TokenType]):
        """Skip tokens until the current one is a recovery boundary."""
        while self.current_token.type not in boundaries:
            self.next_token()

    def _error(self, diagnostic: Diagnostic):
        logger.debug("%s: %s", diagnostic.location, diagnostic.message)
        self.errors.append(diagnostic)


def parse(source: str, filename: str = "<string>") -> Tuple[Program, List[Diagnostic]]:
    """
    Parse a source string.

    Never raises for malformed input. An empty diagnostics list means the
    parse was clean; otherwise the Program holds whatever statements could
    be built.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        (Program, diagnostics)
    """
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    return program, list(parser.errors)


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to parse a source string strictly.

    Raises:
        ParseError: If any diagnostic was recorded
    """
    program, diagnostics = parse(source, filename)
    if diagnostics:
        raise ParseError(diagnostics)
    return program


def parse_file(filepath: str) -> Program:
    """
    Convenience function to parse a source file strictly.

    Raises:
        ParseError: If any diagnostic was recorded
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
