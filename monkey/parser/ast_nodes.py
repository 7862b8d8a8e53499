"""
Abstract Syntax Tree node definitions for Monkey.

Nodes are frozen dataclasses: immutable once built, compared structurally,
and rendered back to fully parenthesized source text by ``str()``. Each node
may carry the source location of its first token; locations do not take
part in equality.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..lexer.tokens import SourceLocation, TokenType


class PrefixOperator(Enum):
    """Unary operators."""
    NOT = "!"
    NEGATE = "-"

    @classmethod
    def from_token_type(cls, token_type: TokenType) -> "PrefixOperator":
        return _PREFIX_OPERATORS[token_type]


class InfixOperator(Enum):
    """Binary operators."""
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    EQUAL = "=="
    NOT_EQUAL = "!="

    @classmethod
    def from_token_type(cls, token_type: TokenType) -> "InfixOperator":
        return _INFIX_OPERATORS[token_type]


_PREFIX_OPERATORS = {
    TokenType.BANG: PrefixOperator.NOT,
    TokenType.MINUS: PrefixOperator.NEGATE,
}

_INFIX_OPERATORS = {
    TokenType.PLUS: InfixOperator.PLUS,
    TokenType.MINUS: InfixOperator.MINUS,
    TokenType.ASTERISK: InfixOperator.MULTIPLY,
    TokenType.SLASH: InfixOperator.DIVIDE,
    TokenType.LESS_THAN: InfixOperator.LESS_THAN,
    TokenType.GREATER_THAN: InfixOperator.GREATER_THAN,
    TokenType.EQUAL: InfixOperator.EQUAL,
    TokenType.NOT_EQUAL: InfixOperator.NOT_EQUAL,
}


def _location() -> Any:
    return field(default=None, compare=False, repr=False)


class ASTNode:
    """Base class for all AST nodes."""

    def children(self) -> List["ASTNode"]:
        """Get all child nodes, in source order."""
        return []


class Statement(ASTNode):
    """Base class for statements."""


class Expression(ASTNode):
    """Base class for expressions."""


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    """Identifier expression."""
    name: str
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    """Unsigned 64-bit integer literal."""
    value: int
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    """Unary operation, e.g. ``!ok`` or ``-x``."""
    operator: PrefixOperator
    operand: Expression
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return f"({self.operator.value}{self.operand})"

    def children(self) -> List[ASTNode]:
        return [self.operand]


@dataclass(frozen=True)
class InfixExpression(Expression):
    """Binary operation."""
    left: Expression
    operator: InfixOperator
    right: Expression
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return f"({self.left} {self.operator.value} {self.right})"

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True)
class IfExpression(Expression):
    """Conditional expression with an optional else block."""
    condition: Expression
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        result = f"if {self.condition} {self.consequence}"
        if self.alternative is not None:
            result += f" else {self.alternative}"
        return result

    def children(self) -> List[ASTNode]:
        nodes: List[ASTNode] = [self.condition, self.consequence]
        if self.alternative is not None:
            nodes.append(self.alternative)
        return nodes


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    """Function literal: ``fn(x, y) { x + y; }``."""
    parameters: Tuple[Identifier, ...]
    body: "BlockStatement"
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"

    def children(self) -> List[ASTNode]:
        return [*self.parameters, self.body]


@dataclass(frozen=True)
class CallExpression(Expression):
    """Function call."""
    function: Expression
    arguments: Tuple[Expression, ...]
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"

    def children(self) -> List[ASTNode]:
        return [self.function, *self.arguments]


# ============================================================================
# Statements
# ============================================================================

@dataclass(frozen=True)
class LetStatement(Statement):
    """Binding: ``let <name> = <value>;``."""
    name: Identifier
    value: Expression
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"

    def children(self) -> List[ASTNode]:
        return [self.name, self.value]


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Expression
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return f"return {self.value};"

    def children(self) -> List[ASTNode]:
        return [self.value]


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """An expression evaluated for its effect."""
    expression: Expression
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        return str(self.expression)

    def children(self) -> List[ASTNode]:
        return [self.expression]


@dataclass(frozen=True)
class BlockStatement(Statement):
    """Brace-delimited statement sequence."""
    statements: Tuple[Statement, ...]
    location: Optional[SourceLocation] = _location()

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + " ".join(str(s) for s in self.statements) + " }"

    def children(self) -> List[ASTNode]:
        return list(self.statements)


# ============================================================================
# Top-level
# ============================================================================

@dataclass(frozen=True)
class Program(ASTNode):
    """Root AST node representing a complete program."""
    statements: Tuple[Statement, ...]

    def __str__(self) -> str:
        return " ".join(str(s) for s in self.statements)

    def children(self) -> List[ASTNode]:
        return list(self.statements)


Node = Union[Program, Statement, Expression]


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Pre-order traversal of ``node`` and all of its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))
