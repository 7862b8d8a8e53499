"""
Monkey Parser Package

Implements a Pratt-based recursive descent parser for the Monkey language.

Key Features:
- Top-down operator precedence (Pratt parsing) over open handler tables
- Immutable, structurally comparable AST nodes
- Diagnostics collected instead of raised, with statement-level resynchronization
"""

from .ast_nodes import (
    ASTNode, Statement, Expression, Program,
    LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, BooleanLiteral, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression,
    PrefixOperator, InfixOperator, walk,
)
from .parser import Parser, Precedence, parse, parse_string, parse_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "Statement", "Expression", "Program",
    "LetStatement", "ReturnStatement", "ExpressionStatement", "BlockStatement",
    "Identifier", "IntegerLiteral", "BooleanLiteral", "PrefixExpression",
    "InfixExpression", "IfExpression", "FunctionLiteral", "CallExpression",
    "PrefixOperator", "InfixOperator", "walk",

    # Error handling
    "ParseError",
]
