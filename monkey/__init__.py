"""
Monkey Front End Package

Tokenizer and Pratt parser for Monkey, a small dynamically-typed, C-like
expression language. Evaluation is left to consumers of the AST.

Architecture:
    monkey/
    ├── lexer/           # Tokenization
    └── parser/          # Syntax analysis and AST generation

Entry points:
    tokenize(source)  -> lazy iterator of tokens ending in one EOF
    parse(source)     -> (Program, diagnostics)
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer, Token, TokenType, SourceLocation, Diagnostic, tokenize
from .parser import Parser, Program, ParseError, parse, parse_string

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "Program",
    "ParseError",

    # Entry points
    "tokenize",
    "parse",
    "parse_string",

    # Version info
    "__version__",
    "__license__",
]
