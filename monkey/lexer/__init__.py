"""
Monkey Lexer Package

Implements the lexical analyzer (tokenizer) for the Monkey language.

Key Features:
- Single pass, byte-oriented scanning with one byte of lookahead
- Keyword recognition through a fixed lookup table
- Deferred numeric conversion (integer tokens carry digit text)
- Never fails: unrecognized bytes become ILLEGAL tokens
- Source location tracking for diagnostics
"""

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, OPERATORS, LEXEMES
from .lexer import Lexer, tokenize, tokenize_string, tokenize_file
from .errors import Diagnostic

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "KEYWORDS",
    "OPERATORS",
    "LEXEMES",
    "tokenize",
    "tokenize_string",
    "tokenize_file",
]
