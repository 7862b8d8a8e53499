"""
Token definitions for the Monkey lexer.

This module defines every token type the Monkey tokenizer can produce:
- Special tokens (end of input, illegal characters)
- Identifiers and integer literals (payload carried as raw text)
- Operators and delimiters
- Keywords

Integer tokens carry their digit text unconverted; turning that text into a
number (and reporting overflow) is the parser's job.
"""

from enum import Enum, auto
from dataclasses import dataclass, field


class TokenType(Enum):
    """
    Enumeration of all token types in Monkey.

    This is the payload-free projection of a token, used for table lookups
    and for comparisons that should ignore the token text.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input (repeatable)
    ILLEGAL = auto()                # Unrecognized byte

    # ========================================================================
    # Identifiers and Literals
    # ========================================================================
    IDENTIFIER = auto()             # foo, add, _tmp
    INTEGER = auto()                # 42 (digits only, not yet converted)

    # ========================================================================
    # Operators
    # ========================================================================
    ASSIGN = auto()                 # =
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    BANG = auto()                   # !
    ASTERISK = auto()               # *
    SLASH = auto()                  # /

    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=

    # ========================================================================
    # Delimiters
    # ========================================================================
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ;
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }

    # ========================================================================
    # Keywords
    # ========================================================================
    FUNCTION = auto()               # fn
    LET = auto()                    # let
    TRUE = auto()                   # true
    FALSE = auto()                  # false
    IF = auto()                     # if
    ELSE = auto()                   # else
    RETURN = auto()                 # return


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Line and column are 1-based; offset is the byte offset from the start of
    the input.
    """
    filename: str
    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Monkey language.

    ``literal`` holds the payload text for identifiers, integers and illegal
    characters, and the fixed lexeme for everything else. The source location
    does not take part in equality: two tokens are equal when their type and
    text match.
    """
    type: TokenType
    literal: str
    location: SourceLocation = field(
        default=SourceLocation("<unknown>", 0, 0, 0), compare=False
    )

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "EOF"
        return f"{self.type.name}({self.literal!r})"

    def render(self) -> str:
        """Return source text that scans back to a token of the same type."""
        if self.type in PAYLOAD_TYPES:
            return self.literal
        return LEXEMES.get(self.type, "")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORD_TYPES

    @property
    def is_operator(self) -> bool:
        """Check if this token is an operator or delimiter."""
        return self.type in OPERATOR_TYPES

    @property
    def is_identifier(self) -> bool:
        """Check if this token is an identifier."""
        return self.type == TokenType.IDENTIFIER


# Lookup tables used by the lexer for keyword/operator recognition

KEYWORDS = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
}

OPERATORS = {
    # Two-character operators
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,

    # Single-character operators
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "!": TokenType.BANG,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LESS_THAN,
    ">": TokenType.GREATER_THAN,

    # Delimiters
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
}

# Canonical text for every fixed-lexeme token type
LEXEMES = {token_type: text for text, token_type in {**OPERATORS, **KEYWORDS}.items()}

KEYWORD_TYPES = frozenset(KEYWORDS.values())
OPERATOR_TYPES = frozenset(OPERATORS.values())

# Token types whose literal is taken from the source rather than a fixed lexeme
PAYLOAD_TYPES = frozenset({TokenType.IDENTIFIER, TokenType.INTEGER, TokenType.ILLEGAL})
