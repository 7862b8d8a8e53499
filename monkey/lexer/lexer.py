"""
Monkey Lexer - turns source text into tokens

A single left-to-right pass over the input bytes. The cursor keeps the byte
under inspection in ``ch`` (0 once the input is exhausted) plus one byte of
peek for the two-character operators.
"""

import logging
from typing import Iterator, List

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, OPERATORS

logger = logging.getLogger(__name__)

WHITESPACE = frozenset(b" \t\n\r")
NEWLINE = ord("\n")


def _is_letter(ch: int) -> bool:
    return ord("a") <= ch <= ord("z") or ord("A") <= ch <= ord("Z") or ch == ord("_")


def _is_digit(ch: int) -> bool:
    return ord("0") <= ch <= ord("9")


class Lexer:
    """
    Monkey lexical analyzer.

    Produces tokens on demand through ``next_token``. Once the input is
    exhausted every further call returns an EOF token, so repeated
    end-of-input queries are safe. Iterating over a lexer yields tokens up to
    and including the first EOF; the stream cannot be rewound.
    """

    def __init__(self, source: str, filename: str = "<string>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.input = source.encode("utf-8")
        self.filename = filename
        self.position = 0
        self.read_position = 0
        self.ch = 0
        self.line = 1
        self._line_start = 0

        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        """
        Tokenize the rest of the input.

        Returns:
            List of tokens ending with exactly one EOF token
        """
        return list(self)

    def next_token(self) -> Token:
        """Scan and return the next token. Never raises."""
        self._skip_whitespace()

        location = self._location()
        ch = self.ch

        if ch == 0 and self.position >= len(self.input):
            return Token(TokenType.EOF, "", location)

        # Identifiers and keywords
        if _is_letter(ch):
            literal = self._read_identifier()
            return Token(KEYWORDS.get(literal, TokenType.IDENTIFIER), literal, location)

        # Integers keep their digit text; conversion happens in the parser
        if _is_digit(ch):
            return Token(TokenType.INTEGER, self._read_integer(), location)

        # Two-character operators need one byte of peek
        two_chars = bytes((ch, self._peek_char())).decode("latin-1")
        if two_chars in OPERATORS:
            self._read_char()
            self._read_char()
            return Token(OPERATORS[two_chars], two_chars, location)

        one_char = chr(ch) if ch < 0x80 else ""
        if one_char in OPERATORS:
            self._read_char()
            return Token(OPERATORS[one_char], one_char, location)

        literal = bytes((ch,)).decode("utf-8", errors="replace")
        logger.debug("illegal character %r at %s", literal, location)
        self._read_char()
        return Token(TokenType.ILLEGAL, literal, location)

    def _read_char(self):
        """Advance one byte; past the end ``ch`` stays pinned to 0."""
        if self.ch == NEWLINE and self.position < len(self.input):
            self.line += 1
            self._line_start = self.read_position

        if self.read_position >= len(self.input):
            self.ch = 0
        else:
            self.ch = self.input[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _peek_char(self) -> int:
        """Peek at the next byte without advancing."""
        if self.read_position >= len(self.input):
            return 0
        return self.input[self.read_position]

    def _skip_whitespace(self):
        while self.ch in WHITESPACE:
            self._read_char()

    def _read_identifier(self) -> str:
        start = self.position
        while _is_letter(self.ch):
            self._read_char()
        return self.input[start:self.position].decode("ascii")

    def _read_integer(self) -> str:
        start = self.position
        while _is_digit(self.ch):
            self._read_char()
        return self.input[start:self.position].decode("ascii")

    def _location(self) -> SourceLocation:
        offset = min(self.position, len(self.input))
        return SourceLocation(self.filename, self.line, offset - self._line_start + 1, offset)


def tokenize(source: str, filename: str = "<string>") -> Iterator[Token]:
    """
    Lazily tokenize a source string.

    Tokens are produced one at a time as the iterator is consumed; the
    sequence ends with exactly one EOF token.
    """
    return iter(Lexer(source, filename))


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string into a list.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens, ending with EOF
    """
    return Lexer(source, filename).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
