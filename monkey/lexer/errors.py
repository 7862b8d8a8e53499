"""
Diagnostics shared by the Monkey lexer and parser.

The tokenizer itself never fails: an unrecognized byte becomes an ILLEGAL
token. The records defined here describe problems found later, when the
parser meets such a token or any other malformed input.
"""

from typing import Optional, List
from dataclasses import dataclass

from .tokens import SourceLocation, Token, TokenType


@dataclass
class Diagnostic:
    """A recoverable problem found in the source (error, warning, info, hint)."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None
    expected: Optional[TokenType] = None
    found: Optional[Token] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        if self.code:
            severity_prefix += f"[{self.code}]"
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Illegal character",
    "P001": "Unexpected token",
    "P002": "No prefix parse function",
    "P003": "Invalid integer literal",
    "P004": "Unclosed delimiter",
    "P005": "Expression nested too deeply",
}


def describe_illegal_character(text: str) -> str:
    """Help text for an ILLEGAL token carrying ``text``."""
    if text == "\ufffd":
        return "Non-ASCII bytes are not valid in Monkey source code."
    if text.isprintable():
        return f"The character '{text}' is not valid in Monkey source code."
    return f"Non-printable character (U+{ord(text):04X}) is not allowed."
