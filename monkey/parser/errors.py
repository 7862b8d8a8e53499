"""
Error handling for the Monkey parser.

Parse failures are recorded as ``Diagnostic`` values rather than raised; the
factories below build those records. ``ParseError`` exists only for the
strict convenience entry points that want an exception instead of a list.
"""

from typing import List, Optional

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic, describe_illegal_character


class ParseError(Exception):
    """
    Raised by the strict parsing helpers when any diagnostic was recorded.

    Carries every diagnostic from the failed parse; ``str()`` renders the
    first one.
    """

    def __init__(self, diagnostics: List[Diagnostic]):
        super().__init__(diagnostics[0].message if diagnostics else "parse failed")
        self.diagnostics = diagnostics

    @property
    def diagnostic(self) -> Optional[Diagnostic]:
        return self.diagnostics[0] if self.diagnostics else None

    def __str__(self) -> str:
        if not self.diagnostics:
            return "parse failed"
        result = str(self.diagnostics[0])
        if len(self.diagnostics) > 1:
            result += f"  ({len(self.diagnostics) - 1} more error(s))\n"
        return result


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.

    After a statement fails to parse, the parser skips tokens until one of
    ``STATEMENT_BOUNDARIES`` and resumes from there, so several errors can be
    collected in a single pass.
    """

    STATEMENT_BOUNDARIES = frozenset({
        TokenType.SEMICOLON,
        TokenType.EOF,
    })

    # Inside a block a closing brace also ends the damaged statement
    BLOCK_BOUNDARIES = STATEMENT_BOUNDARIES | {TokenType.RIGHT_BRACE}

    @staticmethod
    def suggest_missing_token(expected: TokenType) -> List[str]:
        """Suggest what token might be missing."""
        token_suggestions = {
            TokenType.IDENTIFIER: ["Add a name, e.g. 'let x = ...'"],
            TokenType.ASSIGN: ["Add an assignment operator '='"],
            TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
            TokenType.RIGHT_BRACE: ["Add a closing brace '}'"],
            TokenType.LEFT_PAREN: ["Add an opening parenthesis '('"],
            TokenType.LEFT_BRACE: ["Add an opening brace '{' to start a block"],
        }

        return list(token_suggestions.get(expected, []))


# Helper functions for creating common parser diagnostics

def create_unexpected_token_error(expected: TokenType, found: Token) -> Diagnostic:
    """The grammar required ``expected`` next but ``found`` was there instead."""
    return Diagnostic(
        message=f"expected next token to be {expected.name}, got {found} instead",
        location=found.location,
        severity="error",
        code="P001",
        help_text=f"The parser expected to see {expected.name} at this position.",
        suggestions=SyntaxErrorRecovery.suggest_missing_token(expected),
        expected=expected,
        found=found,
    )


def create_no_prefix_parse_error(found: Token) -> Diagnostic:
    """``found`` cannot start an expression."""
    if found.type == TokenType.ILLEGAL:
        code = "L001"
        help_text = describe_illegal_character(found.literal)
    elif found.type == TokenType.EOF:
        code = "P002"
        help_text = "The input ended where an expression was expected."
    else:
        code = "P002"
        help_text = f"'{found.render()}' cannot start an expression."

    return Diagnostic(
        message=f"no prefix parse function for {found.type.name} found",
        location=found.location,
        severity="error",
        code=code,
        help_text=help_text,
        found=found,
    )


def create_invalid_integer_error(text: str, location: SourceLocation) -> Diagnostic:
    """``text`` does not fit an unsigned 64-bit integer."""
    return Diagnostic(
        message=f"could not parse {text} as integer",
        location=location,
        severity="error",
        code="P003",
        help_text="Integer literals must fit in an unsigned 64-bit value (at most 18446744073709551615).",
    )


def create_unclosed_delimiter_error(delimiter: str, open_location: SourceLocation,
                                    found: Token) -> Diagnostic:
    """An opening ``delimiter`` was never closed."""
    closing = {"(": ")", "{": "}"}.get(delimiter, delimiter)

    return Diagnostic(
        message=f"unclosed delimiter '{delimiter}'",
        location=found.location,
        severity="error",
        code="P004",
        help_text=f"The opening '{delimiter}' at {open_location} was never closed.",
        suggestions=[f"Add a closing '{closing}'"],
        found=found,
    )


def create_nesting_too_deep_error(found: Token, limit: int) -> Diagnostic:
    """Expressions nest more than ``limit`` levels deep at ``found``."""
    return Diagnostic(
        message=f"expression nested too deeply (more than {limit} levels)",
        location=found.location,
        severity="error",
        code="P005",
        help_text="Split the expression into smaller pieces bound with 'let'.",
        found=found,
    )
