"""
Error handling for the Bologna parser.

Every syntax error is a ParseError carrying its kind, the location where
parsing stopped and a Diagnostic for reporting. Productions never recover on
their own; the error travels up to the top-level entry point, which applies
one of the RecoveryMode strategies.

Author: xwest
"""

from enum import Enum
from typing import Optional, List

from ..lexer.tokens import Token, TokenKind, SourceLocation
from ..lexer.errors import Diagnostic


class ParseErrorKind(Enum):
    """Kinds of syntax error, with their code and default message."""

    UNEXPECTED_TOKEN = ("P001", "unknown token when expecting an expression")
    EXPECTED_CLOSE_PAREN = ("P002", "expected ')'")
    EXPECTED_ARGUMENT_SEPARATOR = ("P003", "expected ')' or ',' in argument list")
    EXPECTED_FUNCTION_NAME = ("P004", "expected function name in prototype")
    EXPECTED_OPEN_PAREN = ("P005", "expected '(' in prototype")
    EXPECTED_CLOSE_PAREN_IN_PROTOTYPE = ("P006", "expected ')' in prototype")
    NESTING_TOO_DEEP = ("P007", "expression nested too deeply")

    def __init__(self, code: str, default_message: str):
        self.code = code
        self.default_message = default_message


class RecoveryMode(Enum):
    """How the top-level entry point resumes after a syntax error."""

    SKIP_TOKEN = "skip-token"       # drop the lookahead token and carry on
    SYNCHRONIZE = "synchronize"     # drop tokens up to the next ';' or EOF


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        location: SourceLocation,
        token: Optional[Token] = None,
        message: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        message = message or kind.default_message
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.token = token
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=kind.code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def position(self) -> int:
        """Offset of the token at which parsing stopped."""
        return self.location.offset

    def __str__(self) -> str:
        return str(self.diagnostic)


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.
    """

    # Token kinds at which SYNCHRONIZE stops discarding
    STATEMENT_BOUNDARIES = {
        TokenKind.EOF,
    }
    STATEMENT_TERMINATOR = ";"

    @staticmethod
    def is_statement_boundary(token: Token) -> bool:
        return (token.kind in SyntaxErrorRecovery.STATEMENT_BOUNDARIES or
                token.is_char(SyntaxErrorRecovery.STATEMENT_TERMINATOR))

    @staticmethod
    def describe(token: Token) -> str:
        """Human readable name of a token for messages."""
        if token.kind == TokenKind.EOF:
            return "end of input"
        return f"'{token.lexeme}'"


# Common parser error codes for categorization
PARSER_ERROR_CODES = {kind.code: kind.default_message for kind in ParseErrorKind}


# Helper functions for creating common parser errors

def create_unexpected_token_error(found: Token) -> ParseError:
    """Create an error for a token that starts no expression."""
    return ParseError(
        ParseErrorKind.UNEXPECTED_TOKEN,
        found.location,
        token=found,
        help_text=f"Found {SyntaxErrorRecovery.describe(found)}; an expression starts "
                  f"with a number, an identifier or '('."
    )


def create_expected_token_error(kind: ParseErrorKind, found: Token) -> ParseError:
    """Create an error for a missing piece of syntax."""
    return ParseError(
        kind,
        found.location,
        token=found,
        help_text=f"Found {SyntaxErrorRecovery.describe(found)} instead."
    )


def create_nesting_too_deep_error(found: Token, limit: int) -> ParseError:
    """Create an error for an expression nested past the parser's limit."""
    return ParseError(
        ParseErrorKind.NESTING_TOO_DEEP,
        found.location,
        token=found,
        help_text=f"Expressions may nest at most {limit} levels deep."
    )
