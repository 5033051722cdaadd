"""
Diagnostics for the Bologna lexer.

The lexer never fails: every input produces a token stream. Suspicious
input (a numeric literal that isn't well formed) is reported as a warning
carrying the source location.

Author: xwest
"""

from typing import Optional, List
from dataclasses import dataclass

from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """Base class for diagnostics (errors, warnings, info)."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning", "info"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerWarning:
    """
    Represents a lexer warning. Scanning always continues.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


LEXER_WARNING_CODES = {
    "L001": "Malformed numeric literal",
}


def create_malformed_number_warning(lexeme: str, value: float,
                                    location: SourceLocation) -> LexerWarning:
    """Create a warning for a digit/dot run that only partially parses."""
    return LexerWarning(
        message=f"Malformed numeric literal: '{lexeme}'",
        location=location,
        code="L001",
        help_text=f"Only the leading part was used, the value is {value!r}.",
        suggestions=["Use at most one '.' in a number"]
    )
