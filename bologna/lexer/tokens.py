"""
Token definitions for the Bologna lexer.

The language is small: numbers, identifiers, two keywords and single
character symbols. Anything the lexer doesn't recognize is still handed to
the parser as a one-character token so the precedence table decides whether
it is an operator.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class TokenKind(Enum):
    """Enumeration of all token kinds in Bologna."""

    EOF = auto()                    # End of input (returned forever once reached)

    # Literals
    NUMBER = auto()                 # 42, 3.14, .5

    # Identifiers and keywords
    IDENTIFIER = auto()             # foo, x1
    DEF = auto()                    # def
    EXTERN = auto()                 # extern

    # Single characters
    SYMBOL = auto()                 # + - * / ( ) , ; <
    INVALID = auto()                # any other character


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and debugging information.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token.

    Contains the token kind, lexeme (raw text), numeric value for numbers
    and the source location of its first character.
    """
    kind: TokenKind
    lexeme: str                     # Raw text from source
    numeric_value: Optional[float]  # Only set for NUMBER tokens
    location: SourceLocation

    def __str__(self) -> str:
        if self.numeric_value is not None:
            return f"{self.kind.name}({self.lexeme!r} -> {self.numeric_value!r})"
        return f"{self.kind.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.kind.name}, {self.lexeme!r}, "
                f"{self.numeric_value!r}, {self.location!r})")

    @property
    def position(self) -> int:
        """Offset of the first character of this token."""
        return self.location.offset

    @property
    def is_keyword(self) -> bool:
        return self.kind in KEYWORDS.values()

    @property
    def is_eof(self) -> bool:
        return self.kind == TokenKind.EOF

    def is_char(self, char: str) -> bool:
        """Check if this is the single-character token ``char``."""
        return self.kind in CHAR_KINDS and self.lexeme == char


KEYWORDS = {
    "def": TokenKind.DEF,
    "extern": TokenKind.EXTERN,
}

# Characters the language itself uses. Everything else becomes INVALID but is
# still a valid candidate for a user supplied binary operator.
SYMBOLS = frozenset("+-*/(),;<")

CHAR_KINDS = frozenset({TokenKind.SYMBOL, TokenKind.INVALID})

# Same set as C isspace() in the default locale
WHITESPACE = frozenset(" \t\n\r\v\f")
