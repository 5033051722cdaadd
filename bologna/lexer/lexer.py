"""
Bologna Lexer - turns a character source into tokens, one per call.

Reads one character at a time so it works the same on a string and on an
interactive stream like stdin: it never reads past the token it returns,
apart from the single character of lookahead it keeps between calls.

xwest
"""

import logging
import re
from io import StringIO
from typing import List, TextIO, Union

from .tokens import (
    Token, TokenKind, SourceLocation, KEYWORDS, SYMBOLS, WHITESPACE
)
from .errors import Diagnostic, LexerWarning, create_malformed_number_warning

logger = logging.getLogger(__name__)

# Longest prefix strtod() would accept from a digit/dot run
_NUMBER_PREFIX = re.compile(r'\d+(?:\.\d*)?|\.\d+')


class Lexer:
    """
    Bologna lexical analyzer.

    Call next_token() repeatedly; once EOF has been returned every further
    call returns EOF again. The lexer never raises on bad input, unknown
    characters come back as single-character INVALID tokens.
    """

    def __init__(self, source: Union[str, TextIO], filename: str = "<stdin>"):
        """
        Initialize the lexer.

        Args:
            source: Source code string, or a text stream read with read(1)
            filename: Name of source for error reporting
        """
        if isinstance(source, str):
            source = StringIO(source)
        self.stream = source
        self.filename = filename
        self.warnings: List[LexerWarning] = []

        # The current unconsumed character. Starts as a space so the first
        # call reads lazily, '' means end of input.
        self._current = ' '
        self._offset = -1
        self._line = 1
        self._column = 0

    def next_token(self) -> Token:
        """Scan and return the next token."""
        while True:
            self._skip_whitespace()

            if self._current != '#':
                break

            # Comment until end of line
            while self._current not in ('', '\n', '\r'):
                self._advance()

        location = self._location()

        if self._is_alpha(self._current):
            token = self._scan_identifier_or_keyword(location)
        elif self._is_digit(self._current) or self._current == '.':
            token = self._scan_number(location)
        elif self._current == '':
            # Don't eat the end of input
            token = Token(TokenKind.EOF, "", None, location)
        else:
            char = self._current
            self._advance()
            kind = TokenKind.SYMBOL if char in SYMBOLS else TokenKind.INVALID
            token = Token(kind, char, None, location)

        logger.debug("token %s at %s", token, location)
        return token

    def tokenize(self) -> List[Token]:
        """
        Scan the remaining input.

        Returns:
            List of tokens ending with a single EOF token
        """
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                return tokens

    def __iter__(self):
        """Iterate over the tokens up to, but not including, EOF."""
        while True:
            token = self.next_token()
            if token.kind == TokenKind.EOF:
                return
            yield token

    def _scan_identifier_or_keyword(self, location: SourceLocation) -> Token:
        """Scan [a-zA-Z][a-zA-Z0-9]* and reclassify keywords."""
        chars = [self._current]
        self._advance()
        while self._is_alnum(self._current):
            chars.append(self._current)
            self._advance()

        lexeme = ''.join(chars)
        kind = KEYWORDS.get(lexeme, TokenKind.IDENTIFIER)
        return Token(kind, lexeme, None, location)

    def _scan_number(self, location: SourceLocation) -> Token:
        """Scan a [0-9.]+ run into a NUMBER token."""
        chars = []
        while self._is_digit(self._current) or self._current == '.':
            chars.append(self._current)
            self._advance()

        lexeme = ''.join(chars)
        match = _NUMBER_PREFIX.match(lexeme)
        value = float(match.group(0)) if match else 0.0

        if match is None or match.end() != len(lexeme):
            warning = create_malformed_number_warning(lexeme, value, location)
            self.warnings.append(warning)
            logger.debug("malformed number %r at %s, using %r", lexeme, location, value)

        return Token(TokenKind.NUMBER, lexeme, value, location)

    def _skip_whitespace(self):
        while self._current in WHITESPACE:
            self._advance()

    def _advance(self):
        """Consume the current character, updating line/column."""
        if self._current == '':
            return
        if self._current == '\n':
            self._line += 1
            self._column = 0
        self._current = self.stream.read(1)
        self._offset += 1
        self._column += 1

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line, self._column, self._offset)

    @staticmethod
    def _is_alpha(char: str) -> bool:
        # str.isalpha() accepts non-ASCII letters, the language doesn't
        return char.isascii() and char.isalpha()

    @staticmethod
    def _is_digit(char: str) -> bool:
        return char.isascii() and char.isdigit()

    @staticmethod
    def _is_alnum(char: str) -> bool:
        return char.isascii() and char.isalnum()

    def has_warnings(self) -> bool:
        """Check if lexer recorded any warnings."""
        return len(self.warnings) > 0

    def get_diagnostics(self) -> List[Diagnostic]:
        """Get all diagnostics recorded so far."""
        return [warning.diagnostic for warning in self.warnings]


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens including the final EOF token
    """
    return Lexer(source, filename).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        OSError: If file cannot be read
    """
    with open(filepath, 'r', encoding='ascii', errors='replace') as f:
        return Lexer(f, filepath).tokenize()
