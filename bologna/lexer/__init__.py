"""
Bologna Lexer Package

Implements the lexical analyzer (tokenizer) for the Bologna language.

Key Features:
- Pull interface: one token per next_token() call
- Works on strings and on interactive text streams
- '#' line comments
- Never fails, unknown characters become single-character tokens
- Source location tracking for diagnostics

Author: xwest
"""

from .tokens import Token, TokenKind, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import Diagnostic, LexerWarning

__all__ = [
    "Lexer",
    "Token",
    "TokenKind",
    "SourceLocation",
    "Diagnostic",
    "LexerWarning",
    "tokenize_string",
    "tokenize_file",
]
