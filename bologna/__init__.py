"""
Bologna Front End Package

Tokenizer and parser for Bologna, a small language of arithmetic
expressions, function definitions and extern declarations. Produces an AST
for a later compilation stage to consume.

Architecture:
    bologna/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax analysis and AST generation
    └── repl.py          # Interactive read-parse loop

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__license__ = "MIT"

from .lexer import Lexer, Token, TokenKind, SourceLocation, tokenize_string, tokenize_file
from .parser import (
    Parser, ParseResult, ParseError, ParseErrorKind, RecoveryMode,
    parse_string, parse_file,
    NumberLiteral, VariableReference, BinaryOp, Call, Prototype, Function, Program,
)

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "ParseResult",

    # Tokens
    "Token",
    "TokenKind",
    "SourceLocation",

    # AST
    "NumberLiteral",
    "VariableReference",
    "BinaryOp",
    "Call",
    "Prototype",
    "Function",
    "Program",

    # Errors
    "ParseError",
    "ParseErrorKind",
    "RecoveryMode",

    # Helpers
    "tokenize_string",
    "tokenize_file",
    "parse_string",
    "parse_file",

    # Version info
    "__version__",
    "__author__",
    "__license__",
]
