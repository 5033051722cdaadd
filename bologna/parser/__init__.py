"""
Bologna Parser Package

Recursive descent parser for the Bologna language with precedence climbing
for binary operators.

Key Features:
- Single token of lookahead, tokens pulled from the lexer on demand
- Table driven operator precedence, left-associative operators
- Immutable AST nodes with source locations
- Per-unit error recovery at the top level

Author: xwest
"""

from .ast_nodes import (
    ANONYMOUS_FUNCTION_NAME, ASTNode, ASTNodeType, ASTPrinter, ASTVisitor,
    BinaryOp, Call, Expression, Function, NumberLiteral, Program, Prototype,
    TopLevelNode, VariableReference, dump
)
from .parser import (
    DEFAULT_BINOP_PRECEDENCE, CLASSIC_BINOP_PRECEDENCE, MAX_NESTING_DEPTH,
    ParseResult, Parser, parse_file, parse_string
)
from .errors import PARSER_ERROR_CODES, ParseError, ParseErrorKind, RecoveryMode

__all__ = [
    # Core parser
    "Parser", "ParseResult", "parse_string", "parse_file",
    "DEFAULT_BINOP_PRECEDENCE", "CLASSIC_BINOP_PRECEDENCE", "MAX_NESTING_DEPTH",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor", "ASTPrinter", "dump",
    "Expression", "NumberLiteral", "VariableReference", "BinaryOp", "Call",
    "Prototype", "Function", "Program", "TopLevelNode",
    "ANONYMOUS_FUNCTION_NAME",

    # Error handling
    "ParseError", "ParseErrorKind", "RecoveryMode", "PARSER_ERROR_CODES",
]
