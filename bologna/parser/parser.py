"""
Bologna Parser Implementation

Recursive descent parser with a single token of lookahead. Binary
expressions are parsed by precedence climbing over a table mapping operator
characters to binding strength, so adding an operator means adding a table
entry rather than a grammar rule.

    top        ::= definition | external | expression | ';'
    definition ::= 'def' prototype expression
    external   ::= 'extern' prototype
    prototype  ::= identifier '(' identifier* ')'
    expression ::= primary binoprhs
    binoprhs   ::= (binop primary)*
    primary    ::= identifierexpr | numberexpr | parenexpr

Author: xwest
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenKind
from .ast_nodes import (
    ANONYMOUS_FUNCTION_NAME, BinaryOp, Call, Expression, Function,
    NumberLiteral, Program, Prototype, TopLevelNode, VariableReference
)
from .errors import (
    ParseError, ParseErrorKind, RecoveryMode, SyntaxErrorRecovery,
    create_expected_token_error, create_nesting_too_deep_error,
    create_unexpected_token_error
)

logger = logging.getLogger(__name__)


# Four-operator set without division; '/' lexes but is not a binary operator here.
CLASSIC_BINOP_PRECEDENCE = MappingProxyType({
    '<': 10,
    '+': 20,
    '-': 20,
    '*': 40,
})

# 1 is lowest precedence. Only the relative order matters.
DEFAULT_BINOP_PRECEDENCE = MappingProxyType({
    **CLASSIC_BINOP_PRECEDENCE,
    '/': 40,
})

NO_PRECEDENCE = -1

# Each level of parentheses or call arguments costs a few Python frames,
# this keeps the deepest accepted input well inside the recursion limit.
MAX_NESTING_DEPTH = 100


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one top-level unit: a node or an error."""
    node: Optional[TopLevelNode] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Parser:
    """
    Bologna parser.

    Pulls tokens from a lexer one at a time and builds one top-level node
    per call to parse_next_top_level_unit().
    """

    def __init__(self, lexer: Lexer,
                 precedence: Optional[Mapping[str, int]] = None,
                 recovery: RecoveryMode = RecoveryMode.SKIP_TOKEN,
                 max_depth: int = MAX_NESTING_DEPTH):
        """
        Initialize the parser and prime the lookahead token.

        Args:
            lexer: Anything with a next_token() method
            precedence: Operator character -> precedence, defaults to
                DEFAULT_BINOP_PRECEDENCE
            recovery: Strategy applied after a syntax error
            max_depth: Deepest expression nesting accepted before a
                NESTING_TOO_DEEP error

        Raises:
            ValueError: If the precedence table is malformed
        """
        if precedence is None:
            precedence = DEFAULT_BINOP_PRECEDENCE
        self._validate_precedence(precedence)

        self.lexer = lexer
        self.precedence: Mapping[str, int] = MappingProxyType(dict(precedence))
        self.recovery = recovery
        self.max_depth = max_depth
        self._depth = 0
        self.errors: List[ParseError] = []
        self.current_token: Token = self.advance()

    @staticmethod
    def _validate_precedence(precedence: Mapping[str, int]):
        for op, prec in precedence.items():
            if not isinstance(op, str) or len(op) != 1 or not op.isascii():
                raise ValueError(f"Binary operator must be a single ASCII character, got {op!r}")
            if op.isalnum() or op in "(),;#." or op.isspace():
                raise ValueError(f"{op!r} cannot be used as a binary operator")
            if isinstance(prec, bool) or not isinstance(prec, int) or prec <= 0:
                raise ValueError(f"Precedence of {op!r} must be a positive integer, got {prec!r}")

    def advance(self) -> Token:
        """Read the next token from the lexer into the lookahead."""
        self.current_token = self.lexer.next_token()
        return self.current_token

    def get_token_precedence(self) -> int:
        """Precedence of the pending binary operator token, or -1."""
        token = self.current_token
        if token.kind not in (TokenKind.SYMBOL, TokenKind.INVALID):
            return NO_PRECEDENCE
        if not token.lexeme.isascii():
            return NO_PRECEDENCE
        return self.precedence.get(token.lexeme, NO_PRECEDENCE)

    # Top level

    def parse_next_top_level_unit(self) -> Optional[ParseResult]:
        """
        Parse the next definition, extern or bare expression.

        Semicolons between units are skipped. Syntax errors are recorded in
        self.errors, recovered from, and returned as a failed ParseResult.

        Returns:
            The result for one unit, or None once the input is exhausted
        """
        while self.current_token.is_char(';'):
            self.advance()

        token = self.current_token
        if token.kind == TokenKind.EOF:
            return None

        try:
            if token.kind == TokenKind.DEF:
                node = self.parse_definition()
                logger.debug("Parsed a function definition: %s", node.name)
            elif token.kind == TokenKind.EXTERN:
                node = self.parse_extern()
                logger.debug("Parsed an extern: %s", node.name)
            else:
                node = self.parse_top_level_expr()
                logger.debug("Parsed a top-level expr")
        except ParseError as e:
            self.errors.append(e)
            self._recover(e)
            return ParseResult(error=e)

        return ParseResult(node=node)

    def __iter__(self) -> Iterator[ParseResult]:
        while True:
            result = self.parse_next_top_level_unit()
            if result is None:
                return
            yield result

    def parse(self) -> Program:
        """
        Parse every remaining top-level unit.

        Units that fail to parse are left out; their errors are in
        self.errors.
        """
        return Program([result.node for result in self if result.ok])

    def _recover(self, error: ParseError):
        """Discard tokens after a syntax error according to self.recovery."""
        logger.debug("recovering from %r at %s using %s",
                     error.message, error.location, self.recovery.value)

        if self.recovery == RecoveryMode.SKIP_TOKEN:
            self.advance()
            return

        while not SyntaxErrorRecovery.is_statement_boundary(self.current_token):
            self.advance()

    def parse_definition(self) -> Function:
        """definition ::= 'def' prototype expression"""
        start = self.current_token
        self.advance()  # eat def
        prototype = self.parse_prototype()
        body = self.parse_expression()
        return Function(prototype, body, location=start.location)

    def parse_extern(self) -> Prototype:
        """external ::= 'extern' prototype"""
        self.advance()  # eat extern
        return self.parse_prototype()

    def parse_top_level_expr(self) -> Function:
        """Wrap a bare expression in a zero-parameter anonymous function."""
        start = self.current_token
        body = self.parse_expression()
        prototype = Prototype(ANONYMOUS_FUNCTION_NAME, (), location=start.location)
        return Function(prototype, body, location=start.location)

    def parse_prototype(self) -> Prototype:
        """prototype ::= identifier '(' identifier* ')'"""
        name_token = self.current_token
        if name_token.kind != TokenKind.IDENTIFIER:
            raise create_expected_token_error(ParseErrorKind.EXPECTED_FUNCTION_NAME, name_token)

        if not self.advance().is_char('('):
            raise create_expected_token_error(ParseErrorKind.EXPECTED_OPEN_PAREN, self.current_token)

        # Parameter names are separated by whitespace only, no commas
        parameter_names = []
        while self.advance().kind == TokenKind.IDENTIFIER:
            parameter_names.append(self.current_token.lexeme)

        if not self.current_token.is_char(')'):
            raise create_expected_token_error(
                ParseErrorKind.EXPECTED_CLOSE_PAREN_IN_PROTOTYPE, self.current_token
            )
        self.advance()  # eat ')'

        return Prototype(name_token.lexeme, parameter_names, location=name_token.location)

    # Expressions

    def parse_expression(self) -> Expression:
        """expression ::= primary binoprhs"""
        if self._depth >= self.max_depth:
            raise create_nesting_too_deep_error(self.current_token, self.max_depth)

        self._depth += 1
        try:
            left = self.parse_primary()
            return self.parse_bin_op_rhs(0, left)
        finally:
            self._depth -= 1

    def parse_bin_op_rhs(self, min_precedence: int, left: Expression) -> Expression:
        """
        Absorb binary operators binding at least as tightly as min_precedence.

        An operator of equal precedence to the one on the left is left for
        the enclosing loop, which makes every operator left-associative.
        """
        while True:
            token_precedence = self.get_token_precedence()

            if token_precedence < min_precedence:
                return left

            operator_token = self.current_token
            self.advance()  # eat binop

            right = self.parse_primary()

            # If the operator after right binds tighter, let it take right
            # as its left operand first.
            if token_precedence < self.get_token_precedence():
                right = self.parse_bin_op_rhs(token_precedence + 1, right)

            left = BinaryOp(operator_token.lexeme, left, right,
                            location=operator_token.location)

    def parse_primary(self) -> Expression:
        """primary ::= identifierexpr | numberexpr | parenexpr"""
        token = self.current_token
        if token.kind == TokenKind.IDENTIFIER:
            return self.parse_identifier_expr()
        if token.kind == TokenKind.NUMBER:
            return self.parse_number_expr()
        if token.is_char('('):
            return self.parse_paren_expr()
        raise create_unexpected_token_error(token)

    def parse_number_expr(self) -> NumberLiteral:
        """numberexpr ::= number"""
        token = self.current_token
        self.advance()  # consume the number
        return NumberLiteral(token.numeric_value, location=token.location)

    def parse_paren_expr(self) -> Expression:
        """parenexpr ::= '(' expression ')'"""
        self.advance()  # eat (
        expr = self.parse_expression()

        if not self.current_token.is_char(')'):
            raise create_expected_token_error(ParseErrorKind.EXPECTED_CLOSE_PAREN, self.current_token)
        self.advance()  # eat )
        return expr

    def parse_identifier_expr(self) -> Expression:
        """
        identifierexpr
          ::= identifier
          ::= identifier '(' expression (',' expression)* ')'
          ::= identifier '(' ')'
        """
        name_token = self.current_token
        self.advance()  # eat identifier

        if not self.current_token.is_char('('):
            return VariableReference(name_token.lexeme, location=name_token.location)

        self.advance()  # eat (
        arguments = []
        if not self.current_token.is_char(')'):
            while True:
                arguments.append(self.parse_expression())

                if self.current_token.is_char(')'):
                    break

                if not self.current_token.is_char(','):
                    raise create_expected_token_error(
                        ParseErrorKind.EXPECTED_ARGUMENT_SEPARATOR, self.current_token
                    )
                self.advance()  # eat ,

        self.advance()  # eat )
        return Call(name_token.lexeme, arguments, location=name_token.location)


def parse_string(source: str, filename: str = "<string>", **kwargs) -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        **kwargs: Passed on to Parser (precedence, recovery)

    Returns:
        Program AST

    Raises:
        ParseError: The first syntax error, if any
    """
    parser = Parser(Lexer(source, filename), **kwargs)
    program = parser.parse()

    if parser.errors:
        raise parser.errors[0]

    return program


def parse_file(filepath: str, **kwargs) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        ParseError: The first syntax error, if any
        OSError: If file cannot be read
    """
    with open(filepath, 'r', encoding='ascii', errors='replace') as f:
        source = f.read()

    return parse_string(source, filepath, **kwargs)
