#!/usr/bin/env python3
"""
Interactive read-parse loop for Bologna.

Reads top-level units from stdin (or a file) and reports what was parsed
on stderr, one message per unit:

    Bologna v0.1.0
    > def add(a b) a + b;
    Parsed a function definition.
    > extern sin(x);
    Parsed an extern

Exit status is 0 when everything parsed, 1 after any syntax error and 2
when the input file can't be opened.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from . import __version__
from .lexer import Lexer
from .lexer.errors import LEXER_WARNING_CODES
from .parser import Function, PARSER_ERROR_CODES, Parser, RecoveryMode, dump

logger = logging.getLogger(__name__)

BANNER = f"Bologna v{__version__}"
PROMPT = "> "


class Repl:
    """Drives a Parser over one input and reports each top-level unit."""

    def __init__(self, source: TextIO, filename: str = "<stdin>",
                 recovery: RecoveryMode = RecoveryMode.SKIP_TOKEN,
                 dump_ast: bool = False, prompt: bool = True,
                 stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.source = source
        self.filename = filename
        self.recovery = recovery
        self.dump_ast = dump_ast
        self.prompt = prompt
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.error_count = 0

    def run(self) -> int:
        """Parse until end of input. Returns the process exit status."""
        if self.prompt:
            self._write_err(BANNER + "\n")
            self._show_prompt()

        lexer = Lexer(self.source, self.filename)
        parser = Parser(lexer, recovery=self.recovery)
        reported_warnings = 0

        for result in parser:
            for warning in lexer.warnings[reported_warnings:]:
                logger.warning("%s: %s", warning.location, warning.message)
            reported_warnings = len(lexer.warnings)

            if result.ok:
                self._report(result.node)
            else:
                self.error_count += 1
                self._write_err(f"Error: {result.error.message}\n")
                logger.debug("%s", result.error)

            self._show_prompt()

        if self.prompt:
            self._write_err("\n")

        return 1 if self.error_count else 0

    def _report(self, node):
        if isinstance(node, Function):
            if node.is_anonymous:
                self._write_err("Parsed a top-level expr\n")
            else:
                self._write_err("Parsed a function definition.\n")
        else:
            self._write_err("Parsed an extern\n")

        if self.dump_ast:
            self.stdout.write(dump(node) + "\n")
            self.stdout.flush()

    def _show_prompt(self):
        if self.prompt:
            self._write_err(PROMPT)

    def _write_err(self, text: str):
        self.stderr.write(text)
        self.stderr.flush()


def explain(code: str) -> int:
    """Print the description of a diagnostic code. Returns the exit status."""
    code = code.upper()
    description = PARSER_ERROR_CODES.get(code) or LEXER_WARNING_CODES.get(code)
    if description is None:
        print(f"bologna: unknown diagnostic code {code}", file=sys.stderr)
        return 2
    print(f"{code}: {description}")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bologna",
        description="Parse Bologna source and report each top-level unit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    bologna                          # Interactive session on stdin
    bologna program.bol --dump-ast   # Parse a file and print its AST
    bologna --recovery synchronize   # Skip to the next ';' after an error
    bologna --explain P002           # Describe a diagnostic code
        """
    )

    parser.add_argument('file', nargs='?',
                        help='Source file to parse (default: stdin)')
    parser.add_argument('--dump-ast', action='store_true',
                        help='Print each parsed unit as an S-expression on stdout')
    parser.add_argument('--recovery', choices=[mode.value for mode in RecoveryMode],
                        default=RecoveryMode.SKIP_TOKEN.value,
                        help='What to discard after a syntax error (default: %(default)s)')
    parser.add_argument('--no-prompt', action='store_true',
                        help='Do not print the banner and prompts')
    parser.add_argument('--explain', metavar='CODE',
                        help='Describe a diagnostic code such as P001 or L001 and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log lexer and parser activity')
    parser.add_argument('--version', action='version', version=BANNER)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.explain is not None:
        return explain(args.explain)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    recovery = RecoveryMode(args.recovery)

    if args.file is None:
        repl = Repl(sys.stdin, recovery=recovery, dump_ast=args.dump_ast,
                    prompt=not args.no_prompt)
        return repl.run()

    try:
        with open(args.file, 'r', encoding='ascii', errors='replace') as f:
            repl = Repl(f, filename=args.file, recovery=recovery,
                        dump_ast=args.dump_ast, prompt=False)
            return repl.run()
    except OSError as e:
        print(f"bologna: cannot read {args.file}: {e.strerror}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
