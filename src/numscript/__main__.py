#!/usr/bin/env python3
"""
CLI for running numscript programs.

Usage:
    python -m numscript run FILE [--config FILE] [-v]
    python -m numscript check FILE [--ast]
    python -m numscript tokens FILE

Examples:
    # Run a macro
    python -m numscript run macros/wait_for_button.num

    # Run with a configuration file (sleep durations halved, say)
    python -m numscript run macros/wait_for_button.num --config fast.yaml

    # Check syntax and dump the parsed program
    python -m numscript check macros/wait_for_button.num --ast

The configuration file may also be given through the NUMSCRIPT_CONFIG
environment variable.
"""

import argparse
import logging
import sys
from pathlib import Path


def _read_source(path_str: str):
    source_path = Path(path_str)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return source_path, None
    return source_path, source_path.read_text(encoding="utf-8")


def cmd_run(args):
    """Run a script file."""
    from .config import resolve_config
    from .runtime import Engine

    try:
        config = resolve_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level_value,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    engine = Engine(config)
    result = engine.run_source(source, filename=str(source_path))

    for diag in result.warnings:
        print(diag.format(), file=sys.stderr)

    if not result.success:
        print(result.error_message, file=sys.stderr)
        return 1
    return 0


def cmd_check(args):
    """Check a script file for syntax errors."""
    from . import tokenize, parse, print_ast, ScriptError

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    try:
        tokens = tokenize(source, filename=str(source_path))
        statements = parse(tokens, source=source)
    except ScriptError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(f"OK: {source_path.name} - {len(statements)} statement(s), no errors")
    if args.ast:
        print_ast(statements)
    return 0


def cmd_tokens(args):
    """Print the token stream of a script file."""
    from . import Lexer, ScriptError

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    try:
        for token in Lexer(source, filename=str(source_path)):
            marker = "  (inferred)" if token.is_synthesized else ""
            print(f"{token.span.start}\t{token}{marker}")
    except ScriptError as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='numscript',
        description='numscript macro language runner',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    # run command
    run_parser = subparsers.add_parser('run', help='Run a script file')
    run_parser.add_argument('file', help='Script source file')
    run_parser.add_argument('-c', '--config', metavar='FILE',
                            help='YAML configuration file')
    run_parser.add_argument('-v', '--verbose', action='store_true',
                            help='Log debug output')

    # check command
    check_parser = subparsers.add_parser('check', help='Check a script file for errors')
    check_parser.add_argument('file', help='Script source file')
    check_parser.add_argument('--ast', action='store_true',
                              help='Print the parsed program')

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='Print the tokens of a script file')
    tokens_parser.add_argument('file', help='Script source file')

    args = parser.parse_args(argv)

    if args.action == 'run':
        return cmd_run(args)
    elif args.action == 'check':
        return cmd_check(args)
    elif args.action == 'tokens':
        return cmd_tokens(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
