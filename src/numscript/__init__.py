"""
numscript - a minimal scripting language for screen macros.

This module provides:
- Lexer: Tokenizes source text, inferring statement ends at line breaks
- Parser: Builds a list of statements from tokens
- Engine: Runs programs against a variable store and a command registry

Usage:
    from numscript import Engine

    engine = Engine()
    result = engine.run_source('''
    var n = 3
    loop (n) {
        print("tick")
        sleep(100)
    }
    ''')
    if not result.success:
        print(result.error_message)

Host programs add their own commands with Engine.register(name, handler),
where handler(args, ctx) receives the evaluated argument values.
"""

import logging

from importlib.metadata import PackageNotFoundError, version

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    AstNode,
    Op,
    Expression,
    Literal,
    Identifier,
    BinaryOp,
    Statement,
    Block,
    VarDecl,
    Assignment,
    CallStatement,
    LoopStatement,
    IfStatement,
    print_ast,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    ScriptError,
    LexerError,
    ParserError,
    RuntimeFault,
    UnboundVariableError,
    TypeMismatchError,
    UnknownCommandError,
    CommandFailedError,
    CommandError,
)

from .config import (
    EngineConfig,
    load_config,
)

from .runtime import (
    Engine,
    ExecutionResult,
    ExecutionContext,
    Interpreter,
    CommandRegistry,
    ScreenSampler,
    Value,
    ValueKind,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = version("numscript")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',
    # Lexer / parser
    'Lexer',
    'tokenize',
    'Parser',
    'parse',
    # AST
    'AstNode',
    'Op',
    'Expression',
    'Literal',
    'Identifier',
    'BinaryOp',
    'Statement',
    'Block',
    'VarDecl',
    'Assignment',
    'CallStatement',
    'LoopStatement',
    'IfStatement',
    'print_ast',
    # Errors
    'ErrorSeverity',
    'Diagnostic',
    'DiagnosticCollector',
    'ScriptError',
    'LexerError',
    'ParserError',
    'RuntimeFault',
    'UnboundVariableError',
    'TypeMismatchError',
    'UnknownCommandError',
    'CommandFailedError',
    'CommandError',
    # Configuration
    'EngineConfig',
    'load_config',
    # Runtime
    'Engine',
    'ExecutionResult',
    'ExecutionContext',
    'Interpreter',
    'CommandRegistry',
    'ScreenSampler',
    'Value',
    'ValueKind',
    '__version__',
]
