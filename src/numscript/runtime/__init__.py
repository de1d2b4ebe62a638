"""
numscript runtime - tree-walking interpreter and command plugins.

This module provides:
- Engine: Owns a variable store and command registry, runs programs
- Interpreter: Executes statements and evaluates expressions
- Value: Runtime values tagged with their kind
- ExecutionContext: Flat variable store plus collected warnings
- CommandRegistry: Name to handler table for call statements
- ScreenSampler: Capture state behind the get_color and color commands
"""

from .values import (
    Value,
    ValueKind,
    int_val,
    string_val,
    bool_val,
    wrap_value,
    unwrap_values,
    format_value,
)

from .context import (
    ExecutionContext,
)

from .commands import (
    Command,
    CommandHandler,
    CommandRegistry,
    register_builtin_commands,
    expect_arity,
    expect_int,
    expect_string,
)

from .screen import (
    ScreenSampler,
    register_screen_commands,
    parse_hex,
    format_hex,
)

from .interpreter import (
    Interpreter,
)

from .engine import (
    Engine,
    ExecutionResult,
)

__all__ = [
    # Values
    'Value',
    'ValueKind',
    'int_val',
    'string_val',
    'bool_val',
    'wrap_value',
    'unwrap_values',
    'format_value',
    # Context
    'ExecutionContext',
    # Commands
    'Command',
    'CommandHandler',
    'CommandRegistry',
    'register_builtin_commands',
    'expect_arity',
    'expect_int',
    'expect_string',
    # Screen
    'ScreenSampler',
    'register_screen_commands',
    'parse_hex',
    'format_hex',
    # Execution
    'Interpreter',
    'Engine',
    'ExecutionResult',
]
