"""
Command registry for the interpreter.

Maps command names to host-supplied handlers. A handler receives the
already-evaluated arguments and the execution context:

    def handler(args: List[Value], ctx: ExecutionContext) -> None: ...

Handlers validate their own arguments and raise CommandError for malformed
input; the interpreter turns that into a warning and keeps running.
"""

import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO

from .values import Value, ValueKind, format_value
from .context import ExecutionContext
from ..errors import CommandError

logger = logging.getLogger(__name__)

CommandHandler = Callable[[List[Value], ExecutionContext], None]


@dataclass
class Command:
    """A registered command with its handler."""
    name: str
    handler: CommandHandler
    doc: str = ""


class CommandRegistry:
    """
    Registry of named commands.

    Commands are registered by name and looked up for each call statement.
    Registering an existing name replaces the previous handler.
    """

    def __init__(self):
        self._commands: Dict[str, Command] = {}

    def register(self, name: str, handler: CommandHandler, doc: str = "") -> None:
        """Register (or replace) a command."""
        if not name or not isinstance(name, str):
            raise ValueError("command name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for '{name}' is not callable")
        if name in self._commands:
            logger.debug("Overwriting command %s", name)
        else:
            logger.debug("Registering command %s", name)
        self._commands[name] = Command(name, handler, doc or (handler.__doc__ or "").strip())

    def get(self, name: str) -> Optional[Command]:
        """Look up a command by name."""
        return self._commands.get(name)

    def names(self) -> List[str]:
        return sorted(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)


# --- Argument helpers for handlers ---

def expect_arity(name: str, args: List[Value], count: int) -> None:
    """Raise CommandError unless exactly `count` arguments were given."""
    if len(args) != count:
        raise CommandError(f"{name} expects {count} argument(s), got {len(args)}")


def expect_int(name: str, args: List[Value], index: int, what: str,
               minimum: Optional[int] = None) -> int:
    """Return argument `index` as an int, or raise CommandError."""
    value = args[index]
    if value.kind != ValueKind.INT:
        raise CommandError(f"{name} expects number {what}, got {value.kind.value}")
    if minimum is not None and value.data < minimum:
        raise CommandError(f"{name} expects {what} >= {minimum}, got {value.data}")
    return value.data


def expect_string(name: str, args: List[Value], index: int, what: str) -> str:
    """Return argument `index` as a str, or raise CommandError."""
    value = args[index]
    if value.kind != ValueKind.STRING:
        raise CommandError(f"{name} expects string {what}, got {value.kind.value}")
    return value.data


# --- Built-in commands ---

def make_print_command(output: Optional[TextIO] = None, separator: str = " ") -> CommandHandler:
    """
    Build the print command.

    Writes every argument as text, separated by `separator`, then a newline.
    Accepts any number and kind of arguments and never faults.
    """

    def _print(args: List[Value], ctx: ExecutionContext) -> None:
        """Print the arguments followed by a newline."""
        stream = output if output is not None else sys.stdout
        stream.write(separator.join(format_value(a) for a in args) + "\n")
        stream.flush()

    return _print


def make_sleep_command(sleep: Callable[[float], None] = None, scale: float = 1.0) -> CommandHandler:
    """
    Build the sleep command.

    sleep(ms) blocks the calling thread for ms milliseconds (times `scale`).
    Anything but a single non-negative number is a handler-local fault.
    """
    sleeper = sleep if sleep is not None else time.sleep

    def _sleep(args: List[Value], ctx: ExecutionContext) -> None:
        """Pause for the given number of milliseconds."""
        expect_arity("sleep", args, 1)
        ms = expect_int("sleep", args, 0, "milliseconds", minimum=0)
        sleeper(ms * scale / 1000.0)

    return _sleep


def register_builtin_commands(
    registry: CommandRegistry,
    output: Optional[TextIO] = None,
    sleep: Callable[[float], None] = None,
    separator: str = " ",
    sleep_scale: float = 1.0,
) -> None:
    """Register the built-in print and sleep commands."""
    registry.register("print", make_print_command(output, separator))
    registry.register("sleep", make_sleep_command(sleep, sleep_scale))
