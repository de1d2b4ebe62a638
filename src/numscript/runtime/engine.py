"""
Engine façade: owns a variable store and a command registry, and runs
programs against them.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO

from .commands import CommandHandler, CommandRegistry, register_builtin_commands
from .context import ExecutionContext
from .interpreter import Interpreter
from .screen import ScreenSampler, register_screen_commands
from ..ast import Statement
from ..config import EngineConfig
from ..errors import Diagnostic, ScriptError

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Result of running a program."""
    success: bool
    error: Optional[ScriptError] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.code.startswith("W")]


class Engine:
    """
    Runs numscript programs.

    Each engine has a private variable store that persists across runs and a
    command registry preloaded with print, sleep, get_color and color:

        engine = Engine()
        engine.register("click", my_click_handler)
        result = engine.run_source('var n = 3\\nloop (n) { click(10, 20) }')
        if not result.success:
            print(result.error_message)

    run() and register() serialize on a per-engine lock, so an engine shared
    between threads runs one program at a time.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        output: Optional[TextIO] = None,
        sleep: Optional[Callable[[float], None]] = None,
        screen: Optional[ScreenSampler] = None,
    ):
        self.config = config if config is not None else EngineConfig()
        self._context = ExecutionContext()
        self._registry = CommandRegistry()
        self._interpreter = Interpreter(
            lenient_control_flow=self.config.lenient_control_flow)
        self._lock = threading.Lock()

        register_builtin_commands(
            self._registry,
            output=output,
            sleep=sleep,
            separator=self.config.print_separator,
            sleep_scale=self.config.sleep_scale,
        )
        self.screen = register_screen_commands(self._registry, screen)

    @property
    def context(self) -> ExecutionContext:
        return self._context

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def register(self, name: str, handler: CommandHandler) -> None:
        """Add a command, replacing any existing one of the same name."""
        with self._lock:
            self._registry.register(name, handler)

    def run(self, statements: List[Statement], source: Optional[str] = None) -> ExecutionResult:
        """
        Execute a parsed program.

        Returns a successful result, or the first fatal fault. Effects of the
        statements executed before a fault are kept. Pass the text the
        statements were parsed from as `source` to get source lines in
        error messages.
        """
        with self._lock:
            return self._run_locked(statements, source)

    def _run_locked(self, statements: List[Statement], source: Optional[str]) -> ExecutionResult:
        self._context.load_source(source)
        diagnostics = self._context.diagnostics
        diagnostics.clear()
        logger.debug("Running %d statement(s)", len(statements))

        try:
            self._interpreter.execute(statements, self._registry, self._context)
        except ScriptError as e:
            logger.debug("Run aborted: [%s] %s", e.code, e.diagnostic.message)
            return ExecutionResult(
                success=False,
                error=e,
                diagnostics=list(diagnostics.diagnostics) + [e.diagnostic],
            )

        logger.debug("Run finished")
        return ExecutionResult(
            success=True,
            diagnostics=list(diagnostics.diagnostics),
        )

    def run_source(self, source: str, filename: Optional[str] = None) -> ExecutionResult:
        """Lex, parse and run source text; syntax errors come back in the result."""
        from ..lexer import tokenize
        from ..parser import parse

        try:
            tokens = tokenize(source, filename, strict=self.config.strict_lexer)
            statements = parse(tokens, source)
        except ScriptError as e:
            return ExecutionResult(success=False, error=e, diagnostics=[e.diagnostic])

        with self._lock:
            return self._run_locked(statements, source)
