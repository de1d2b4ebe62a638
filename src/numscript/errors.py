"""
Script exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime faults (fatal, abort the run)
- W4xx: Runtime warnings (handler-local faults, the run continues)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        if self.span is not None:
            parts.append(f"{self.span.start}: {self.severity.value}[{self.code}]: {self.message}")
        else:
            parts.append(f"{self.severity.value}[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            if self.span.start.line == self.span.end.line:
                end_col = self.span.end.column
            else:
                end_col = len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)


class ScriptError(Exception):
    """Base exception for every lexing, parsing and runtime error."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def span(self) -> Optional[SourceSpan]:
        return self.diagnostic.span

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(ScriptError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(ScriptError):
    """Error during parsing (E1xx)."""
    pass


class RuntimeFault(ScriptError):
    """Fatal condition detected while running a program (E4xx)."""
    pass


class UnboundVariableError(RuntimeFault):
    """A variable was read or assigned before any declaration (E401)."""

    def __init__(self, diagnostic: Diagnostic, name: str):
        super().__init__(diagnostic)
        self.name = name


class TypeMismatchError(RuntimeFault):
    """Operand kinds outside an operator's domain (E402)."""
    pass


class UnknownCommandError(RuntimeFault):
    """A call named a command that is not registered (E403)."""

    def __init__(self, diagnostic: Diagnostic, name: str):
        super().__init__(diagnostic)
        self.name = name


class CommandFailedError(RuntimeFault):
    """A command handler failed with something other than CommandError (E404)."""
    pass


class CommandError(Exception):
    """
    Handler-local fault raised by a command handler.

    Signals malformed arguments (wrong count or kind) for one invocation.
    The interpreter records it as a warning and carries on with the next
    statement instead of aborting the run.
    """
    pass


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return LexerError(diag)


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: Unterminated string literal."""
    diag = Diagnostic(
        code="E002",
        message="unterminated string literal",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=['string literals must be closed with a matching "'],
    )
    return LexerError(diag)


def error_invalid_number_literal(text: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E006: Invalid number literal."""
    diag = Diagnostic(
        code="E006",
        message=f"invalid number literal '{text}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["numbers must fit in a signed 64-bit integer"],
    )
    return LexerError(diag)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_unexpected_eof(expected: str, span: SourceSpan) -> ParserError:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of input, expected {expected}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )
    return ParserError(diag)


def error_nesting_too_deep(limit: int, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E103: Parentheses or blocks nested past the limit."""
    diag = Diagnostic(
        code="E103",
        message=f"nesting too deep (more than {limit} levels)",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["split the expression or block into smaller steps using variables"],
    )
    return ParserError(diag)


# --- Runtime fault codes ---

def error_unbound_variable(name: str, span: SourceSpan,
                           source_line: str = None) -> UnboundVariableError:
    """E401: Unbound variable."""
    diag = Diagnostic(
        code="E401",
        message=f"undefined variable '{name}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=[f"declare it first with 'var {name} = ...'"],
    )
    return UnboundVariableError(diag, name)


def error_type_mismatch(message: str, span: SourceSpan,
                        source_line: str = None) -> TypeMismatchError:
    """E402: Type mismatch."""
    diag = Diagnostic(
        code="E402",
        message=f"type mismatch: {message}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return TypeMismatchError(diag)


def error_unknown_command(name: str, span: SourceSpan, source_line: str = None,
                          known: List[str] = None) -> UnknownCommandError:
    """E403: Unknown command."""
    hints = []
    if known:
        hints.append(f"available commands: {', '.join(sorted(known))}")
    diag = Diagnostic(
        code="E403",
        message=f"unknown command '{name}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=hints,
    )
    return UnknownCommandError(diag, name)


def error_command_failed(name: str, cause: BaseException, span: SourceSpan,
                         source_line: str = None) -> CommandFailedError:
    """E404: Command handler failed."""
    diag = Diagnostic(
        code="E404",
        message=f"command '{name}' failed: {cause}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return CommandFailedError(diag)


# --- Warnings ---

def warning_command_fault(name: str, message: str, span: SourceSpan,
                          source_line: str = None) -> Diagnostic:
    """W401: Handler-local command fault."""
    return Diagnostic(
        code="W401",
        message=f"{name}: {message}",
        severity=ErrorSeverity.WARNING,
        span=span,
        source_line=source_line,
    )


class DiagnosticCollector:
    """Collects non-fatal diagnostics during a run."""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)

    def clear(self) -> None:
        self.diagnostics.clear()

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0
