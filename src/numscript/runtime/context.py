"""
Execution context for the interpreter.

Holds the flat variable store and collects warnings for one engine.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .values import Value
from ..errors import Diagnostic, DiagnosticCollector, warning_command_fault
from ..tokens import SourceSpan


@dataclass
class ExecutionContext:
    """
    The live state a program runs against.

    Tracks:
    - Variables, in a single flat namespace shared by every block
    - Diagnostics (warnings from handler-local command faults)
    - Source lines of the program being run, for error messages

    Blocks do not open scopes: a variable declared inside a loop or an if
    body stays visible after it.
    """
    variables: Dict[str, Value] = field(default_factory=dict)

    # Diagnostics
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)

    # Source tracking for error messages
    source_lines: List[str] = field(default_factory=list)

    def get_variable(self, name: str) -> Optional[Value]:
        """Look up a variable; None if it was never declared."""
        return self.variables.get(name)

    def set_variable(self, name: str, value: Value) -> None:
        """Bind a variable, replacing any earlier binding of the same name."""
        self.variables[name] = value

    def update_variable(self, name: str, value: Value) -> bool:
        """
        Overwrite an existing variable (assignment).

        Returns True if the variable existed and was updated, False if not.
        """
        if name not in self.variables:
            return False
        self.variables[name] = value
        return True

    def has_variable(self, name: str) -> bool:
        return name in self.variables

    def add_warning(self, command: str, message: str, span: SourceSpan) -> Diagnostic:
        """Record a handler-local command fault."""
        diag = warning_command_fault(command, message, span,
                                     self.get_source_line(span.start.line))
        self.diagnostics.add(diag)
        return diag

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a source line for error messages."""
        if 1 <= line_num <= len(self.source_lines):
            return self.source_lines[line_num - 1]
        return None

    def load_source(self, source: str) -> None:
        self.source_lines = source.splitlines() if source else []

    @property
    def has_warnings(self) -> bool:
        return self.diagnostics.has_warnings
