"""
Tree-walking interpreter for numscript.

Executes statements in order against an ExecutionContext, dispatching call
statements through a CommandRegistry.
"""

import logging
from typing import List

from .values import Value, ValueKind, int_val, string_val, bool_val
from .context import ExecutionContext
from .commands import CommandRegistry

from ..ast import (
    Statement, Block, VarDecl, Assignment, CallStatement,
    LoopStatement, IfStatement,
    Expression, Literal, Identifier, BinaryOp, Op,
)
from ..errors import (
    CommandError, ScriptError,
    error_unbound_variable, error_type_mismatch,
    error_unknown_command, error_command_failed,
)
from ..tokens import SourceSpan, TokenType

logger = logging.getLogger(__name__)


_COMPARISONS = {
    Op.EQ: lambda a, b: a == b,
    Op.NE: lambda a, b: a != b,
    Op.GT: lambda a, b: a > b,
    Op.LT: lambda a, b: a < b,
    Op.GE: lambda a, b: a >= b,
    Op.LE: lambda a, b: a <= b,
}


class Interpreter:
    """
    Tree-walking interpreter.

    Evaluates AST nodes by dispatching to type-specific methods. The first
    fatal condition raises a RuntimeFault subclass out of execute();
    statements already executed keep their effects.

    With lenient_control_flow=True a loop count that is not a number, or an
    if condition that is not a boolean, skips the statement instead of
    raising TypeMismatchError.
    """

    def __init__(self, lenient_control_flow: bool = False):
        self.lenient_control_flow = lenient_control_flow

    def execute(self, statements: List[Statement], registry: CommandRegistry,
                ctx: ExecutionContext) -> None:
        """
        Execute a program.

        Args:
            statements: The parsed program
            registry: Commands available to call statements
            ctx: Variable store and diagnostics shared by every statement

        Raises:
            RuntimeFault: On the first fatal condition
        """
        for stmt in statements:
            self._execute_statement(stmt, registry, ctx)

    def _fault_line(self, span: SourceSpan, ctx: ExecutionContext):
        return ctx.get_source_line(span.start.line)

    # =========================================================================
    # Statements
    # =========================================================================

    def _execute_statement(self, stmt: Statement, registry: CommandRegistry,
                           ctx: ExecutionContext) -> None:
        """Execute a single statement."""
        if isinstance(stmt, VarDecl):
            self._execute_var_decl(stmt, ctx)
        elif isinstance(stmt, Assignment):
            self._execute_assignment(stmt, ctx)
        elif isinstance(stmt, CallStatement):
            self._execute_call(stmt, registry, ctx)
        elif isinstance(stmt, LoopStatement):
            self._execute_loop(stmt, registry, ctx)
        elif isinstance(stmt, IfStatement):
            self._execute_if_statement(stmt, registry, ctx)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_var_decl(self, stmt: VarDecl, ctx: ExecutionContext) -> None:
        value = self._evaluate(stmt.initializer, ctx)
        ctx.set_variable(stmt.name, value)

    def _execute_assignment(self, stmt: Assignment, ctx: ExecutionContext) -> None:
        """Execute an assignment to an already declared variable."""
        value = self._evaluate(stmt.value, ctx)
        if not ctx.update_variable(stmt.name, value):
            raise error_unbound_variable(stmt.name, stmt.span,
                                         self._fault_line(stmt.span, ctx))

    def _execute_call(self, stmt: CallStatement, registry: CommandRegistry,
                      ctx: ExecutionContext) -> None:
        """Evaluate the arguments, then hand them to the named command."""
        args = [self._evaluate(arg, ctx) for arg in stmt.arguments]

        command = registry.get(stmt.name)
        if command is None:
            raise error_unknown_command(stmt.name, stmt.span,
                                        self._fault_line(stmt.span, ctx),
                                        registry.names())

        logger.debug("Calling %s with %d argument(s)", stmt.name, len(args))
        try:
            command.handler(args, ctx)
        except CommandError as e:
            diag = ctx.add_warning(stmt.name, str(e), stmt.span)
            logger.warning("%s: %s", diag.span.start, diag.message)
        except ScriptError:
            raise
        except Exception as e:
            raise error_command_failed(stmt.name, e, stmt.span,
                                       self._fault_line(stmt.span, ctx)) from e

    def _execute_loop(self, stmt: LoopStatement, registry: CommandRegistry,
                      ctx: ExecutionContext) -> None:
        """Execute a counted loop. The count is evaluated once."""
        count = self._evaluate(stmt.count, ctx)
        if count.kind != ValueKind.INT:
            if self.lenient_control_flow:
                logger.debug("Skipping loop with %s count", count.kind.value)
                return
            raise error_type_mismatch(
                f"loop count must be a number, got {count.kind.value}",
                stmt.count.span, self._fault_line(stmt.count.span, ctx))

        for _ in range(max(0, count.data)):
            self._execute_block(stmt.body, registry, ctx)

    def _execute_if_statement(self, stmt: IfStatement, registry: CommandRegistry,
                              ctx: ExecutionContext) -> None:
        """Execute an if statement."""
        condition = self._evaluate(stmt.condition, ctx)
        if condition.kind != ValueKind.BOOL:
            if self.lenient_control_flow:
                logger.debug("Skipping if with %s condition", condition.kind.value)
                return
            raise error_type_mismatch(
                f"condition must be a boolean, got {condition.kind.value}",
                stmt.condition.span, self._fault_line(stmt.condition.span, ctx))

        if condition.data:
            self._execute_block(stmt.then_branch, registry, ctx)
        elif stmt.else_branch is not None:
            self._execute_block(stmt.else_branch, registry, ctx)

    def _execute_block(self, block: Block, registry: CommandRegistry,
                       ctx: ExecutionContext) -> None:
        # Blocks share the flat store; no new scope
        for stmt in block.statements:
            self._execute_statement(stmt, registry, ctx)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _evaluate(self, expr: Expression, ctx: ExecutionContext) -> Value:
        """Evaluate an expression to a value."""
        if isinstance(expr, Literal):
            return self._eval_literal(expr)
        elif isinstance(expr, Identifier):
            return self._eval_identifier(expr, ctx)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr, ctx)
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_literal(self, lit: Literal) -> Value:
        if lit.literal_type == TokenType.INT_LITERAL:
            return int_val(lit.value)
        return string_val(lit.value)

    def _eval_identifier(self, ident: Identifier, ctx: ExecutionContext) -> Value:
        """Evaluate an identifier (variable lookup)."""
        value = ctx.get_variable(ident.name)
        if value is None:
            raise error_unbound_variable(ident.name, ident.span,
                                         self._fault_line(ident.span, ctx))
        return value

    def _eval_binary_op(self, op: BinaryOp, ctx: ExecutionContext) -> Value:
        """
        Evaluate a binary operation.

        Both operands are always evaluated, left first. Comparisons take two
        numbers, && and || take two booleans; nothing is coerced. Left-nested
        chains such as `a && b && c` are walked iteratively.
        """
        chain = []
        node = op
        while isinstance(node, BinaryOp):
            chain.append(node)
            node = node.left

        left = self._evaluate(node, ctx)
        for current in reversed(chain):
            right = self._evaluate(current.right, ctx)
            left = self._apply_operator(current, left, right, ctx)
        return left

    def _apply_operator(self, op: BinaryOp, left: Value, right: Value,
                        ctx: ExecutionContext) -> Value:
        if op.operator.is_logical:
            expected = ValueKind.BOOL
        else:
            expected = ValueKind.INT

        if left.kind != expected or right.kind != expected:
            raise error_type_mismatch(
                f"'{op.operator.value}' needs two {expected.value} operands, "
                f"got {left.kind.value} and {right.kind.value}",
                op.span, self._fault_line(op.span, ctx))

        if op.operator == Op.AND:
            return bool_val(left.data and right.data)
        if op.operator == Op.OR:
            return bool_val(left.data or right.data)
        return bool_val(_COMPARISONS[op.operator](left.data, right.data))
