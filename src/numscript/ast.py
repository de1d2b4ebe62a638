"""
Abstract Syntax Tree (AST) node definitions for numscript.

A parsed program is a plain list of Statement nodes. Expressions are
literals, variable references and binary comparisons/logical operations;
there is no arithmetic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Union
from .tokens import SourceSpan, TokenType


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode:
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting


# =============================================================================
# Operators
# =============================================================================

class Op(Enum):
    """Binary operators. Comparisons take numbers, AND/OR take booleans."""
    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    AND = "&&"
    OR = "||"

    @property
    def is_logical(self) -> bool:
        return self in (Op.AND, Op.OR)

    @classmethod
    def from_token(cls, token_type: TokenType) -> "Op":
        return _TOKEN_OPS[token_type]


_TOKEN_OPS = {
    TokenType.EQ: Op.EQ,
    TokenType.NE: Op.NE,
    TokenType.GT: Op.GT,
    TokenType.LT: Op.LT,
    TokenType.GE: Op.GE,
    TokenType.LE: Op.LE,
    TokenType.AND: Op.AND,
    TokenType.OR: Op.OR,
}


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expression):
    """A literal value (integer or string)."""
    value: Union[int, str]
    literal_type: TokenType  # INT_LITERAL or STRING_LITERAL


@dataclass
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a > b, x && y)."""
    left: Expression
    operator: Op
    right: Expression


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class Block(AstNode):
    """A brace-delimited sequence of statements."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class VarDecl(Statement):
    """Variable declaration: var name = value;"""
    name: str
    initializer: Expression


@dataclass
class Assignment(Statement):
    """Assignment to a declared variable: name = value;"""
    name: str
    value: Expression


@dataclass
class CallStatement(Statement):
    """Command invocation: name(arg, ...);"""
    name: str
    arguments: List[Expression] = field(default_factory=list)


@dataclass
class LoopStatement(Statement):
    """Counted loop: loop (count) { ... }"""
    count: Expression
    body: Block


@dataclass
class IfStatement(Statement):
    """Conditional: if (condition) { ... } else { ... }"""
    condition: Expression
    then_branch: Block
    else_branch: Optional[Block] = None


# =============================================================================
# Debug Printing
# =============================================================================

class PrintVisitor:
    """Prints the AST structure, one field per line."""

    def __init__(self, indent: int = 0, out=None):
        self.indent = indent
        self.out = out

    def _print(self, text: str) -> None:
        print("  " * self.indent + text, file=self.out)

    def visit(self, node: AstNode) -> None:
        self._print(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._print(f"  {name}:")
                PrintVisitor(self.indent + 2, self.out).visit(value)
            elif isinstance(value, list):
                self._print(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        PrintVisitor(self.indent + 2, self.out).visit(item)
                    else:
                        self._print(f"    {item!r}")
                self._print("  ]")
            elif isinstance(value, Enum):
                self._print(f"  {name}: {value.value if isinstance(value, Op) else value.name}")
            else:
                self._print(f"  {name}: {value!r}")


def print_ast(node: Union[AstNode, List[Statement]], out=None) -> None:
    """Print an AST node, or a whole program, for debugging."""
    if isinstance(node, list):
        for stmt in node:
            PrintVisitor(out=out).visit(stmt)
    else:
        PrintVisitor(out=out).visit(node)
