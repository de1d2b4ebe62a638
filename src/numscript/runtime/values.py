"""
Runtime values for the interpreter.

A Value pairs the raw Python object with its kind so that operators and
command handlers can check what they were given without guessing from
Python types (bool is a subclass of int).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Union


class ValueKind(Enum):
    """The three kinds of runtime value."""
    INT = "int"
    STRING = "string"
    BOOL = "bool"


@dataclass(frozen=True)
class Value:
    """
    An immutable runtime value.

    Values carry no identity: two values with equal kind and data are
    interchangeable.
    """
    data: Union[int, str, bool]
    kind: ValueKind

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.kind.value})"

    def __str__(self) -> str:
        return format_value(self)

    @property
    def is_int(self) -> bool:
        return self.kind == ValueKind.INT

    @property
    def is_string(self) -> bool:
        return self.kind == ValueKind.STRING

    @property
    def is_bool(self) -> bool:
        return self.kind == ValueKind.BOOL


# Convenience constructors

def int_val(n: int) -> Value:
    """Create an integer value."""
    return Value(int(n), ValueKind.INT)


def string_val(s: str) -> Value:
    """Create a string value."""
    return Value(str(s), ValueKind.STRING)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return Value(bool(b), ValueKind.BOOL)


def wrap_value(data: Any) -> Value:
    """Wrap a raw Python int, str or bool."""
    if isinstance(data, bool):
        return bool_val(data)
    if isinstance(data, int):
        return int_val(data)
    if isinstance(data, str):
        return string_val(data)
    raise ValueError(f"cannot wrap {type(data).__name__} as a script value")


def unwrap_values(values: List[Value]) -> List[Any]:
    """Extract raw data from a list of Values."""
    return [v.data for v in values]


def format_value(value: Value) -> str:
    """Render a value the way print shows it (booleans as true/false)."""
    if value.kind == ValueKind.BOOL:
        return "true" if value.data else "false"
    return str(value.data)
