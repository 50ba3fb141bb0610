"""Syntax tree nodes.

An Expression is one of: Symbol, Literal, Call, Assign, Quosure, or one of the
three rewrite markers (Unquote, Splice, NameSub). Nodes are immutable; rewrites
always build new trees.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from quosure.types import Value
from quosure.types.symbol import Symbol
from quosure.types.quosure import Quosure


class Literal:
    """An atomic value, or an ordered sequence of atomic values."""

    __slots__ = ("value",)

    def __init__(self, value: Value):
        # Sequences are stored as tuples so literals stay immutable
        if isinstance(value, list):
            value = tuple(value)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError("Literal is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        a, b = self.value, other.value
        if a is b:
            return True
        if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
            return (
                isinstance(a, np.ndarray)
                and isinstance(b, np.ndarray)
                and bool(np.array_equal(a, b))
            )
        return type(a) is type(b) and a == b

    def __hash__(self) -> int:
        # Equal literals share a type (and, for arrays, a shape and elements)
        value = self.value
        try:
            return hash((Literal, value))
        except TypeError:
            pass
        if isinstance(value, np.ndarray):
            try:
                return hash((Literal, np.ndarray, value.shape, tuple(value.ravel().tolist())))
            except TypeError:
                return hash((Literal, np.ndarray, value.shape))
        return hash((Literal, type(value)))

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


@dataclass(frozen=True)
class Unquote:
    """Evaluate `operand` at rewrite time and substitute the result."""

    operand: Value


@dataclass(frozen=True)
class Splice:
    """Evaluate `operand` at rewrite time and expand it into sibling arguments."""

    operand: Value


@dataclass(frozen=True)
class NameSub:
    """Computed binding name: the operand becomes the name of an argument or assignment."""

    operand: Value


@dataclass(frozen=True)
class Argument:
    name: Union[str, NameSub, Unquote, None]
    expr: Value

    def __post_init__(self):
        if isinstance(self.name, Symbol):
            object.__setattr__(self, "name", self.name.id)


@dataclass(frozen=True)
class Call:
    head: Symbol
    args: tuple[Argument, ...] = ()

    def __post_init__(self):
        head = self.head
        if isinstance(head, str):
            head = Symbol(head)
        if not isinstance(head, Symbol):
            from quosure.errors import QuosureTypeError
            raise QuosureTypeError(f"Call head must be a Symbol, got {head!r}")
        object.__setattr__(self, "head", head)
        object.__setattr__(
            self,
            "args",
            tuple(a if isinstance(a, Argument) else Argument(None, a) for a in self.args),
        )

    @property
    def positional(self) -> list[Value]:
        return [a.expr for a in self.args if a.name is None]

    @property
    def named(self) -> dict[str, Value]:
        return {a.name: a.expr for a in self.args if isinstance(a.name, str)}


@dataclass(frozen=True)
class Assign:
    target: Union[Symbol, NameSub, Unquote]
    value: Value

    def __post_init__(self):
        if isinstance(self.target, str):
            object.__setattr__(self, "target", Symbol(self.target))


MARKERS = (Unquote, Splice, NameSub)
EXPRESSION_TYPES = (Symbol, Literal, Call, Assign, Quosure) + MARKERS


def is_expression(obj: Value) -> bool:
    return isinstance(obj, EXPRESSION_TYPES)


def lit(value: Value) -> Literal:
    return value if isinstance(value, Literal) else Literal(value)


def call(head: Symbol | str, *args: Value, **named: Value) -> Call:
    """Convenience constructor: non-expression arguments become Literals.

    Named arguments follow the positional ones.
    """
    built = [Argument(None, a if is_expression(a) else Literal(a)) for a in args]
    built += [Argument(k, v if is_expression(v) else Literal(v)) for k, v in named.items()]
    return Call(head, tuple(built))
