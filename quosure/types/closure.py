"""User-defined functions built with the `function` operation."""

from __future__ import annotations

from io import StringIO
from typing import Optional

from quosure.types import Value
from quosure.types.environment import Environment
from quosure.types.symbol import Symbol


class Closure:
    """A first-class function with formal parameters, body, and closure env.

    `formals` is an ordered list of (name, default expression or None) pairs;
    the name `...` collects surplus arguments.
    """

    __slots__ = ("formals", "body", "env")

    def __init__(
        self,
        formals: list[tuple[Symbol, Optional[Value]]],
        body: Value,
        env: Environment,
    ):
        self.formals = formals
        self.body = body
        self.env = env

    @property
    def names(self) -> list[Symbol]:
        return [name for name, _ in self.formals]

    def __str__(self) -> str:
        from quosure.deparse import deparse
        with StringIO() as buffer:
            buffer.write("function(")
            parts = []
            for name, default in self.formals:
                parts.append(str(name) if default is None else f"{name} = {deparse(default)}")
            buffer.write(", ".join(parts))
            buffer.write(") ")
            buffer.write(deparse(self.body))
            return buffer.getvalue()

    def __repr__(self) -> str:
        return str(self)
