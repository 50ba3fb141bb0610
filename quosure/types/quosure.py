"""Quosure: an expression paired with the environment it was written in."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quosure.types import Value

if TYPE_CHECKING:
    from quosure.types.environment import Environment


class Quosure:
    """A captured, unevaluated reference.

    The environment is shared, not owned: many quosures may point at the same
    frame, and the frame lives as long as its longest holder.
    """

    __slots__ = ("expr", "env")

    def __init__(self, expr: Value, env: Environment):
        object.__setattr__(self, "expr", expr)
        object.__setattr__(self, "env", env)

    def __setattr__(self, name, value):
        raise AttributeError("Quosure is immutable")

    def __eq__(self, other) -> bool:
        # Environments compare by identity: two frames with equal bindings are still different scopes
        return isinstance(other, Quosure) and self.env is other.env and self.expr == other.expr

    def __hash__(self) -> int:
        try:
            return hash((self.expr, id(self.env)))
        except TypeError:
            return id(self.env)

    def __iter__(self):
        # Allows `expr, env = quosure`
        yield self.expr
        yield self.env

    def __repr__(self) -> str:
        from quosure.deparse import deparse
        return f"<quosure: {deparse(self.expr)} | {self.env.tag()}>"

    def __str__(self) -> str:
        from quosure.deparse import display
        return display(self)
