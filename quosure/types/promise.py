"""Lazy, memoised call arguments."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from quosure.types import Value, EvaluatorFn
from quosure.errors import QuosureError
from quosure.types.environment import Environment

log = logging.getLogger(__name__)

_UNFORCED = object()


class Promise:
    """An argument as the caller wrote it, plus the caller's environment.

    `force` evaluates the expression at most once. Capture reads `expr` and
    `env` without forcing, and refuses once the promise has been forced.
    """

    __slots__ = ("expr", "env", "captured", "_value", "_forcing")

    def __init__(self, expr: Value, env: Environment):
        self.expr = expr
        self.env = env
        # First capture result; later captures reuse it
        self.captured = None
        self._value = _UNFORCED
        self._forcing = False

    @property
    def forced(self) -> bool:
        return self._value is not _UNFORCED

    def force(self, evaluate_fn: EvaluatorFn) -> Value:
        if self._value is not _UNFORCED:
            return self._value
        if self._forcing:
            raise QuosureError("Promise already under evaluation: recursive default argument reference?")
        self._forcing = True
        try:
            log.debug("forcing promise %r", self)
            self._value = evaluate_fn(self.expr, self.env)
        finally:
            self._forcing = False
        return self._value

    def __repr__(self) -> str:
        from quosure.deparse import deparse
        state = "forced" if self.forced else "pending"
        return f"<promise {state}: {deparse(self.expr)}>"


class Dots:
    """The `...` of a call frame: ordered (name, Promise) pairs."""

    __slots__ = ("entries",)

    def __init__(self, entries: Optional[list[tuple[Optional[str], Promise]]] = None):
        self.entries: list[tuple[Optional[str], Promise]] = list(entries or ())

    def __iter__(self) -> Iterator[tuple[Optional[str], Promise]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def force(self, evaluate_fn: EvaluatorFn) -> list[Value]:
        return [p.force(evaluate_fn) for _, p in self.entries]

    def __repr__(self) -> str:
        return f"<dots: {len(self.entries)} argument(s)>"
