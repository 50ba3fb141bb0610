"""Built-in value operations for the quosure runtime environment.

Arithmetic, comparison and summary functions. All of them are Evaluating
operations and accept numpy arrays, so they work unchanged on masked columns.
"""
from __future__ import annotations

import operator
from functools import reduce
from typing import Any, Callable

import numpy as np

from quosure.types import Value
from quosure.types.environment import Environment
from quosure.types.expression import Argument
from quosure.types.operation import Operation
from quosure.types.missing import NA
from quosure.errors import QuosureTypeError, ArityError


def _no_named(name: str, named: dict[str, Value]) -> None:
    if named:
        raise ArityError(f"{name} does not take named arguments: {', '.join(named)}")


# -------------------------------
# Arithmetic
# -------------------------------
def _fold(name: str, op: Callable[[Any, Any], Any], unit=None):
    def fold(env: Environment, expr: list[Value], named: dict[str, Value]) -> Value:
        _no_named(name, named)
        if not expr:
            if unit is None:
                raise ArityError(f"{name} requires at least 1 argument")
            return unit
        try:
            return reduce(op, expr)
        except TypeError:
            raise QuosureTypeError(f"All arguments to {name} must be numbers")
    return fold


add = _fold("+", operator.add, 0)
mul = _fold("*", operator.mul, 1)


def sub(env: Environment, expr: list[Value], named: dict[str, Value]) -> Value:
    """Subtract all subsequent numbers from the first; unary negation for one arg."""
    _no_named("-", named)
    if not expr:
        raise ArityError("- requires at least 1 argument")
    try:
        if len(expr) == 1:
            return -expr[0]
        return reduce(operator.sub, expr)
    except TypeError:
        raise QuosureTypeError("All arguments to - must be numbers")


def div(env: Environment, expr: list[Value], named: dict[str, Value]) -> Value:
    _no_named("/", named)
    if len(expr) != 2:
        raise ArityError("/ requires exactly 2 arguments")
    try:
        return operator.truediv(*expr)
    except TypeError:
        raise QuosureTypeError("All arguments to / must be numbers")


# -------------------------------
# Comparison
# -------------------------------
def _compare(name: str, op: Callable[[Any, Any], Any]):
    def compare(env: Environment, expr: list[Value], named: dict[str, Value]) -> Value:
        _no_named(name, named)
        if len(expr) != 2:
            raise ArityError(f"{name} requires exactly 2 arguments")
        return op(*expr)
    return compare


# -------------------------------
# Vectors and summaries
# -------------------------------
def combine(env: Environment, expr: list[Value], named: dict[str, Value]) -> tuple:
    """`c`: flatten arguments into one tuple."""
    _no_named("c", named)
    out: list[Value] = []
    for item in expr:
        if isinstance(item, (list, tuple, np.ndarray)):
            out.extend(item)
        else:
            out.append(item)
    return tuple(out)


def length(env: Environment, expr: list[Value], named: dict[str, Value]) -> int:
    _no_named("length", named)
    if len(expr) != 1:
        raise ArityError("length requires exactly 1 argument")
    value = expr[0]
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
        return 1
    return len(value)


def _summary(name: str, fn: Callable[[Any], Any]):
    def summary(env: Environment, expr: list[Value], named: dict[str, Value]) -> Value:
        na_rm = bool(named.pop("na_rm", False))
        _no_named(name, named)
        if len(expr) != 1:
            raise ArityError(f"{name} requires exactly 1 argument")
        values = list(np.ravel(np.asarray(expr[0], dtype=object)))
        if na_rm:
            values = [v for v in values if v is not NA]
        elif any(v is NA for v in values):
            return NA
        try:
            return fn(np.asarray(values, dtype=float)).item()
        except (TypeError, ValueError):
            raise QuosureTypeError(f"{name} requires numeric input")
    return summary


def make_list(env: Environment, arguments: list[Argument]) -> Value:
    """`list`: values as a list, as a dict when every argument is named, else
    as a list of Argument(name, value) ready to be spliced."""
    if all(a.name is None for a in arguments):
        return [a.expr for a in arguments]
    if all(a.name is not None for a in arguments):
        return {a.name: a.expr for a in arguments}
    return list(arguments)


BUILTINS = {
    "+": add,
    "-": sub,
    "*": mul,
    "/": div,
    "==": _compare("==", operator.eq),
    "!=": _compare("!=", operator.ne),
    "<": _compare("<", operator.lt),
    "<=": _compare("<=", operator.le),
    ">": _compare(">", operator.gt),
    ">=": _compare(">=", operator.ge),
    "c": combine,
    "length": length,
    "mean": _summary("mean", np.mean),
    "sum": _summary("sum", np.sum),
}


def register(env: Environment) -> None:
    """Define every value builtin in `env`."""
    for name, fn in BUILTINS.items():
        env.define(name, Operation(name, fn))
    env.define("list", Operation("list", make_list, ordered=True))
    env.define("NA", NA)
    env.define("TRUE", True)
    env.define("FALSE", False)
