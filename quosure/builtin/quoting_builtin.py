"""Quoting operations: quote construction, capture, evaluation and closures.

Every operation here declares its policy up front; the evaluator never looks
at argument shapes to decide whether to quote.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from quosure.types import Value
from quosure.types.closure import Closure
from quosure.types.environment import Environment
from quosure.types.expression import Argument, Literal
from quosure.types.operation import Operation, QUOTING, EVALUATING
from quosure.types.quosure import Quosure
from quosure.types.symbol import Symbol, DOTS
from quosure.errors import ArityError, QuosureTypeError, UnboundSymbol
from quosure.evaluation.capture import capture, capture_all, quo, expr
from quosure.evaluation.evaluator import evaluate

log = logging.getLogger(__name__)


def _one(name: str, args: list[Value], named: dict[str, Value]) -> Value:
    if len(args) != 1 or named:
        raise ArityError(f"{name} expects exactly 1 positional argument")
    return args[0]


def quo_op(env: Environment, args: list[Quosure], named: dict[str, Value]) -> Quosure:
    """(quo x): quosure of x in the calling environment."""
    q = _one("quo", args, named)
    return quo(q.expr, q.env)


def expr_op(env: Environment, args: list[Quosure], named: dict[str, Value]) -> Value:
    """(expr x): the rewritten expression of x, without an environment."""
    q = _one("expr", args, named)
    return expr(q.expr, q.env)


def enquo_op(env: Environment, args: list[Quosure], named: dict[str, Value]) -> Quosure:
    """(enquo p): capture what the caller supplied for parameter p."""
    q = _one("enquo", args, named)
    if not isinstance(q.expr, Symbol):
        raise QuosureTypeError(f"enquo expects a parameter name, got {q.expr!r}")
    return capture(q.env, q.expr)


def enquos_op(env: Environment, arguments: list[Argument]) -> list[Argument]:
    """(enquos ...): capture each argument, keeping names and textual order.

    Arguments forwarded through `...` arrive already captured; a parameter
    named explicitly is captured from the current frame like `enquo`.
    """
    if not arguments:
        return capture_all(env, DOTS)
    captured = []
    for arg in arguments:
        q = arg.expr
        if q.env is env:
            q = capture(env, q.expr) if isinstance(q.expr, Symbol) else quo(q)
        captured.append(Argument(arg.name, q))
    return captured


def sym_op(env: Environment, args: list[Value], named: dict[str, Value]) -> Symbol:
    name = _one("sym", args, named)
    if isinstance(name, Symbol):
        return name
    if not isinstance(name, str):
        raise QuosureTypeError(f"sym expects a string, got {name!r}")
    return Symbol(name)


def syms_op(env: Environment, args: list[Value], named: dict[str, Value]) -> list[Symbol]:
    names = _one("syms", args, named)
    if isinstance(names, str) or not hasattr(names, "__iter__"):
        raise QuosureTypeError(f"syms expects a sequence of strings, got {names!r}")
    return [sym_op(env, [n], {}) for n in names]


def eval_tidy_op(env: Environment, args: list[Value], named: dict[str, Value]) -> Value:
    """(eval_tidy x, data = mapping, env = environment)"""
    target = _one("eval_tidy", args, dict((k, v) for k, v in named.items() if k not in ("data", "env")))
    data = named.get("data")
    override = named.get("env")
    if data is not None and not isinstance(data, Mapping):
        raise QuosureTypeError(f"eval_tidy data must be a mapping, got {type(data).__name__}")
    if override is not None and not isinstance(override, Environment):
        raise QuosureTypeError("eval_tidy env must be an Environment")
    if not isinstance(target, Quosure) and override is None:
        override = env
    return evaluate(target, override, data)


def function_op(env: Environment, arguments: list[Argument]) -> Closure:
    """(function x, y = default, ..., body)"""
    if not arguments or arguments[-1].name is not None:
        raise ArityError("function requires a body as its last, unnamed argument")
    *params, body = arguments
    formals: list[tuple[Symbol, Value]] = []
    for param in params:
        if param.name is not None:
            formals.append((Symbol(param.name), param.expr.expr))
        elif isinstance(param.expr.expr, Symbol):
            formals.append((param.expr.expr, None))
        else:
            raise QuosureTypeError(f"Invalid formal parameter {param.expr.expr!r}")
    names = [f for f, _ in formals]
    if len(set(names)) != len(names):
        raise ArityError("Repeated formal argument in function definition")
    log.debug("function with formals %s", [str(n) for n in names])
    return Closure(formals, body.expr.expr, env)


def dollar_op(env: Environment, args: list[Value], named: dict[str, Value]) -> Value:
    """(obj $ name): field access; pronouns, mappings and attributes."""
    if len(args) != 2 or named:
        raise ArityError("$ expects exactly 2 arguments")
    obj, field = args
    key = field.expr
    if isinstance(key, Literal):
        key = key.value
    if isinstance(key, Symbol):
        key = key.id
    if not isinstance(key, str):
        raise QuosureTypeError(f"$ field must be a name, got {key!r}")
    if isinstance(obj, Mapping):
        if key not in obj:
            raise UnboundSymbol(f"No field {key} in {type(obj).__name__}")
        return obj[key]
    if hasattr(obj, "__getitem__") and not isinstance(obj, (str, bytes)):
        return obj[key]
    try:
        return getattr(obj, key)
    except AttributeError:
        raise QuosureTypeError(f"{type(obj).__name__} has no field {key}") from None


def register(env: Environment) -> None:
    """Define the quoting operations in `env`."""
    ops = [
        Operation("quo", quo_op, params=(QUOTING,)),
        Operation("expr", expr_op, params=(QUOTING,)),
        Operation("enquo", enquo_op, params=(QUOTING,)),
        Operation("enquos", enquos_op, rest=QUOTING, ordered=True),
        Operation("sym", sym_op),
        Operation("syms", syms_op),
        Operation("eval_tidy", eval_tidy_op, params=(EVALUATING,)),
        Operation("function", function_op, rest=QUOTING, ordered=True, forward_dots=False),
        Operation("$", dollar_op, params=(EVALUATING, QUOTING)),
    ]
    for op in ops:
        env.define(op.name, op)
