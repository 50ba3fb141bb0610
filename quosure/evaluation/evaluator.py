"""Core evaluator for quosure.

Walks an expression tree against an environment. Calls dispatch through
`quosure.evaluation.apply`; rewrite markers are rejected since they are only
meaningful while a new tree is being constructed.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Optional

from quosure.config import get_max_depth
from quosure.types import Value, Expression
from quosure.errors import InvalidUnquoteContext, QuosureRecursionError, QuosureTypeError
from quosure.types.environment import Environment
from quosure.types.expression import Assign, Call, Literal, NameSub, Splice, Unquote
from quosure.types.mask import mask_environment
from quosure.types.promise import Promise, Dots
from quosure.types.quosure import Quosure
from quosure.types.symbol import Symbol
from quosure.evaluation.apply import apply

_state = threading.local()


def evaluate(
    expr: Expression | Quosure,
    env: Optional[Environment] = None,
    data: Optional[Mapping[str, Value]] = None,
) -> Value:
    """
    Evaluate an expression or a quosure.

    - A quosure is evaluated in its own environment unless `env` overrides it.
    - `data` installs a data mask (and the `.data`/`.env` pronouns) in a child
      of the evaluation environment.
    """
    if isinstance(expr, Quosure):
        if env is None:
            env = expr.env
        expr = expr.expr
    if env is None:
        raise QuosureTypeError("evaluate requires an environment for a bare expression")
    if data is not None:
        env = mask_environment(env, data)
    return evaluate0(expr, env)


def force(value: Value) -> Value:
    """Resolve a raw binding into the value it stands for."""
    if isinstance(value, Promise):
        return value.force(evaluate0)
    if isinstance(value, Dots):
        return value.force(evaluate0)
    return value


def evaluate0(expr: Expression, env: Environment) -> Value:
    """
    Core evaluator: one step of the tree walk.
    """
    match expr:
        case Symbol():
            return force(env.lookup(expr))

        case Literal():
            return expr.value

        case Call():
            depth = getattr(_state, "depth", 0) + 1
            if depth > get_max_depth():
                raise QuosureRecursionError(f"Evaluation nested deeper than {depth - 1} calls")
            _state.depth = depth
            try:
                head = force(env.lookup(expr.head))
                return apply(head, expr.args, env, evaluate0)
            finally:
                _state.depth = depth - 1

        case Assign(target=Symbol() as target, value=value):
            result = evaluate0(value, env)
            env.define(target, result)
            return result

        case Assign():
            raise InvalidUnquoteContext(
                "Assignment target was never rewritten; build it with quo() or expr()"
            )

        case Quosure():
            return _evaluate_quosure(expr, env)

        case Unquote() | Splice() | NameSub():
            raise InvalidUnquoteContext(
                f"{type(expr).__name__} is only valid inside a quoting construction"
            )

    raise QuosureTypeError(f"Cannot evaluate {expr!r}: not an expression")


def _evaluate_quosure(quo: Quosure, env: Environment) -> Value:
    # An embedded quosure runs in its own scope, but still sees the active data mask
    mask = env.nearest_mask()
    if mask is None or quo.env.nearest_mask() is mask:
        return evaluate0(quo.expr, quo.env)
    return evaluate0(quo.expr, mask_environment(quo.env, mask))
