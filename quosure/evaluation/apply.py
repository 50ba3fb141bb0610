"""Application engine for quosure.

This module centralizes call semantics for the evaluator:
- Operations receive each argument according to the policy they declared
  (a Quosure for Quoting parameters, a forced value for Evaluating ones).
- Closures receive a Promise per argument, bound by `bind_arguments`.
- Plain Python callables receive forced values as *args/**kwargs.
- A `...` argument forwards the calling frame's Dots without forcing them.

Arguments are always processed strictly in textual order.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Union

from quosure.types import Value, EvaluatorFn
from quosure.errors import ArityError, QuosureTypeError
from quosure.types.bind import bind_arguments
from quosure.types.closure import Closure
from quosure.types.environment import Environment
from quosure.types.expression import Argument
from quosure.types.operation import Operation, Policy
from quosure.types.promise import Promise, Dots
from quosure.types.quosure import Quosure
from quosure.types.symbol import DOTS

log = logging.getLogger(__name__)

Pending = Union[Value, Promise]


def expand_dots(
    args: tuple[Argument, ...], env: Environment, forward: bool = True
) -> Iterator[tuple[Optional[str], Pending]]:
    """Yield (name, expression) pairs, replacing a bare `...` with the frame's promises."""
    for arg in args:
        if forward and arg.name is None and arg.expr == DOTS:
            dots = env.lookup_unmasked(DOTS)
            if not isinstance(dots, Dots):
                raise QuosureTypeError("`...` used in a frame without dots")
            yield from dots
        else:
            yield arg.name, arg.expr


def _force(item: Pending, env: Environment, evaluate_fn: EvaluatorFn) -> Value:
    if isinstance(item, Promise):
        return item.force(evaluate_fn)
    return evaluate_fn(item, env)


def _quote(item: Pending, env: Environment) -> Quosure:
    if isinstance(item, Promise):
        # forwarded through `...`: capture the original syntax in its own scope
        from quosure.evaluation.capture import capture_promise
        return capture_promise(item)
    if isinstance(item, Quosure):
        return item
    return Quosure(item, env)


def _add_named(named: dict[str, Value], name: str, value: Value) -> None:
    if name in named:
        raise ArityError(f"Argument {name} supplied more than once")
    named[name] = value


def apply_operation(
    op: Operation,
    args: tuple[Argument, ...],
    env: Environment,
    evaluate_fn: EvaluatorFn,
) -> Value:
    """Apply a host operation, consulting its declared policy for every argument."""
    positional: list[Value] = []
    named: dict[str, Value] = {}
    ordered: list[Argument] = []
    for name, item in expand_dots(args, env, op.forward_dots):
        policy = op.policy_for(len(positional) if name is None else None, name)
        if policy is Policy.QUOTING:
            value = _quote(item, env)
        else:
            value = _force(item, env, evaluate_fn)
        if name is None:
            positional.append(value)
        else:
            _add_named(named, name, value)
        ordered.append(Argument(name, value))
    log.debug("dispatching %s with %d positional, %d named", op.name, len(positional), len(named))
    if op.ordered:
        return op.fn(env, ordered)
    return op.fn(env, positional, named)


def apply_closure(
    fn: Closure,
    args: tuple[Argument, ...],
    env: Environment,
    evaluate_fn: EvaluatorFn,
) -> Value:
    """Apply a Closure: every argument becomes a Promise over the caller's syntax."""
    supplied = [
        (name, item if isinstance(item, Promise) else Promise(item, env))
        for name, item in expand_dots(args, env)
    ]
    frame = bind_arguments(fn, supplied)
    return evaluate_fn(fn.body, frame)


def apply_callable(
    fn,
    args: tuple[Argument, ...],
    env: Environment,
    evaluate_fn: EvaluatorFn,
) -> Value:
    positional: list[Value] = []
    named: dict[str, Value] = {}
    for name, item in expand_dots(args, env):
        value = _force(item, env, evaluate_fn)
        if name is None:
            positional.append(value)
        else:
            _add_named(named, name, value)
    return fn(*positional, **named)


def apply(
    head: Value,
    args: tuple[Argument, ...],
    env: Environment,
    evaluate_fn: EvaluatorFn,
) -> Value:
    """Apply an Operation, a Closure or a Python callable.

    Raises QuosureTypeError for anything else.
    """
    if isinstance(head, Operation):
        return apply_operation(head, args, env, evaluate_fn)
    elif isinstance(head, Closure):
        return apply_closure(head, args, env, evaluate_fn)
    elif callable(head):
        return apply_callable(head, args, env, evaluate_fn)
    else:
        raise QuosureTypeError(f"Cannot apply non-function {head!r}")
