"""Construction-time rewrite of Unquote, Splice and NameSub markers.

The pass is purely structural. The only evaluation it performs is of marker
operands, each exactly once and in left-to-right textual order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Optional

import numpy as np

from quosure.types import Value, Expression, EvaluatorFn
from quosure.errors import (
    AmbiguousTargetError,
    InvalidUnquoteContext,
    QuosureTypeError,
    SpliceTypeError,
)
from quosure.types.environment import Environment
from quosure.types.expression import (
    Argument,
    Assign,
    Call,
    Literal,
    NameSub,
    Splice,
    Unquote,
    is_expression,
)
from quosure.types.quosure import Quosure
from quosure.types.symbol import Symbol

log = logging.getLogger(__name__)


def rewrite(
    template: Expression,
    env: Environment,
    evaluate_fn: Optional[EvaluatorFn] = None,
) -> Expression:
    """Resolve every marker in `template` against `env` and return the new tree."""
    if evaluate_fn is None:
        from quosure.evaluation.evaluator import evaluate as evaluate_fn

    if isinstance(template, Unquote):
        return substitute(resolve_operand(template.operand, env, evaluate_fn), env)
    if isinstance(template, Splice):
        raise InvalidUnquoteContext("Splice is only valid in argument position of a call")
    if isinstance(template, NameSub):
        raise InvalidUnquoteContext("Name substitution is only valid as a binding name")
    result = _rewrite_node(template, env, evaluate_fn)
    log.debug("rewrote %r -> %r", template, result)
    return result


def _rewrite_node(node: Expression, env: Environment, evaluate_fn: EvaluatorFn) -> Expression:
    match node:
        case Call(head=head, args=args):
            new_args: list[Argument] = []
            for arg in args:
                name = resolve_name(arg.name, env, evaluate_fn)
                if isinstance(arg.expr, Splice):
                    if name is not None:
                        raise InvalidUnquoteContext(f"Cannot splice into named argument {name}")
                    new_args.extend(expand_splice(arg.expr, env, evaluate_fn))
                else:
                    new_args.append(Argument(name, _rewrite_child(arg.expr, env, evaluate_fn)))
            return Call(head, tuple(new_args))

        case Assign(target=target, value=value):
            if isinstance(target, Unquote):
                raise AmbiguousTargetError(
                    "Cannot unquote a binding name directly; use name substitution (NameSub)"
                )
            if isinstance(target, NameSub):
                target = Symbol(resolve_name(target, env, evaluate_fn))
            elif not isinstance(target, Symbol):
                raise QuosureTypeError(f"Assignment target must be a Symbol, got {target!r}")
            if isinstance(value, Splice):
                raise InvalidUnquoteContext("Splice is not valid as an assigned value")
            return Assign(target, _rewrite_child(value, env, evaluate_fn))

    # Symbols, literals and embedded quosures are already final
    return node


def _rewrite_child(node: Expression, env: Environment, evaluate_fn: EvaluatorFn) -> Expression:
    if isinstance(node, Unquote):
        return substitute(resolve_operand(node.operand, env, evaluate_fn), env)
    if isinstance(node, NameSub):
        raise InvalidUnquoteContext("Name substitution is only valid as a binding name")
    return _rewrite_node(node, env, evaluate_fn)


def resolve_operand(operand: Value, env: Environment, evaluate_fn: EvaluatorFn) -> Value:
    """Value of a marker operand.

    Quosures stand for themselves, expressions are evaluated in `env`, any
    other host value is taken as already evaluated.
    """
    if isinstance(operand, Quosure):
        return operand
    if is_expression(operand):
        return evaluate_fn(operand, env)
    return operand


def substitute(value: Value, env: Environment) -> Expression:
    """The syntax an unquoted value becomes."""
    if isinstance(value, Quosure):
        # Inline the bare expression when it would be evaluated in the same scope anyway
        if value.env is env or isinstance(value.expr, Literal):
            return value.expr
        return value
    if is_expression(value):
        return value
    return Literal(value)


def resolve_name(name: Value, env: Environment, evaluate_fn: EvaluatorFn) -> Optional[str]:
    if name is None or isinstance(name, str):
        return name
    if isinstance(name, Symbol):
        return name.id
    if isinstance(name, Unquote):
        raise AmbiguousTargetError(
            "Cannot unquote an argument name directly; use name substitution (NameSub)"
        )
    if not isinstance(name, NameSub):
        raise QuosureTypeError(f"Argument name must be a string, got {name!r}")

    operand = name.operand
    if isinstance(operand, Unquote):
        operand = resolve_operand(operand.operand, env, evaluate_fn)
        if isinstance(operand, Quosure):
            operand = operand.expr
    if isinstance(operand, Literal):
        operand = operand.value
    if isinstance(operand, Symbol):
        return operand.id
    if isinstance(operand, str):
        return operand
    raise QuosureTypeError(f"Substituted name must be a symbol or string, got {operand!r}")


def expand_splice(marker: Splice, env: Environment, evaluate_fn: EvaluatorFn) -> list[Argument]:
    """Expand a splice marker into sibling arguments, preserving order and names."""
    value = resolve_operand(marker.operand, env, evaluate_fn)
    if isinstance(value, np.ndarray):
        value = value.tolist()

    if isinstance(value, Mapping):
        items = [(str(k), v) for k, v in value.items()]
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = []
        for element in value:
            if isinstance(element, Argument):
                items.append((resolve_name(element.name, env, evaluate_fn), element.expr))
            else:
                items.append((None, element))
    else:
        raise SpliceTypeError(
            f"Splice operand must be an ordered sequence, got {type(value).__name__}"
        )

    log.debug("splicing %d argument(s)", len(items))
    return [Argument(name, substitute(v, env)) for name, v in items]
