"""Quote construction and capture.

`quo` and `expr` build syntax written at the current call site. `capture`
recovers the syntax a caller supplied for a parameter, together with the
caller's environment, without evaluating it.
"""

from __future__ import annotations

import logging
from typing import Optional

from quosure.types import Expression
from quosure.errors import StaleCaptureError, QuosureTypeError
from quosure.types.environment import Environment
from quosure.types.expression import Argument, Unquote
from quosure.types.promise import Promise, Dots
from quosure.types.quosure import Quosure
from quosure.types.symbol import Symbol, DOTS
from quosure.evaluation.evaluator import evaluate
from quosure.evaluation.rewrite import rewrite, resolve_operand, substitute

log = logging.getLogger(__name__)


def quo(template: Expression | Quosure, env: Optional[Environment] = None) -> Quosure:
    """Quosure of `template`, with its markers resolved in `env`.

    A quosure may be passed without `env` to resolve the raw syntax an
    operation received for a Quoting parameter. When the whole template is an
    unquoted quosure, that quosure is returned as is.
    """
    if isinstance(template, Quosure) and env is None:
        template, env = template.expr, template.env
    if env is None:
        raise QuosureTypeError("quo requires an environment for a bare expression")
    result = rewrite(template, env, evaluate)
    if isinstance(result, Quosure):
        return result
    return Quosure(result, env)


def expr(template: Expression, env: Environment) -> Expression:
    """The rewritten tree alone."""
    return rewrite(template, env, evaluate)


def _as_symbol(name: Symbol | str) -> Symbol:
    if isinstance(name, str):
        return Symbol(name)
    if isinstance(name, Symbol):
        return name
    raise QuosureTypeError(f"Parameter name must be a symbol or string, got {name!r}")


def capture_promise(promise: Promise, name: str = "argument") -> Quosure:
    if promise.forced:
        raise StaleCaptureError(
            f"Cannot capture {name}: it has already been evaluated"
        )
    if promise.captured is None:
        promise.captured = _quote_promise(promise)
    return promise.captured


def _quote_promise(promise: Promise) -> Quosure:
    # Forwarded quosures are returned as they are, not rebound to this frame
    if isinstance(promise.expr, Quosure):
        return promise.expr
    if isinstance(promise.expr, Unquote):
        value = resolve_operand(promise.expr.operand, promise.env, evaluate)
        if isinstance(value, Quosure):
            return value
        return Quosure(substitute(value, promise.env), promise.env)
    if isinstance(promise.expr, Symbol):
        forwarded = _forwarded(promise, promise.expr, promise.env)
        if forwarded is not None:
            return forwarded
    return quo(promise.expr, promise.env)


def _forwarded(promise: Promise, sym: Symbol, env: Environment) -> Optional[Quosure]:
    """The quosure a bare name passed on from an intermediate frame stands for.

    - a name bound to a quosure gives that quosure
    - a name bound to an argument supplied further up follows it to the
      caller's syntax, without forcing it
    - a name bound to the frame's own default or to an already forced value
      gives that value when it is a quosure
    Anything else returns None and the name itself is captured.
    """
    for frame in env.frames():
        if sym in frame.vars:
            binding = frame.vars[sym]
            break
    else:
        return None
    if isinstance(binding, Quosure):
        return binding
    if not isinstance(binding, Promise) or binding is promise:
        return None
    if not binding.forced and binding.env is not frame:
        return capture_promise(binding, str(sym))
    value = binding.force(evaluate)
    return value if isinstance(value, Quosure) else None


def capture(env: Environment, name: Symbol | str) -> Quosure:
    """
    Capture the argument bound to parameter `name` in the frame `env`.

    Only the current frame is consulted: masks and parent frames are never
    searched, since a parameter always lives in its own call frame.
    """
    sym = _as_symbol(name)
    binding = env.lookup_local(sym)
    if isinstance(binding, Quosure):
        return binding
    if isinstance(binding, Promise):
        result = capture_promise(binding, str(sym))
        log.debug("captured %s -> %r", sym, result)
        return result
    raise StaleCaptureError(f"Cannot capture {sym}: it is bound to a value, not to caller syntax")


def capture_all(env: Environment, name: Symbol | str = DOTS) -> list[Argument]:
    """Capture every argument collected by a `...` parameter, keeping names."""
    sym = _as_symbol(name)
    binding = env.lookup_local(sym)
    if not isinstance(binding, Dots):
        raise QuosureTypeError(f"{sym} does not hold dots")
    return [Argument(arg_name, capture_promise(p, str(sym))) for arg_name, p in binding]
