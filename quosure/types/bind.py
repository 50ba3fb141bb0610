from __future__ import annotations

from typing import Optional

from quosure.errors import ArityError
from quosure.types.closure import Closure
from quosure.types.environment import Environment
from quosure.types.promise import Promise, Dots
from quosure.types.symbol import Symbol, DOTS


def bind_arguments(
    fn: Closure,
    supplied: list[tuple[Optional[str], Promise]],
) -> Environment:
    """
    Single source of truth for closure argument binding.

    Matching happens in three passes:
    - named arguments bind to formals of the same name
    - positional arguments fill the remaining formals before `...`, in order
    - whatever is left goes to `...`; without `...` it is an arity error

    Formals declared after `...` can only be matched by name. Unmatched formals
    with a default get a promise of the default evaluated in the new frame.

    Returns a new Environment whose parent is the closure env.
    """
    local_env = Environment(parent=fn.env)
    names = fn.names
    has_dots = DOTS in names
    before_dots = names[: names.index(DOTS)] if has_dots else names

    bound: dict[Symbol, Promise] = {}
    unmatched: list[int] = []

    for i, (name, promise) in enumerate(supplied):
        if name is None:
            unmatched.append(i)
            continue
        target = Symbol(name)
        if target in names and target != DOTS:
            if target in bound:
                raise ArityError(f"Formal argument {name} matched by multiple actual arguments")
            bound[target] = promise
        else:
            unmatched.append(i)

    open_slots = [f for f in before_dots if f not in bound]
    rest: list[int] = []
    for i in unmatched:
        name, promise = supplied[i]
        if name is None and open_slots:
            bound[open_slots.pop(0)] = promise
        else:
            rest.append(i)

    # `...` keeps the caller's textual order
    leftovers = [supplied[i] for i in rest]
    if leftovers and not has_dots:
        raise ArityError(f"Too many arguments: {len(leftovers)} unused")

    missing = []
    for name, default in fn.formals:
        if name == DOTS:
            local_env.define(DOTS, Dots(leftovers))
        elif name in bound:
            local_env.define(name, bound[name])
        elif default is not None:
            local_env.define(name, Promise(default, local_env))
        else:
            missing.append(name)

    if missing:
        raise ArityError(
            f"Too few arguments; missing {len(missing)} parameter(s): {[str(s) for s in missing]}"
        )
    return local_env
