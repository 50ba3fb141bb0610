"""Host-declared operations and their per-parameter quoting policy."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Mapping, Optional

from quosure.types import Value


class Policy(Enum):
    """How an operation receives an argument.

    QUOTING:    a Quosure of the argument expression and the calling environment.
    EVALUATING: the forced value.
    """

    QUOTING = "quoting"
    EVALUATING = "evaluating"


QUOTING = Policy.QUOTING
EVALUATING = Policy.EVALUATING

# fn(env, args, named) -> value, or fn(env, arguments) for ordered operations
OperationFn = Callable[..., Value]


class Operation:
    """A callable whose quoting policy is fixed when it is defined.

    `params` gives the policy of each leading positional argument, `rest` the
    policy of any further positional argument, and `named` the policy of named
    arguments by name (falling back to `rest`).
    """

    __slots__ = ("name", "fn", "params", "rest", "named", "ordered", "forward_dots")

    def __init__(
        self,
        name: str,
        fn: OperationFn,
        params: tuple[Policy, ...] = (),
        rest: Policy = Policy.EVALUATING,
        named: Optional[Mapping[str, Policy]] = None,
        ordered: bool = False,
        forward_dots: bool = True,
    ):
        self.name = name
        self.fn = fn
        self.params = tuple(params)
        self.rest = rest
        self.named = dict(named or {})
        # ordered operations get one list of Argument(name, value) in textual order
        self.ordered = ordered
        # when false, a `...` argument is passed through as the symbol itself
        self.forward_dots = forward_dots

    def policy_for(self, position: Optional[int], name: Optional[str]) -> Policy:
        """Policy of the argument at positional index `position`, or named `name`."""
        if name is not None:
            return self.named.get(name, self.rest)
        if position is not None and position < len(self.params):
            return self.params[position]
        return self.rest

    @property
    def quoting(self) -> bool:
        return (
            Policy.QUOTING in self.params
            or self.rest is Policy.QUOTING
            or Policy.QUOTING in self.named.values()
        )

    def __repr__(self) -> str:
        return f"<operation {self.name}>"


def operation(
    name: Optional[str] = None,
    params: tuple[Policy, ...] = (),
    rest: Policy = Policy.EVALUATING,
    named: Optional[Mapping[str, Policy]] = None,
    ordered: bool = False,
    forward_dots: bool = True,
) -> Callable[[OperationFn], Operation]:
    """Decorator form of Operation:

        @operation("group_by", params=(EVALUATING,), rest=QUOTING)
        def group_by(env, args, named): ...
    """
    def wrap(fn: OperationFn) -> Operation:
        return Operation(name or fn.__name__, fn, params, rest, named, ordered, forward_dots)
    return wrap
