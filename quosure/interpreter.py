from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Optional

from quosure.types import Value, Expression
from quosure.types.environment import Environment
from quosure.types.operation import Operation, OperationFn, Policy
from quosure.types.quosure import Quosure
from quosure.builtin import register
from quosure.config import configure_logging
from quosure.evaluation.capture import quo, expr
from quosure.evaluation.evaluator import evaluate


class Interpreter:
    """
    Holds a global Environment with the builtins registered, and evaluates
    expression trees against it. Host operations are added with `operation`.
    """

    def __init__(self, builtins: bool = True):
        configure_logging()
        self.env: Environment = Environment(name="global")
        if builtins:
            register(self.env)

    def define(self, name: str, value: Value) -> None:
        self.env.define(name, value)

    def operation(
        self,
        name: Optional[str] = None,
        params: tuple[Policy, ...] = (),
        rest: Policy = Policy.EVALUATING,
        named: Optional[Mapping[str, Policy]] = None,
        ordered: bool = False,
        forward_dots: bool = True,
    ) -> Callable[[OperationFn], Operation]:
        """Decorator registering a host operation in the global environment."""
        def wrap(fn: OperationFn) -> Operation:
            op = Operation(name or fn.__name__, fn, params, rest, named, ordered, forward_dots)
            self.env.define(op.name, op)
            return op
        return wrap

    def eval(self, expression: Expression | Quosure, data: Optional[Mapping[str, Value]] = None) -> Value:
        """Evaluate in the global environment; quosures keep their own."""
        if isinstance(expression, Quosure):
            return evaluate(expression, None, data)
        return evaluate(expression, self.env, data)

    def quo(self, template: Expression) -> Quosure:
        return quo(template, self.env)

    def expr(self, template: Expression) -> Expression:
        return expr(template, self.env)
