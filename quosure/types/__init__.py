# Core type aliases for the quosure data model.
#
# Naming guidance:
# - Expression: syntax trees built from the node classes in quosure.types.expression.
# - Value:      anything an evaluation can produce (host objects included).
# Both aliases resolve to `Any`; the node classes themselves carry the structure.

from typing import Any, Callable

# Runtime value alias
Value = Any
# Syntax alias
Expression = Any

# Evaluator function type passed into operations and promises
EvaluatorFn = Callable[..., Value]
