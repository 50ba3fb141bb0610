"""quosure: quasiquotation and deferred evaluation.

Capture the syntax a caller wrote together with the scope it was written in,
splice values and other captured syntax into new trees, and evaluate the
result against a chosen scope, optionally masked by a dataset's fields.
"""

import logging

from quosure.errors import (
    QuosureError,
    InvalidSymbol,
    UnboundSymbol,
    InvalidUnquoteContext,
    AmbiguousTargetError,
    ArityError,
    QuosureTypeError,
    SpliceTypeError,
    StaleCaptureError,
    QuosureRecursionError,
)
from quosure.types.symbol import Symbol
from quosure.types.missing import NA
from quosure.types.quosure import Quosure
from quosure.types.expression import (
    Literal,
    Argument,
    Call,
    Assign,
    Unquote,
    Splice,
    NameSub,
    call,
    lit,
)
from quosure.types.environment import Environment
from quosure.types.mask import DataMask
from quosure.types.promise import Promise, Dots
from quosure.types.closure import Closure
from quosure.types.operation import Operation, Policy, QUOTING, EVALUATING, operation
from quosure.evaluation.evaluator import evaluate
from quosure.evaluation.rewrite import rewrite
from quosure.evaluation.capture import capture, capture_all, quo, expr
from quosure.deparse import deparse, display
from quosure.interpreter import Interpreter

logging.getLogger(__name__).addHandler(logging.NullHandler())
