import math

import numpy as np
import pytest
from hypothesis import given, strategies as st

from quosure import (
    Argument,
    ArityError,
    Assign,
    Call,
    Environment,
    EVALUATING,
    InvalidUnquoteContext,
    Interpreter,
    Literal,
    NA,
    NameSub,
    Operation,
    QUOTING,
    QuosureError,
    QuosureRecursionError,
    QuosureTypeError,
    Quosure,
    Symbol,
    UnboundSymbol,
    Unquote,
    call,
    evaluate,
    operation,
    quo,
)


# -----------------------------------------------------
# Basic evaluation
# -----------------------------------------------------

def test_literals_and_symbols(env):
    env.define("x", 42)
    assert evaluate(Literal(3.5), env) == 3.5
    assert evaluate(Symbol("x"), env) == 42
    with pytest.raises(UnboundSymbol):
        evaluate(Symbol("z"), env)


def test_arithmetic_and_comparison(interp):
    assert interp.eval(call("+", 1, 2, 3)) == 6
    assert interp.eval(call("-", 10, 4)) == 6
    assert interp.eval(call("-", 4)) == -4
    assert interp.eval(call("*", 2, 5)) == 10
    assert interp.eval(call("/", 9, 2)) == 4.5
    assert interp.eval(call("<", 1, 2)) is True
    assert interp.eval(call("==", "a", "b")) is False


def test_arithmetic_errors(interp):
    with pytest.raises(ArityError):
        interp.eval(call("/", 1))
    with pytest.raises(QuosureTypeError):
        interp.eval(call("+", 1, "a"))
    with pytest.raises(ArityError):
        interp.eval(call("+", 1, x=2))


def test_vectors(interp):
    assert interp.eval(call("c", 1, call("c", 2, 3))) == (1, 2, 3)
    assert interp.eval(call("length", call("c", 1, 2, 3))) == 3
    assert interp.eval(call("length", "abc")) == 1
    assert interp.eval(call("list", 1, 2)) == [1, 2]
    assert interp.eval(call("list", a=1, b=2)) == {"a": 1, "b": 2}


def test_bare_expression_needs_an_environment():
    with pytest.raises(QuosureTypeError):
        evaluate(Symbol("x"))


def test_non_expressions_are_rejected(env):
    with pytest.raises(QuosureTypeError):
        evaluate(object(), env)


def test_applying_a_non_function(interp):
    interp.define("five", 5)
    with pytest.raises(QuosureTypeError):
        interp.eval(call("five"))


def test_python_callables_receive_forced_values(interp):
    interp.define("hypot", math.hypot)
    assert interp.eval(call("hypot", 3, call("+", 1, 3))) == 5.0


# -----------------------------------------------------
# Operations and their declared policies
# -----------------------------------------------------

def test_quoting_parameter_is_not_looked_up(interp):
    @interp.operation("show", params=(QUOTING, EVALUATING))
    def show(env, args, named):
        return args

    q, value = interp.eval(call("show", Symbol("undefined_name"), call("+", 1, 1)))
    assert q == Quosure(Symbol("undefined_name"), interp.env)
    assert value == 2


def test_named_policies(interp):
    @interp.operation("opts", named={"by": QUOTING})
    def opts(env, args, named):
        return named

    result = interp.eval(call("opts", by=Symbol("col"), n=call("+", 1, 2)))
    assert result["by"] == Quosure(Symbol("col"), interp.env)
    assert result["n"] == 3


def test_policy_lookup():
    op = Operation("op", lambda env, args, named: None, params=(QUOTING,), named={"w": QUOTING})
    assert op.policy_for(0, None) is QUOTING
    assert op.policy_for(1, None) is EVALUATING
    assert op.policy_for(None, "w") is QUOTING
    assert op.policy_for(None, "other") is EVALUATING
    assert op.quoting
    assert not Operation("plain", lambda env, args, named: None).quoting


def test_operation_decorator(env):
    @operation("twice")
    def twice(env, args, named):
        return args[0] * 2

    env.define("twice", twice)
    assert twice.name == "twice"
    assert evaluate(call("twice", 21), env) == 42


def test_operation_can_keep_dots_unexpanded(interp, define_function):
    @interp.operation("raw", rest=QUOTING, forward_dots=False)
    def raw(env, args, named):
        return [q.expr for q in args]

    define_function("wrap", "...", call("raw", Symbol("...")))
    assert interp.eval(call("wrap", 1, 2)) == [Symbol("...")]


def test_duplicate_named_arguments(interp):
    @interp.operation("anything")
    def anything(env, args, named):
        return named

    repeated = Call(Symbol("anything"), [Argument("a", Literal(1)), Argument("a", Literal(2))])
    with pytest.raises(ArityError):
        interp.eval(repeated)


# -----------------------------------------------------
# Assignment
# -----------------------------------------------------

def test_assignment_binds_in_the_innermost_frame(interp, define_function):
    assert interp.eval(Assign("z", Literal(5))) == 5
    assert interp.env.lookup(Symbol("z")) == 5

    define_function("local_only", Assign("w", Literal(1)))
    assert interp.eval(call("local_only")) == 1
    with pytest.raises(UnboundSymbol):
        interp.env.lookup(Symbol("w"))


def test_unrewritten_computed_target(env):
    with pytest.raises(InvalidUnquoteContext):
        evaluate(Assign(NameSub(Unquote("x")), Literal(1)), env)


# -----------------------------------------------------
# Closures
# -----------------------------------------------------

def test_closure_defaults_are_lazy_in_the_new_frame(interp, define_function):
    define_function("f", "x", call("+", Symbol("x"), Symbol("y")), y=call("*", Symbol("x"), 2))
    assert interp.eval(call("f", 3)) == 9
    assert interp.eval(call("f", 3, y=1)) == 4
    assert interp.eval(call("f", y=1, x=3)) == 4


def test_closure_arity(interp, define_function):
    define_function("one", "x", Symbol("x"))
    with pytest.raises(ArityError):
        interp.eval(call("one", 1, 2))
    with pytest.raises(ArityError):
        interp.eval(call("one"))
    with pytest.raises(ArityError):
        interp.eval(call("one", 1, x=2))


def test_closure_sees_its_definition_scope(interp, define_function):
    interp.define("offset", 10)
    define_function("shift", "x", call("+", Symbol("x"), Symbol("offset")))
    assert interp.eval(call("shift", 1)) == 11


def test_arguments_are_evaluated_at_most_once(interp, define_function):
    calls = []

    @interp.operation("tick")
    def tick(env, args, named):
        calls.append(1)
        return len(calls)

    define_function("twice", "x", call("+", Symbol("x"), Symbol("x")))
    assert interp.eval(call("twice", call("tick"))) == 2
    assert len(calls) == 1


def test_unused_arguments_are_never_evaluated(interp, define_function):
    define_function("ignore", "x", Literal("done"))
    assert interp.eval(call("ignore", Symbol("not_defined"))) == "done"


def test_recursive_default_is_reported(interp, define_function):
    define_function("loop", Symbol("x"), x=Symbol("x"))
    with pytest.raises(QuosureError, match="already under evaluation"):
        interp.eval(Call(Symbol("loop"), ()))


def test_function_rejects_repeated_formals(interp):
    with pytest.raises(ArityError):
        interp.eval(call("function", Symbol("a"), Symbol("a"), Symbol("a")))


def test_nesting_limit(interp, define_function, monkeypatch):
    monkeypatch.setenv("QUOSURE_MAX_DEPTH", "5")
    define_function("forever", "n", call("forever", Symbol("n")))
    with pytest.raises(QuosureRecursionError):
        interp.eval(call("forever", 1))
    # the depth counter is restored after the failure
    assert interp.eval(call("+", 1, 1)) == 2


# -----------------------------------------------------
# Data masks and pronouns
# -----------------------------------------------------

def test_mask_fields_shadow_bindings(interp):
    interp.define("hwy", 100)
    assert interp.eval(call("mean", Symbol("hwy")), data={"hwy": [10, 30]}) == 20.0
    assert interp.eval(Symbol("hwy")) == 100


def test_pronouns_disambiguate(interp):
    interp.define("hwy", 100)
    data = {"hwy": [10, 30]}
    from_data = interp.eval(call("$", Symbol(".data"), Symbol("hwy")), data=data)
    assert list(from_data) == [10, 30]
    assert interp.eval(call("$", Symbol(".env"), Symbol("hwy")), data=data) == 100


def test_missing_data_pronoun_column(interp):
    with pytest.raises(UnboundSymbol, match="not found in `.data`"):
        interp.eval(call("$", Symbol(".data"), Symbol("cty")), data={"hwy": [1]})


def test_embedded_quosure_sees_the_active_mask(interp):
    # `k` lives only in the quosure's scope, `hwy` only in the mask
    scope = Environment(parent=interp.env)
    scope.define("k", 2)
    template = call("mean", call("+", Symbol("hwy"), Quosure(Symbol("k"), scope)))
    assert interp.eval(template, data={"hwy": [8, 12]}) == 12.0


def test_quosure_built_in_another_scope_keeps_it(interp):
    inner = Environment(parent=interp.env, name="inner")
    inner.define("v", 7)
    q = quo(call("*", Symbol("v"), Unquote(Quosure(Symbol("v"), inner))), inner)
    assert evaluate(q) == 49


def test_eval_tidy(interp):
    q = interp.quo(call("sum", Symbol("hwy")))
    interp.define("q", q)
    assert interp.eval(call("eval_tidy", Symbol("q"), data={"hwy": [1, 2, 3]})) == 6.0
    with pytest.raises(QuosureTypeError):
        interp.eval(call("eval_tidy", Symbol("q"), data=5))


def test_eval_tidy_with_an_environment_override(interp):
    other = Environment(name="other")
    other.define("x", "from other")
    interp.define("other", other)
    interp.define("x", "from global")
    q = interp.quo(Symbol("x"))
    interp.define("q", q)
    assert interp.eval(call("eval_tidy", Symbol("q"))) == "from global"
    assert interp.eval(call("eval_tidy", Symbol("q"), env=Symbol("other"))) == "from other"


def test_missing_values_in_summaries(interp):
    data = {"hwy": [10, NA, 30]}
    assert interp.eval(call("mean", Symbol("hwy")), data=data) is NA
    assert interp.eval(call("mean", Symbol("hwy"), na_rm=True), data=data) == 20.0
    with pytest.raises(QuosureTypeError):
        interp.eval(call("mean", Symbol("hwy")), data={"hwy": ["a", "b"]})


def test_masked_columns_are_arrays(interp):
    value = interp.eval(call("*", Symbol("hwy"), 2), data={"hwy": [1, 2]})
    assert isinstance(value, np.ndarray)
    assert value.tolist() == [2, 4]


# -----------------------------------------------------
# Properties
# -----------------------------------------------------

@given(st.integers(), st.integers())
def test_unquoted_values_evaluate_to_themselves(a, b):
    interp = Interpreter()
    template = call("+", Unquote(a), Unquote(Literal(b)))
    assert interp.eval(interp.expr(template)) == a + b


@given(st.lists(st.integers(min_value=-1000, max_value=1000), min_size=1, max_size=20))
def test_quosure_evaluation_ignores_the_caller_scope(values):
    interp = Interpreter()
    inner = Environment(parent=interp.env)
    inner.define("xs", list(values))
    q = quo(call("sum", Symbol("xs")), inner)
    interp.define("xs", [0])
    assert interp.eval(q) == float(sum(values))


@pytest.mark.parametrize(
    "expression",
    [
        Literal(3),
        Symbol("x"),
        call("+", Symbol("x"), 1),
        call("c", Symbol("x"), call("*", Symbol("x"), 2)),
        call("mean", call("c", 1, 2, Symbol("x"))),
        Assign("y", call("-", Symbol("x"))),
    ],
)
def test_quote_then_evaluate_matches_direct_evaluation(interp, expression):
    interp.define("x", 4)
    assert evaluate(quo(expression, interp.env)) == evaluate(expression, interp.env)
