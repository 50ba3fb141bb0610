import pytest

from quosure import Interpreter, Environment, Symbol, Call, Assign, Argument

# Most tests work against a fresh global environment with the builtins
# registered. `define_function` builds closures in-tree, the same way a caller
# would, so capture sees real promises created at a call boundary.


@pytest.fixture
def interp():
    return Interpreter()


@pytest.fixture
def env(interp):
    """Return the fresh global environment of the interpreter."""
    return interp.env


@pytest.fixture
def define_function(interp):
    def define(name, *formals_and_body, **defaults):
        *formals, body = formals_and_body
        args = [Argument(None, f if isinstance(f, Symbol) else Symbol(f)) for f in formals]
        args += [Argument(k, v) for k, v in defaults.items()]
        args.append(Argument(None, body))
        return interp.eval(Assign(Symbol(name), Call(Symbol("function"), tuple(args))))
    return define


@pytest.fixture
def bare_env():
    e = Environment(name="bare")
    e.define("x", 2)
    return e
