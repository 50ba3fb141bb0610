"""Text rendering of expressions and quosures.

Calls are rendered in call syntax, `f(a, b = 1)`; markers use the `!!`,
`!!!` and `:=` notation; embedded quosures are prefixed with `^`.
"""

from io import StringIO

import numpy as np

from quosure.types import Value
from quosure.types.expression import (
    Argument,
    Assign,
    Call,
    Literal,
    NameSub,
    Splice,
    Unquote,
)
from quosure.types.missing import MissingType
from quosure.types.quosure import Quosure
from quosure.types.symbol import Symbol

INFIX = {"+", "-", "*", "/", "==", "!=", "<", "<=", ">", ">=", "$"}


def _atom(value: Value) -> str:
    if isinstance(value, bool) or isinstance(value, np.bool_):
        return "TRUE" if value else "FALSE"
    if isinstance(value, MissingType):
        return "NA"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, (tuple, list, np.ndarray)):
        return "c(" + ", ".join(_atom(v) for v in value) + ")"
    if isinstance(value, Quosure):
        return f"<quosure: {deparse(value.expr)}>"
    if isinstance(value, (int, float, complex, np.number)):
        return str(value)
    return f"<{type(value).__name__}>"


def _operand(value: Value) -> str:
    if isinstance(value, (Symbol, Literal, Call, Assign, Quosure)):
        return deparse(value)
    return _atom(value)


def _name(name) -> str:
    if isinstance(name, NameSub):
        return f"{_name_operand(name.operand)} :="
    if isinstance(name, Unquote):
        return f"!!{_operand(name.operand)} ="
    return f"{name} ="


def _name_operand(operand) -> str:
    if isinstance(operand, Unquote):
        return f"!!{_operand(operand.operand)}"
    return str(operand)


def _argument(arg: Argument, buffer: StringIO) -> None:
    if arg.name is not None:
        buffer.write(_name(arg.name))
        buffer.write(" ")
    _write(arg.expr, buffer)


def _write(expr: Value, buffer: StringIO) -> None:
    match expr:
        case Symbol():
            buffer.write(expr.id)
        case Literal():
            buffer.write(_atom(expr.value))
        case Call(head=head, args=args):
            positional = [a for a in args if a.name is None]
            if head.id in INFIX and len(args) == 2 and len(positional) == 2:
                _write(args[0].expr, buffer)
                buffer.write(head.id if head.id == "$" else f" {head.id} ")
                _write(args[1].expr, buffer)
                return
            buffer.write(head.id)
            buffer.write("(")
            for i, arg in enumerate(args):
                if i:
                    buffer.write(", ")
                _argument(arg, buffer)
            buffer.write(")")
        case Assign(target=target, value=value):
            if isinstance(target, NameSub):
                buffer.write(f"{_name_operand(target.operand)} := ")
            elif isinstance(target, Unquote):
                buffer.write(f"!!{_operand(target.operand)} <- ")
            else:
                buffer.write(f"{target} <- ")
            _write(value, buffer)
        case Quosure():
            buffer.write("^")
            _write(expr.expr, buffer)
        case Unquote(operand=operand):
            buffer.write(f"!!{_operand(operand)}")
        case Splice(operand=operand):
            buffer.write(f"!!!{_operand(operand)}")
        case NameSub(operand=operand):
            buffer.write(f"{_name_operand(operand)} :=")
        case _:
            buffer.write(_atom(expr))


def deparse(expr: Value) -> str:
    """Render an expression as source-like text."""
    with StringIO() as buffer:
        _write(expr, buffer)
        return buffer.getvalue()


def display(quosure: Quosure) -> str:
    """Two-part rendering of a quosure: its expression and its environment tag."""
    return (
        "<quosure>\n"
        f"expr: ^{deparse(quosure.expr)}\n"
        f"env:  {quosure.env.tag()}"
    )
