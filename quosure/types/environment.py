"""Runtime environment for quosure.

The Environment stores bindings of Symbols to values and supports nested scopes
via a `parent` link. A frame may also carry a mask: an auxiliary lookup source
(typically the columns of a dataset) consulted before the frame's own bindings.

Frames only ever write to themselves. A parent is never mutated through a
child, so a frame shared by many quosures can be read safely from anywhere.
"""

from __future__ import annotations

import threading
from io import StringIO
from typing import Iterator, Mapping, Optional

from quosure.types import Value
from quosure.errors import InvalidSymbol, UnboundSymbol
from quosure.types.symbol import Symbol


class Environment:
    """Hierarchical mapping from Symbols to values with an optional mask."""

    __slots__ = (
        "vars",
        "parent",
        "mask",
        "name",
        "_lock",
        "__weakref__",
    )

    def __init__(
        self,
        parent: Optional[Environment] = None,
        mask: Optional[Mapping[str, Value]] = None,
        name: Optional[str] = None,
    ):
        self.vars: dict[Symbol, Value] = {}
        self.parent: Environment | None = parent
        self.mask: Mapping[str, Value] | None = mask
        self.name: str | None = name
        self._lock = threading.Lock()

    def child(self, mask: Optional[Mapping[str, Value]] = None, name: Optional[str] = None) -> Environment:
        """Create a new frame whose parent is this one."""
        return Environment(parent=self, mask=mask, name=name)

    def define(self, name: Symbol | str, value: Value) -> None:
        """Bind `name` to `value` in this frame.

        Raises InvalidSymbol if `name` is neither a Symbol nor a string.
        """
        if isinstance(name, str):
            name = Symbol(name)
        if not isinstance(name, Symbol):
            raise InvalidSymbol(f"Cannot define {name!r} as a symbol")
        with self._lock:
            self.vars[name] = value

    def update(self, mapping: Mapping[Symbol | str, Value]) -> None:
        """Bulk-define a mapping of Symbol -> value in the current frame."""
        for k, v in mapping.items():
            self.define(k, v)

    def frames(self) -> Iterator[Environment]:
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.parent

    def find(self, symbol: Symbol) -> Optional[Environment]:
        """Find the nearest frame whose mask or bindings contain `symbol`."""
        for env in self.frames():
            if env.mask is not None and symbol.id in env.mask:
                return env
            if symbol in env.vars:
                return env
        return None

    def lookup(self, name: Symbol) -> Value:
        """Look up the value bound to `name`.

        Order of resolution, frame by frame from this one to the root:
        1) the frame's mask
        2) the frame's own bindings
        Raises UnboundSymbol if not found.
        """
        for env in self.frames():
            if env.mask is not None and name.id in env.mask:
                return env.mask[name.id]
            if name in env.vars:
                return env.vars[name]
        raise UnboundSymbol(f"Cannot lookup unbound symbol {name}")

    def lookup_unmasked(self, name: Symbol) -> Value:
        """Look up `name` in ordinary bindings only, skipping every mask."""
        for env in self.frames():
            if name in env.vars:
                return env.vars[name]
        raise UnboundSymbol(f"Cannot lookup unbound symbol {name}")

    def lookup_local(self, name: Symbol) -> Value:
        """Raw binding of `name` in this frame alone; no mask and no parents."""
        try:
            return self.vars[name]
        except KeyError:
            raise UnboundSymbol(f"{name} is not bound in the current frame") from None

    def nearest_mask(self) -> Optional[Mapping[str, Value]]:
        for env in self.frames():
            if env.mask is not None:
                return env.mask
        return None

    def tag(self) -> str:
        """Short label used when displaying quosures."""
        return self.name if self.name is not None else f"0x{id(self):x}"

    def _write_vars(self, buffer: StringIO) -> None:
        """Write this frame's variables into the buffer in a compact form."""
        buffer.write("{")
        first = True
        for k, v in self.vars.items():
            if not first:
                buffer.write(", ")
            buffer.write(f"{k}: {v!r}")
            first = False
        buffer.write("}")

    def __str__(self) -> str:
        """Human-readable single-frame view with an indicator for parent."""
        with StringIO() as buffer:
            if self.mask is not None:
                buffer.write(f"[mask: {', '.join(map(str, self.mask))}] ")
            self._write_vars(buffer)
            if self.parent is not None:
                buffer.write(" -> ...")  # indicate parent exists
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"<Environment {self.tag()}>"
