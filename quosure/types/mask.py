"""Data masks and the `.data` / `.env` pronouns."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterator

import numpy as np

from quosure.types import Value
from quosure.errors import UnboundSymbol
from quosure.types.environment import Environment
from quosure.types.symbol import Symbol


class DataMask(Mapping):
    """Read-only view over named fields, consulted before environment bindings.

    Sequence fields are stored as numpy arrays so masked expressions can use
    vectorised arithmetic.
    """

    def __init__(self, data: Mapping[str, Value]):
        self._fields: dict[str, Value] = {}
        for k, v in data.items():
            if isinstance(v, (list, tuple)):
                v = np.asarray(v)
            self._fields[str(k)] = v

    def __getitem__(self, key: str) -> Value:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"<DataMask: {', '.join(self._fields)}>"


class DataPronoun:
    """`.data`: lookups that only ever consult the mask."""

    __slots__ = ("mask",)

    def __init__(self, mask: Mapping[str, Value]):
        self.mask = mask

    def __getitem__(self, name: str | Symbol) -> Value:
        key = str(name)
        try:
            return self.mask[key]
        except KeyError:
            raise UnboundSymbol(f"Column `{key}` not found in `.data`") from None

    def __repr__(self) -> str:
        return "<pronoun .data>"


class EnvPronoun:
    """`.env`: lookups that skip every mask."""

    __slots__ = ("env",)

    def __init__(self, env: Environment):
        self.env = env

    def __getitem__(self, name: str | Symbol) -> Value:
        sym = name if isinstance(name, Symbol) else Symbol(name)
        return self.env.lookup_unmasked(sym)

    def __repr__(self) -> str:
        return "<pronoun .env>"


DATA_PRONOUN = Symbol(".data")
ENV_PRONOUN = Symbol(".env")


def mask_environment(env: Environment, data: Mapping[str, Value]) -> Environment:
    """Return a child of `env` masked by `data`, with both pronouns installed."""
    mask = data if isinstance(data, DataMask) else DataMask(data)
    masked = env.child(mask=mask)
    masked.define(DATA_PRONOUN, DataPronoun(mask))
    masked.define(ENV_PRONOUN, EnvPronoun(env))
    return masked
