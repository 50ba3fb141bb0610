from __future__ import annotations


class MissingType:
    """The missing-value marker. There is exactly one instance, `NA`."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self): return "NA"
    def __bool__(self): return False

    def __eq__(self, other):
        return isinstance(other, MissingType)

    def __hash__(self):
        return hash(MissingType)

    def __reduce__(self):
        return (MissingType, ())


NA = MissingType()
