"""Integers constrained to a closed range."""

from __future__ import annotations

import operator
from functools import lru_cache


class RangedInteger:
    """An integer value that is expected to lie within ``[minimum, maximum]``.

    Out-of-range values are accepted; :meth:`validate` reports them.
    """

    __slots__ = ("_value",)

    minimum: int = -(2**31)
    maximum: int = 2**31 - 1

    def __init__(self, value=None):
        self._value = self.minimum if value is None else operator.index(value)

    @property
    def value(self) -> int:
        return self._value

    def validate(self) -> bool:
        """Whether the value lies within the range."""
        return self.minimum <= self._value <= self.maximum

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    @staticmethod
    def _other(other):
        if isinstance(other, RangedInteger):
            return other._value
        if isinstance(other, int):
            return other
        return NotImplemented

    def __eq__(self, other):
        o = self._other(other)
        return o if o is NotImplemented else self._value == o

    def __lt__(self, other):
        o = self._other(other)
        return o if o is NotImplemented else self._value < o

    def __le__(self, other):
        o = self._other(other)
        return o if o is NotImplemented else self._value <= o

    def __gt__(self, other):
        o = self._other(other)
        return o if o is NotImplemented else self._value > o

    def __ge__(self, other):
        o = self._other(other)
        return o if o is NotImplemented else self._value >= o


@lru_cache(maxsize=None)
def ranged_integer_type(minimum: int, maximum: int) -> type[RangedInteger]:
    """Return the RangedInteger subclass for the given bounds."""
    if minimum > maximum:
        raise ValueError(f"minimum {minimum} exceeds maximum {maximum}")
    return type(
        f"RangedInteger[{minimum}, {maximum}]",
        (RangedInteger,),
        {"__slots__": (), "minimum": minimum, "maximum": maximum},
    )