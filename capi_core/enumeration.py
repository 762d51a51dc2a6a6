"""Base class for generated enumeration types."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Enumeration(ABC):
    """An enumeration value carried by its underlying base value.

    Subclasses decide which base values are valid via :meth:`validate`.
    """

    __slots__ = ("_value",)

    def __init__(self, value=0):
        if isinstance(value, Enumeration):
            value = value._value
        self._value = value

    @property
    def value(self):
        return self._value

    @abstractmethod
    def validate(self) -> bool:
        """Whether the value is one of the enumeration's literals."""

    def __int__(self) -> int:
        return int(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    @staticmethod
    def _other(other):
        if isinstance(other, Enumeration):
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