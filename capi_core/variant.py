"""A tagged union over a fixed list of alternative types."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, ClassVar


class Variant:
    """Holds exactly one value of one of the types it is parameterised with.

    Parameterise with ``Variant[int, str]`` and instantiate the result. The
    type index runs from 1 at the *end* of the type list up to
    ``max_value_type`` for the first type. A default-constructed variant holds
    a default-constructed value of its first type.
    """

    __slots__ = ("_value", "_value_type")

    types: ClassVar[tuple[type, ...]] = ()

    def __class_getitem__(cls, params):
        if cls.types:
            raise TypeError(f"{cls.__name__} is already parameterised")
        if not isinstance(params, tuple):
            params = (params,)
        return _parameterise(cls, params)

    def __init__(self, *args):
        if not self.types:
            raise TypeError("Variant must be parameterised with its types before use")
        if len(args) > 1:
            raise TypeError("Variant takes at most one value")
        if not args:
            first = self.types[0]
            self._value = first()
            self._value_type = self.max_value_type
        else:
            self._value = None
            self._value_type = 0
            self.set(args[0])

    @property
    def value(self) -> Any:
        """The contained value."""
        return self._value

    @property
    def value_type(self) -> int:
        """Index of the contained type, counted from 1 at the end of the type list."""
        return self._value_type

    @property
    def max_value_type(self) -> int:
        """Number of alternative types."""
        return len(self.types)

    @property
    def has_value(self) -> bool:
        return 0 < self._value_type <= len(self.types)

    @property
    def position(self) -> int:
        """Zero-based position of the contained type in the type list."""
        if not self.has_value:
            raise ValueError("variant holds no value")
        return len(self.types) - self._value_type

    @property
    def contained_type(self) -> type:
        """The type currently held."""
        return self.types[self.position]

    def type_index(self, type_: type) -> int:
        """Index that ``type_`` would have in this variant, or 0 if it is not one of its types."""
        for position, candidate in enumerate(self.types):
            if candidate is type_:
                return len(self.types) - position
        return 0

    def _select_type(self, type_: type) -> type:
        if type_ in self.types:
            return type_
        for candidate in self.types:
            if getattr(candidate, "Literal", None) is type_:
                return candidate
        raise TypeError(f"{type_!r} is not one of {self._type_names()}")

    def _select_for_value(self, value: Any) -> tuple[type, Any]:
        kind = type(value)
        if kind in self.types:
            return kind, value
        for candidate in self.types:
            literal = getattr(candidate, "Literal", None)
            if isinstance(literal, type) and isinstance(value, literal):
                return candidate, candidate(value)
        for candidate in self.types:
            if isinstance(value, candidate):
                return candidate, value
        raise TypeError(f"value of type {kind.__name__} fits none of {self._type_names()}")

    def is_type(self, type_: type) -> bool:
        """Whether the contained value is of ``type_``."""
        return self.type_index(self._select_type(type_)) == self._value_type

    def get(self, type_: type) -> Any:
        """Return the contained value; raise TypeError if it is not of ``type_``."""
        selected = self._select_type(type_)
        if self.type_index(selected) != self._value_type:
            raise TypeError(
                f"variant does not hold a {selected.__name__}"
            )
        return self._value

    def set(self, value: Any) -> "Variant":
        """Replace the contained value; a variant of the same kind is copied."""
        if isinstance(value, Variant):
            if type(value).types != self.types:
                raise TypeError("cannot assign a variant with different types")
            self._value = value._value
            self._value_type = value._value_type
            return self
        selected, converted = self._select_for_value(value)
        self._value = converted
        self._value_type = self.type_index(selected)
        return self

    def __eq__(self, other):
        if not isinstance(other, Variant) or type(other).types != self.types:
            return NotImplemented
        return self._value_type == other._value_type and self._value == other._value

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    @classmethod
    def _type_names(cls) -> str:
        return "(" + ", ".join(t.__name__ for t in cls.types) + ")"


@lru_cache(maxsize=None)
def _parameterise(base: type, types: tuple[type, ...]) -> type:
    if not types:
        raise TypeError("Variant needs at least one type")
    for candidate in types:
        if not isinstance(candidate, type):
            raise TypeError(f"{candidate!r} is not a type")
    if len(set(types)) != len(types):
        raise TypeError("Variant types must be distinct")
    if len(types) > 255:
        raise TypeError("Variant supports at most 255 types")
    name = "Variant[" + ", ".join(t.__name__ for t in types) + "]"
    return type(name, (base,), {"__slots__": (), "types": types})