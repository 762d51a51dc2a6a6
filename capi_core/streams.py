"""Base classes for serializing values to and from a wire format.

A concrete stream implements the hooks for the kinds of values its format
knows about. The base classes decide which hook a value or a type belongs
to, unwrap deployable values, and keep track of errors.
"""

from __future__ import annotations

import typing
from typing import Any, Optional

from capi_core.deployable import Deployable
from capi_core.enumeration import Enumeration
from capi_core.ranged import RangedInteger
from capi_core.variant import Variant

# Order matters: bool is a subclass of int and must be seen first.
_WRITE_HOOKS: tuple[tuple[tuple[type, ...], str], ...] = (
    ((bool,), "_write_bool"),
    ((Enumeration,), "_write_enumeration"),
    ((RangedInteger,), "_write_ranged_integer"),
    ((Variant,), "_write_variant"),
    ((int,), "_write_int"),
    ((float,), "_write_float"),
    ((str,), "_write_str"),
    ((list, tuple), "_write_list"),
    ((dict,), "_write_dict"),
)

_READ_HOOKS: tuple[tuple[tuple[type, ...], str], ...] = (
    ((bool,), "_read_bool"),
    ((Enumeration,), "_read_enumeration"),
    ((RangedInteger,), "_read_ranged_integer"),
    ((Variant,), "_read_variant"),
    ((int,), "_read_int"),
    ((float,), "_read_float"),
    ((str,), "_read_str"),
    ((list,), "_read_list"),
    ((dict,), "_read_dict"),
)


def _hook_name(kind: type, table, fallback: str) -> str:
    for bases, name in table:
        if issubclass(kind, bases):
            return name
    return fallback


class _ErrorState:
    _has_error: bool = False

    @property
    def has_error(self) -> bool:
        """Whether the stream has met an error."""
        return self._has_error

    def _set_error(self) -> None:
        self._has_error = True


class OutputStream(_ErrorState):
    """Writes values; subclasses provide the ``_write_<kind>`` hooks.

    Hooks take ``(value, deployment)``. Enumerations and ranged integers
    default to writing their underlying integer. Values of no known kind go
    to ``_write_object``.
    """

    def write_value(self, value: Any, deployment: Optional[Any] = None) -> "OutputStream":
        """Write one value under the given deployment and return the stream."""
        name = _hook_name(type(value), _WRITE_HOOKS, "_write_object")
        hook = getattr(self, name, None)
        if hook is None:
            raise TypeError(
                f"{type(self).__name__} cannot write a value of type {type(value).__name__}"
            )
        hook(value, deployment)
        return self

    def write(self, *args: Any) -> "OutputStream":
        """Write each argument in turn; deployables carry their own deployment."""
        for item in args:
            if isinstance(item, Deployable):
                self.write_value(item.value, item.deployment)
            else:
                self.write_value(item)
        return self

    def __lshift__(self, value: Any) -> "OutputStream":
        return self.write(value)

    def _write_enumeration(self, value: Enumeration, deployment: Optional[Any]) -> None:
        self.write_value(value.value, deployment)

    def _write_ranged_integer(self, value: RangedInteger, deployment: Optional[Any]) -> None:
        self.write_value(int(value), deployment)


class InputStream(_ErrorState):
    """Reads values; subclasses provide the ``_read_<kind>`` hooks.

    Hooks take ``(type_, deployment)`` and return the value read; ``type_`` is
    passed as given, so parameterised types such as ``list[int]`` keep their
    arguments. Enumerations and ranged integers default to reading an integer
    and wrapping it. Types of no known kind go to ``_read_object``.
    """

    def read_value(self, type_: Any, deployment: Optional[Any] = None) -> Any:
        """Read one value of ``type_`` under the given deployment."""
        origin = typing.get_origin(type_) or type_
        if not isinstance(origin, type):
            raise TypeError(f"{type_!r} is not a type")
        name = _hook_name(origin, _READ_HOOKS, "_read_object")
        hook = getattr(self, name, None)
        if hook is None:
            raise TypeError(
                f"{type(self).__name__} cannot read a value of type {origin.__name__}"
            )
        return hook(type_, deployment)

    def read(self, target: Any) -> Any:
        """Read a value for ``target`` and return it.

        ``target`` is a type, or a Deployable whose ``value`` is a type or an
        instance of the type to read; the Deployable's value is replaced by
        what was read, using its deployment.
        """
        if isinstance(target, Deployable):
            current = target.value
            if current is None:
                raise TypeError("cannot read into a deployable without a value or type")
            kind = current if isinstance(current, type) or typing.get_origin(current) else type(current)
            target.value = self.read_value(kind, target.deployment)
            return target.value
        return self.read_value(target)

    def __rshift__(self, target: Any) -> Any:
        return self.read(target)

    def _read_enumeration(self, type_: type, deployment: Optional[Any]) -> Enumeration:
        return type_(self.read_value(int, deployment))

    def _read_ranged_integer(self, type_: type, deployment: Optional[Any]) -> RangedInteger:
        return type_(self.read_value(int, deployment))