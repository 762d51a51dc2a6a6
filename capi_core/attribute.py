"""Attribute interfaces and a client-side cache for observable attributes."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, Generic, Optional, TypeVar

from capi_core.types import CallStatus

T = TypeVar("T")

AttributeCallback = Callable[[CallStatus, Any], None]


class ReadonlyAttribute(ABC, Generic[T]):
    """An attribute whose value can be read, usually from a remote service."""

    @abstractmethod
    def get_value(self, info: Optional[Any] = None) -> tuple[CallStatus, T]:
        """Fetch the value synchronously; return the call status and the value."""

    @abstractmethod
    def get_value_async(
        self, callback: AttributeCallback, info: Optional[Any] = None
    ) -> "Future[CallStatus]":
        """Fetch the value; ``callback(status, value)`` is invoked on completion."""


class Attribute(ReadonlyAttribute[T]):
    """An attribute whose value can be read and written."""

    @abstractmethod
    def set_value(self, value: T, info: Optional[Any] = None) -> tuple[CallStatus, T]:
        """Set the value synchronously; return the call status and the value actually set."""

    @abstractmethod
    def set_value_async(
        self, value: T, callback: AttributeCallback, info: Optional[Any] = None
    ) -> "Future[CallStatus]":
        """Set the value; ``callback(status, value)`` is invoked on completion."""


class ObservableReadonlyAttribute(ReadonlyAttribute[T]):
    """A read-only attribute that announces changes of its value."""

    @property
    @abstractmethod
    def changed_event(self) -> Any:
        """Event fired with the new value; it provides ``subscribe(callback)``."""


class ObservableAttribute(Attribute[T]):
    """A read-write attribute that announces changes of its value."""

    @property
    @abstractmethod
    def changed_event(self) -> Any:
        """Event fired with the new value; it provides ``subscribe(callback)``."""


def is_observable(attribute: Any) -> bool:
    """Whether ``attribute`` (an instance or a class) announces value changes."""
    kind = attribute if isinstance(attribute, type) else type(attribute)
    return issubclass(kind, (ObservableAttribute, ObservableReadonlyAttribute))


_MISSING = object()


class AttributeCacheExtension(Generic[T]):
    """Keeps the last announced value of an observable attribute.

    For an attribute that is not observable the extension only wraps it and
    has no cache.
    """

    def __init__(self, base_attribute: ReadonlyAttribute[T]):
        self._base = base_attribute
        self._cached: Any = _MISSING
        self._observable = is_observable(base_attribute)
        if self._observable:
            base_attribute.changed_event.subscribe(self._on_value_update)

    @property
    def base_attribute(self) -> ReadonlyAttribute[T]:
        return self._base

    def cached_value(self, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if nothing has been cached yet."""
        if not self._observable:
            raise TypeError("attribute is not observable and has no cache")
        return default if self._cached is _MISSING else self._cached

    def _value_retrieved(self, status: CallStatus, value: T) -> None:
        if status is CallStatus.SUCCESS:
            self._on_value_update(value)

    def _on_value_update(self, value: T) -> None:
        if self._cached is not _MISSING and self._cached == value:
            return
        self._cached = copy.deepcopy(value)