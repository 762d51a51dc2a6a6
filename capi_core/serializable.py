"""Serialization of argument lists through a stream, stopping at the first error."""

from __future__ import annotations

from typing import Any

from capi_core.deployable import Deployable
from capi_core.streams import InputStream, OutputStream


class SerializationError(Exception):
    """Raised when a stream reports an error while an argument is handled."""

    def __init__(self, message: str, index: int):
        super().__init__(message)
        self.index = index


def serialize(output: OutputStream, *args: Any) -> None:
    """Write ``args`` to ``output`` in order.

    A Deployable argument is written under its own deployment. Writing stops
    at the first argument after which the stream reports an error, and a
    SerializationError naming that argument's position is raised.
    """
    for index, argument in enumerate(args):
        output.write(argument)
        if output.has_error:
            raise SerializationError(f"failed to serialize argument {index}", index)


def deserialize(input: InputStream, *args: Any) -> tuple:
    """Read one value for each of ``args`` from ``input`` and return them in order.

    Each argument is a type, or a Deployable whose value is a type or an
    instance of it; a Deployable receives the value read. Reading stops at
    the first argument after which the stream reports an error, and a
    SerializationError naming that argument's position is raised.
    """
    values = []
    for index, target in enumerate(args):
        value = input.read(target)
        if input.has_error:
            raise SerializationError(f"failed to deserialize argument {index}", index)
        values.append(value)
    return tuple(values)


__all__ = ["SerializationError", "serialize", "deserialize", "Deployable"]