"""A value paired with its deployment information."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")
D = TypeVar("D")


@dataclass
class Deployable(Generic[T, D]):
    """A value together with the deployment that governs how it is serialized."""

    value: Optional[T] = None
    deployment: Optional[D] = None

    def __repr__(self) -> str:
        return f"Deployable(value={self.value!r}, deployment={self.deployment!r})"


def _unwrap(item: Any) -> Any:
    return item.value if isinstance(item, Deployable) else item