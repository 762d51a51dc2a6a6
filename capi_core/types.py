"""Core enumerations, aliases and client identification."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod

CallId = int
ConnectionId = str
Timeout = int  # milliseconds, -1 means "forever"
Sender = int
Serial = int

DEFAULT_SEND_TIMEOUT_MS: Timeout = 5000


class CallStatus(enum.Enum):
    """Outcome of a remote call."""

    SUCCESS = 0
    OUT_OF_MEMORY = 1
    NOT_AVAILABLE = 2
    CONNECTION_FAILED = 3
    REMOTE_ERROR = 4
    UNKNOWN = 5
    INVALID_VALUE = 6
    SUBSCRIPTION_REFUSED = 7
    SERIALIZATION_ERROR = 8


class AvailabilityStatus(enum.Enum):
    """Availability of a remote service."""

    UNKNOWN = 0
    AVAILABLE = 1
    NOT_AVAILABLE = 2


class ClientId(ABC):
    """Identifies a client sending a call to a stub.

    Instances are compared with ``==`` and may be collected in sets.
    """

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        """Whether ``other`` identifies the same client."""

    @abstractmethod
    def __hash__(self) -> int:
        """Hash consistent with equality."""

    @property
    @abstractmethod
    def uid(self) -> int:
        """User id of the client."""

    @property
    @abstractmethod
    def gid(self) -> int:
        """Group id of the client."""


def enum_hash(value) -> int:
    """Hash an enumeration value by its underlying integer."""
    if isinstance(value, enum.Enum):
        return int(value.value)
    return int(value)