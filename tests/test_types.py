import pytest

from capi_core.types import (
    AvailabilityStatus,
    CallStatus,
    ClientId,
    enum_hash,
)

CALL_STATUS_NAMES = [
    "SUCCESS",
    "OUT_OF_MEMORY",
    "NOT_AVAILABLE",
    "CONNECTION_FAILED",
    "REMOTE_ERROR",
    "UNKNOWN",
    "INVALID_VALUE",
    "SUBSCRIPTION_REFUSED",
    "SERIALIZATION_ERROR",
]


def test_call_status_order():
    assert [enum_hash(CallStatus[name]) for name in CALL_STATUS_NAMES] == list(range(9))


def test_availability_status_order():
    names = ["UNKNOWN", "AVAILABLE", "NOT_AVAILABLE"]
    assert [enum_hash(AvailabilityStatus[name]) for name in names] == [0, 1, 2]


def test_enum_hash_is_ordinal():
    assert [enum_hash(s) for s in CallStatus] == list(range(len(CallStatus)))


def test_enum_hash_plain_int():
    assert enum_hash(7) == 7


def test_client_id_is_abstract():
    with pytest.raises(TypeError):
        ClientId()