from __future__ import annotations

import time

import pytest

from support_chat.domain.value_objects.session_id import is_valid_session_id, new_session_id


def test_new_session_id_format():
    before = int(time.time() * 1000)
    value = new_session_id()

    prefix, millis, suffix = value.split("_")
    assert prefix == "session"
    assert int(millis) >= before
    assert len(suffix) == 9
    assert is_valid_session_id(value)


def test_new_session_ids_do_not_collide():
    ids = {new_session_id() for _ in range(1000)}

    assert len(ids) == 1000


@pytest.mark.parametrize("value", [
    "session_1700000000000_abc123xyz",
    "session_1_a",
])
def test_valid_ids(value):
    assert is_valid_session_id(value)


@pytest.mark.parametrize("value", [
    "507f1f77bcf86cd799439011",
    "session_abc_123",
    "session_1700000000000_",
    "session_1700000000000_ABC",
    "",
    None,
    12345,
])
def test_invalid_ids(value):
    assert not is_valid_session_id(value)
