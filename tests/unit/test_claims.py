from __future__ import annotations

import jwt
import pytest

from support_chat.domain.value_objects.enums import Role
from support_chat.infrastructure.auth.claims import principal_from_claims
from support_chat.infrastructure.auth.hs256_verifier import HS256Verifier

SECRET = "unit-test-secret-with-enough-length-000"


def test_standard_claims():
    p = principal_from_claims({"sub": "42", "kind": "user", "username": "alice", "email": "a@x.io"})

    assert (p.kind, p.subject_id, p.username, p.email) == (Role.USER, 42, "alice", "a@x.io")


def test_legacy_claims():
    p = principal_from_claims({"userId": 7, "role": "admin"})

    assert p.is_admin
    assert p.subject_id == 7


def test_unknown_kind_falls_back_to_user():
    assert principal_from_claims({"sub": "1", "kind": "robot"}).kind == Role.USER


def test_missing_subject():
    with pytest.raises(ValueError):
        principal_from_claims({"kind": "user"})


@pytest.mark.asyncio
async def test_hs256_verifier_roundtrip():
    token = jwt.encode({"sub": "5", "kind": "admin"}, SECRET, algorithm="HS256")

    principal = await HS256Verifier(SECRET).verify(token)

    assert principal.principal_key == "admin:5"


@pytest.mark.asyncio
async def test_hs256_verifier_rejects_bad_signature():
    token = jwt.encode({"sub": "5"}, "another-secret-that-is-long-enough-xx", algorithm="HS256")

    with pytest.raises(jwt.InvalidSignatureError):
        await HS256Verifier(SECRET).verify(token)
