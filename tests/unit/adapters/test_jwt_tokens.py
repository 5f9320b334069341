"""Tests for Bearer token decoding."""

import jwt
import pytest

from dispatch.adapters.security.jwt_tokens import create_access_token, decode_access_token
from dispatch.config import settings
from dispatch.domain.errors import Unauthenticated
from dispatch.domain.value_objects.enums import Role


def test_round_trip_claims():
    token = create_access_token(
        user_id="42", username="dana", roles=["TECHNICIAN"], technician_id=101
    )
    principal = decode_access_token(token)

    assert principal.user_id == "42"
    assert principal.username == "dana"
    assert principal.roles == {Role.TECHNICIAN}
    assert principal.technician_id == 101


def test_role_prefix_and_unknown_roles():
    token = create_access_token(user_id="1", username="x", roles=["ROLE_DISPATCHER", "auditor"])
    assert decode_access_token(token).roles == {Role.DISPATCHER}


def test_username_falls_back_to_subject():
    token = jwt.encode({"sub": "alice", "roles": "SUPERVISOR"}, settings.jwt_secret, algorithm="HS256")
    principal = decode_access_token(token)
    assert principal.username == "alice"
    assert principal.roles == {Role.SUPERVISOR}
    assert principal.technician_id is None


def test_expired_token():
    token = create_access_token(user_id="1", username="x", expires_minutes=-5)
    with pytest.raises(Unauthenticated):
        decode_access_token(token)


def test_wrong_signature():
    token = jwt.encode({"sub": "1"}, "another-secret-that-is-long-enough!", algorithm="HS256")
    with pytest.raises(Unauthenticated):
        decode_access_token(token)


def test_non_numeric_technician_id():
    token = jwt.encode(
        {"sub": "1", "technicianId": "abc"}, settings.jwt_secret, algorithm="HS256"
    )
    with pytest.raises(Unauthenticated, match="technicianId"):
        decode_access_token(token)


@pytest.mark.parametrize("roles", [7, {"DISPATCHER": True}, True])
def test_roles_claim_of_wrong_type(roles):
    token = jwt.encode({"sub": "1", "roles": roles}, settings.jwt_secret, algorithm="HS256")
    with pytest.raises(Unauthenticated, match="roles"):
        decode_access_token(token)


def test_missing_roles_claim_means_no_roles():
    token = jwt.encode({"sub": "1"}, settings.jwt_secret, algorithm="HS256")
    assert decode_access_token(token).roles == frozenset()
