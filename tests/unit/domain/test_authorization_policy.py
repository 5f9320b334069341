"""Tests for the role check."""

import pytest

from dispatch.domain.errors import Forbidden, Unauthenticated
from dispatch.domain.policies.authorization import authorize
from dispatch.domain.value_objects.enums import Role
from dispatch.domain.value_objects.principal import Principal


def _principal(*roles):
    return Principal(user_id="1", username="someone", roles=frozenset(roles))


def test_missing_principal_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        authorize(None, {Role.DISPATCHER})


def test_matching_role_passes():
    p = _principal(Role.DISPATCHER)
    assert authorize(p, {Role.DISPATCHER}) is p


def test_any_of_required_roles_passes():
    assert authorize(_principal(Role.SUPERVISOR), {Role.DISPATCHER, Role.SUPERVISOR})


def test_admin_always_passes():
    assert authorize(_principal(Role.ADMIN), {Role.TECHNICIAN})


def test_wrong_role_is_forbidden():
    with pytest.raises(Forbidden, match="DISPATCHER"):
        authorize(_principal(Role.TECHNICIAN), {Role.DISPATCHER})


def test_no_roles_is_forbidden():
    with pytest.raises(Forbidden):
        authorize(_principal(), {Role.TECHNICIAN})
