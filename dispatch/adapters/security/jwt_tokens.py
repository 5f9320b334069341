"""Bearer token issue / decode — maps JWT claims onto a Principal."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from dispatch.config import settings
from dispatch.domain.errors import Unauthenticated
from dispatch.domain.value_objects.enums import Role
from dispatch.domain.value_objects.principal import Principal

ROLE_PREFIX = "ROLE_"


def create_access_token(
    *,
    user_id: str,
    username: str,
    roles: list[str] | None = None,
    technician_id: int | None = None,
    expires_minutes: int | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire_delta = timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    payload: dict[str, Any] = {
        "sub": user_id,
        "username": username,
        "roles": roles or [],
        "iat": int(now.timestamp()),
        "exp": int((now + expire_delta).timestamp()),
    }
    if technician_id is not None:
        payload["technicianId"] = technician_id
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _parse_roles(raw) -> frozenset[Role]:
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        raw = [raw]
    elif not isinstance(raw, (list, tuple)):
        raise Unauthenticated("Invalid token: roles must be a list")
    roles = set()
    for value in raw:
        name = str(value).upper().removeprefix(ROLE_PREFIX)
        if name in Role.__members__:
            roles.add(Role(name))
    return frozenset(roles)


def decode_access_token(token: str) -> Principal:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        raise Unauthenticated(f"Invalid token: {e}") from e

    subject = claims.get("sub")
    if not subject:
        raise Unauthenticated("Invalid token: missing subject")

    technician_id = claims.get("technicianId")
    try:
        technician_id = int(technician_id) if technician_id is not None else None
    except (TypeError, ValueError) as e:
        raise Unauthenticated("Invalid token: technicianId must be an integer") from e

    return Principal(
        user_id=str(subject),
        username=claims.get("username") or str(subject),
        roles=_parse_roles(claims.get("roles")),
        technician_id=technician_id,
    )
