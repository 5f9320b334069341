"""Role check used by the authorization guard.

Fail-closed: no principal means ``Unauthenticated``; a principal with none
of the required roles means ``Forbidden``. ADMIN passes every check.
"""

from __future__ import annotations

from collections.abc import Iterable

from dispatch.domain.errors import Forbidden, Unauthenticated
from dispatch.domain.value_objects.enums import Role
from dispatch.domain.value_objects.principal import Principal


def authorize(principal: Principal | None, required_roles: Iterable[Role]) -> Principal:
    if principal is None:
        raise Unauthenticated()

    if principal.is_admin():
        return principal

    required = frozenset(required_roles)
    if any(principal.has_role(role) for role in required):
        return principal

    wanted = ", ".join(sorted(r.value for r in required))
    raise Forbidden(f"Insufficient permissions: requires one of [{wanted}]")
