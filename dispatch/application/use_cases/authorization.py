"""AuthorizationGuard — role gate wrapped around service operations.

The guarded coroutine receives the caller's Principal as its first argument
after ``self``; the guard inspects it and either lets the call through or
raises before the wrapped body runs.
"""

from __future__ import annotations

import functools
import logging

from dispatch.domain.errors import DispatchError
from dispatch.domain.policies.authorization import authorize
from dispatch.domain.value_objects.enums import Role

logger = logging.getLogger(__name__)


def requires_roles(*roles: Role):
    """Guard an async service method with a required role set (ADMIN always passes)."""
    required = frozenset(roles)

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, principal, *args, **kwargs):
            try:
                authorize(principal, required)
            except DispatchError as exc:
                logger.warning(
                    "Denied %s for %s: %s",
                    func.__name__,
                    principal.username if principal else "anonymous",
                    exc.message,
                )
                raise
            return await func(self, principal, *args, **kwargs)

        wrapper.required_roles = required
        return wrapper

    return decorator
