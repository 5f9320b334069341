"""Principal value object — the authenticated caller of a service operation."""

from dataclasses import dataclass, field

from dispatch.domain.value_objects.enums import Role


@dataclass(frozen=True)
class Principal:
    user_id: str
    username: str
    roles: frozenset[Role] = field(default_factory=frozenset)
    technician_id: int | None = None

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles
