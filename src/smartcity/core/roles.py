from __future__ import annotations

from enum import Enum


class Role(Enum):
    """User roles recognised by the Smart City portal."""

    CITIZEN = "CITIZEN"
    WARD_OFFICER = "WARD_OFFICER"
    MAINTENANCE_TEAM = "MAINTENANCE_TEAM"
    ADMINISTRATOR = "ADMINISTRATOR"
    GUEST = "GUEST"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        if isinstance(value, Role):
            return value
        return cls(str(value).strip().upper())


STAFF_ROLES = frozenset({Role.WARD_OFFICER, Role.MAINTENANCE_TEAM})
SIGNED_IN_ROLES = frozenset(
    {Role.CITIZEN, Role.WARD_OFFICER, Role.MAINTENANCE_TEAM, Role.ADMINISTRATOR}
)
