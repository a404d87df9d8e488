# bookstore/domain/roles.py
from enum import Enum
from typing import Iterable


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    USER = "user"

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN


WILDCARD = "*"


class PermissionSet:
    """
    Set of capability strings ("read:books", "write:orders", ...).
    "*" implies everything, "<action>:all" implies every "<action>:<resource>".
    """

    def __init__(self, permissions: Iterable[str] = ()):
        self._perms = frozenset(permissions)

    def implies(self, required: str) -> bool:
        if WILDCARD in self._perms or required in self._perms:
            return True
        action, _, _ = required.partition(":")
        return f"{action}:all" in self._perms

    def __contains__(self, required: str) -> bool:
        return self.implies(required)

    def __iter__(self):
        return iter(sorted(self._perms))

    def __len__(self):
        return len(self._perms)

    def __repr__(self):
        return f"PermissionSet({sorted(self._perms)!r})"


ROLE_PERMISSIONS: dict[Role, tuple[str, ...]] = {
    Role.ADMIN: (
        "read:all",
        "write:all",
        "delete:all",
        "manage:users",
        "manage:roles",
        "generate:reports",
    ),
    Role.MANAGER: (
        "read:all",
        "write:books",
        "write:authors",
        "write:orders",
        "generate:reports",
    ),
    Role.EMPLOYEE: (
        "read:all",
        "write:orders",
        "write:customers",
    ),
    Role.USER: (
        "read:books",
        "read:authors",
        "write:orders",
    ),
}


def permissions_for_role(role: Role) -> list[str]:
    return list(ROLE_PERMISSIONS.get(role, ("read:books",)))
