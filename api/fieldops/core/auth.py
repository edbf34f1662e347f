from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    COMPANY_ADMIN = "company_admin"
    PROJECT_MANAGER = "project_manager"
    SITE_SUPERVISOR = "site_supervisor"
    FOREMAN = "foreman"
    WORKER = "worker"
    SUBCONTRACTOR = "subcontractor"
    VIEWER = "viewer"


ADMIN_ROLES: frozenset[UserRole] = frozenset({UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN})
MANAGER_ROLES: frozenset[UserRole] = frozenset(
    {
        UserRole.SUPER_ADMIN,
        UserRole.COMPANY_ADMIN,
        UserRole.PROJECT_MANAGER,
        UserRole.SITE_SUPERVISOR,
        UserRole.FOREMAN,
    }
)
FIELD_ROLES: frozenset[UserRole] = MANAGER_ROLES | {UserRole.WORKER, UserRole.VIEWER}


class AccessDeniedError(PermissionError):
    """Raised when the principal is missing or its role is not allowed."""


@dataclass(slots=True)
class Principal:
    user_id: str
    company_id: str
    role: str
    email: str | None = None


def check_role(principal: Principal | None, role: UserRole | str) -> None:
    if principal is None:
        raise AccessDeniedError("authentication required")
    required = _role_value(role)
    if principal.role != required:
        raise AccessDeniedError(f"role {principal.role!r} is not permitted; requires {required!r}")


def check_roles(principal: Principal | None, roles: Iterable[UserRole | str]) -> None:
    if principal is None:
        raise AccessDeniedError("authentication required")
    allowed = {_role_value(role) for role in roles}
    if principal.role not in allowed:
        raise AccessDeniedError(f"role {principal.role!r} is not permitted; requires one of {sorted(allowed)}")


def _role_value(role: UserRole | str) -> str:
    if isinstance(role, UserRole):
        return role.value
    return role
