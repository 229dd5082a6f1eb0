"""Member permission resolution.

Roles grant every feature except the ones named in
``role.excluded_features``; admin roles bypass the exclusion list.
A member without a role, or whose role cannot be read, gets nothing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from fastapi import Request
from iconnect_portal.model.Member import Member
from iconnect_portal.model.Role import Role
from iconnect_portal.services import database
from iconnect_portal.services.utils.session_management import get_session_member, read_session_id

_logger = logging.getLogger(__name__)

ADMIN_CAN_EDIT_MEMBERS = "admin_can_edit_members"
ADMIN_CAN_MANAGE_COMMUNICATIONS = "admin_can_manage_communications"


class PermissionOutcome(Enum):
    GRANTED = "granted"
    DENIED_BY_EXCLUSION = "denied_by_exclusion"
    DENIED_NO_ROLE = "denied_no_role"
    DENIED_ROLE_UNAVAILABLE = "denied_role_unavailable"
    NOT_AUTHENTICATED = "not_authenticated"
    DATABASE_UNAVAILABLE = "database_unavailable"


_STATUS = {
    PermissionOutcome.GRANTED: 200,
    PermissionOutcome.DENIED_BY_EXCLUSION: 403,
    PermissionOutcome.DENIED_NO_ROLE: 403,
    PermissionOutcome.DENIED_ROLE_UNAVAILABLE: 403,
    PermissionOutcome.NOT_AUTHENTICATED: 401,
    PermissionOutcome.DATABASE_UNAVAILABLE: 503,
}

_ERRORS = {
    PermissionOutcome.NOT_AUTHENTICATED: "Not authenticated",
    PermissionOutcome.DATABASE_UNAVAILABLE: "Database not configured",
}


@dataclass(frozen=True)
class PermissionCheck:
    outcome: PermissionOutcome
    member_id: str | None = None

    @property
    def has_permission(self) -> bool:
        return self.outcome is PermissionOutcome.GRANTED

    @property
    def status_code(self) -> int:
        return _STATUS[self.outcome]

    @property
    def error(self) -> str | None:
        if self.has_permission:
            return None
        return _ERRORS.get(self.outcome, "Permission denied")


def _load_role(member: Member) -> Role | None:
    try:
        return database.get_role(member.role_id)
    except Exception as e:
        _logger.error(f"Role lookup failed for member {member.id}: {str(e)}", exc_info=True)
        return None


def check_role(member: Member, role: Role | None, permission_id: str) -> PermissionCheck:
    if not member.role_id:
        return PermissionCheck(PermissionOutcome.DENIED_NO_ROLE, member.id)

    if role is None:
        return PermissionCheck(PermissionOutcome.DENIED_ROLE_UNAVAILABLE, member.id)

    if role.is_admin is True:
        return PermissionCheck(PermissionOutcome.GRANTED, member.id)

    if permission_id in (role.excluded_features or []):
        return PermissionCheck(PermissionOutcome.DENIED_BY_EXCLUSION, member.id)
    return PermissionCheck(PermissionOutcome.GRANTED, member.id)


def resolve_capabilities(member: Member, permission_id: str) -> PermissionCheck:
    role = _load_role(member) if member.role_id else None
    return check_role(member, role, permission_id)


def capability_set(member: Member) -> dict:
    """Derived flags the frontend uses to show or hide admin tools."""
    role = _load_role(member) if member.role_id else None
    return {
        "isAdmin": bool(member.role_id and role is not None and role.is_admin is True),
        "canEditMembers": check_role(member, role, ADMIN_CAN_EDIT_MEMBERS).has_permission,
        "canManageCommunications": check_role(member, role, ADMIN_CAN_MANAGE_COMMUNICATIONS).has_permission,
    }


async def resolve_member(request: Request) -> Member | None:
    return await get_session_member(request)


async def verify_permission(request: Request, permission_id: str) -> PermissionCheck:
    if not read_session_id(request.headers.get("cookie")):
        return PermissionCheck(PermissionOutcome.NOT_AUTHENTICATED)

    if not database.is_configured():
        return PermissionCheck(PermissionOutcome.DATABASE_UNAVAILABLE)

    member = await resolve_member(request)
    if member is None:
        return PermissionCheck(PermissionOutcome.NOT_AUTHENTICATED)

    check = resolve_capabilities(member, permission_id)
    if not check.has_permission:
        _logger.info(f"Member {member.id} denied {permission_id}: {check.outcome.value}")
    return check
