"""Shared request dependencies for route handlers"""
from fastapi import Depends, HTTPException, Request
from iconnect_portal.model.Member import Member
from iconnect_portal.services import database
from iconnect_portal.services.permissions import PermissionCheck, verify_permission
from iconnect_portal.services.utils.session_management import get_session_member
from iconnect_portal.services.zoom_services import ZoomClient


def require_database():
    if not database.is_configured():
        raise HTTPException(status_code=503, detail="Database not configured")


async def require_session_member(request: Request) -> Member:
    require_database()
    member = await get_session_member(request)
    if member is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return member


def require_permission(permission_id: str):
    """Build a dependency that rejects the request unless the member holds ``permission_id``."""

    async def dependency(request: Request) -> PermissionCheck:
        check = await verify_permission(request, permission_id)
        if not check.has_permission:
            raise HTTPException(status_code=check.status_code, detail=check.error)
        return check

    return Depends(dependency)


async def read_json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


def pick_fields(body: dict, allowed_fields) -> dict:
    updates = {field: body[field] for field in allowed_fields if field in body}
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    return updates


def get_zoom_client(request: Request) -> ZoomClient:
    return request.app.state.zoom_client
