"""Administration routes, guarded by role feature permissions"""
import logging
from fastapi import APIRouter, HTTPException, Request
from iconnect_portal.routes.dependencies import pick_fields, read_json_body, require_permission
from iconnect_portal.services import database
from iconnect_portal.services.permissions import ADMIN_CAN_EDIT_MEMBERS, ADMIN_CAN_MANAGE_COMMUNICATIONS

_logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])

MEMBER_EDITABLE_FIELDS = [
    "first_name", "last_name", "job_title", "biography",
    "profile_photo_url", "linkedin_url", "show_in_directory",
    "twitter_url", "phone_number", "pronouns", "location_summary",
]
ORGANIZATION_EDITABLE_FIELDS = ["logo_url", "name", "description", "website_url"]


@router.get("/members/{member_id}")
async def get_member(member_id: str, _=require_permission(ADMIN_CAN_EDIT_MEMBERS)):
    try:
        member = database.get_member_by_id(member_id)
    except Exception as e:
        _logger.error(f"Error in get_member: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get member")

    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member.to_dict()


@router.patch("/members/{member_id}")
async def update_member(member_id: str, request: Request, _=require_permission(ADMIN_CAN_EDIT_MEMBERS)):
    updates = pick_fields(await read_json_body(request), MEMBER_EDITABLE_FIELDS)

    try:
        member = database.update_member_fields(member_id, updates)
    except Exception as e:
        _logger.error(f"Error in update_member: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update member")

    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    _logger.info(f"Member {member_id} updated: {sorted(updates)}")
    return member.to_dict()


@router.patch("/organizations/{organization_id}")
async def update_organization(organization_id: str, request: Request,
                              _=require_permission(ADMIN_CAN_EDIT_MEMBERS)):
    updates = pick_fields(await read_json_body(request), ORGANIZATION_EDITABLE_FIELDS)

    try:
        organization = database.update_organization_fields(organization_id, updates)
    except Exception as e:
        _logger.error(f"Error in update_organization: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update organization")

    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization.to_dict()


@router.patch("/members/{member_id}/communication-preferences/{category_id}")
async def update_communication_preference(member_id: str, category_id: str, request: Request,
                                          _=require_permission(ADMIN_CAN_MANAGE_COMMUNICATIONS)):
    body = await read_json_body(request)
    is_subscribed = body.get("is_subscribed")
    if not isinstance(is_subscribed, bool):
        raise HTTPException(status_code=400, detail="is_subscribed must be a boolean")

    try:
        preference = database.upsert_communication_preference(member_id, category_id, is_subscribed)
    except Exception as e:
        _logger.error(f"Error in update_communication_preference: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update communication preference")
    return preference.to_dict()
