"""Self-service routes for the signed-in member"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from iconnect_portal.routes.dependencies import pick_fields, read_json_body, require_database, require_session_member
from iconnect_portal.services import database

_logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["member"])

# Organization name is managed by administrators only
MY_ORGANIZATION_FIELDS = ["description", "website_url", "phone", "invoicing_email", "invoicing_address"]


@router.patch("/my-organization", dependencies=[Depends(require_database)])
async def update_my_organization(request: Request, member=Depends(require_session_member)):
    if not member.organization_id:
        raise HTTPException(status_code=404, detail="Member or organization not found")

    updates = pick_fields(await read_json_body(request), MY_ORGANIZATION_FIELDS)
    try:
        organization = database.update_organization_fields(member.organization_id, updates)
    except Exception as e:
        _logger.error(f"Error in update_my_organization: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update organization")

    if not organization:
        raise HTTPException(status_code=404, detail="Member or organization not found")
    return organization.to_dict()
