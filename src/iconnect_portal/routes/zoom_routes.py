"""Zoom webinar routes"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from iconnect_portal.routes.dependencies import get_zoom_client, require_database, require_session_member
from iconnect_portal.services import database
from iconnect_portal.services.zoom_services import ZoomAPIError, ZoomClient, ZoomConfigurationError

_logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/zoom", tags=["zoom"])


def _zoom_failure(e: Exception, action: str) -> HTTPException:
    if isinstance(e, ZoomConfigurationError):
        return HTTPException(status_code=503, detail="Zoom not configured")
    if isinstance(e, ZoomAPIError):
        return HTTPException(status_code=502, detail=f"Failed to fetch {action} from Zoom")
    _logger.error(f"Zoom {action} error: {str(e)}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Failed to fetch {action}")


@router.get("/users")
async def list_zoom_users(member=Depends(require_session_member),
                          zoom: ZoomClient = Depends(get_zoom_client)):
    try:
        return zoom.list_users()
    except Exception as e:
        raise _zoom_failure(e, "Zoom users")


@router.get("/webinars/{webinar_id}/my-join-link", dependencies=[Depends(require_database)])
async def my_join_link(webinar_id: str, member=Depends(require_session_member),
                       zoom: ZoomClient = Depends(get_zoom_client)):
    """Join URL for the signed-in member, matched by email among approved registrants"""
    webinar = database.get_webinar(webinar_id)
    if not webinar:
        raise HTTPException(status_code=404, detail="Webinar not found")

    if not webinar.registration_required or not webinar.zoom_webinar_id:
        return {"join_url": None, "message": "Registration not required for this webinar"}

    try:
        registrants = zoom.list_registrants(webinar.zoom_webinar_id)
    except Exception as e:
        raise _zoom_failure(e, "registrants")

    email = member.email.lower()
    match = next((r for r in registrants if (r.get("email") or "").lower() == email), None)
    if not match:
        return {"join_url": None, "message": "User not registered for this webinar"}

    return {
        "join_url": match.get("join_url"),
        "registrant_id": match.get("id"),
        "status": match.get("status"),
    }
