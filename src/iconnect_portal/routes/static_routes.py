"""Health and public lookup routes"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from iconnect_portal import config
from iconnect_portal.routes.dependencies import require_database
from iconnect_portal.services import database

_logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["static"])


@router.get("/health")
async def health():
    """Root endpoint to verify the app is running"""
    return {
        "status": "ok",
        "database": database.is_configured(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config.APP_ENV,
    }


@router.get("/public/organisations", dependencies=[Depends(require_database)])
async def list_public_organisations():
    """Organisation names for the sign-up form"""
    try:
        return database.list_organizations()
    except Exception as e:
        _logger.error(f"Error fetching organisations: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch organisations")
