"""Authentication and session routes"""
import logging
from urllib.parse import quote
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from iconnect_portal import config
from iconnect_portal.routes.dependencies import read_json_body, require_database, require_session_member
from iconnect_portal.services import auth_services, database
from iconnect_portal.services.mail_services import send_password_reset_email
from iconnect_portal.services.permissions import capability_set
from iconnect_portal.services.utils.session_management import (
    create_session, destroy_session, get_session, get_session_member, update_session,
)

_logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["authentication"])

RESET_REQUESTED_MESSAGE = "If an account exists, a reset link will be sent."


@router.post("/login", dependencies=[Depends(require_database)])
async def login(request: Request):
    """Check email and password, then open a session"""
    body = await read_json_body(request)
    email = body.get("email")
    password = body.get("password")
    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    try:
        credentials = database.get_credentials_by_email(email)
        if not credentials:
            _logger.info("Login attempt for unknown email")
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if auth_services.is_locked(credentials):
            raise HTTPException(status_code=401, detail="Account temporarily locked. Please try again later.")

        if not credentials.password_hash:
            return JSONResponse(status_code=401, content={
                "success": False,
                "error": "Password not set",
                "needsPasswordSetup": True,
                "memberId": credentials.member_id,
            })

        if not auth_services.verify_password(password, credentials.password_hash):
            auth_services.record_failed_login(credentials)
            raise HTTPException(status_code=401, detail="Invalid email or password")

        auth_services.record_successful_login(credentials)

        member = database.get_member_by_id(credentials.member_id)
        if not member:
            raise HTTPException(status_code=401, detail="Member not found")
        member = auth_services.ensure_member_role(member)

        response = JSONResponse(content=jsonable_encoder({
            "success": True,
            "member": member.to_dict(),
            "isTemporaryPassword": credentials.is_temp_password,
        }))
        session = create_session(response, {
            "memberId": member.id,
            "memberEmail": member.email,
            "isTemporaryPassword": credentials.is_temp_password,
        })
        if session is None:
            raise HTTPException(status_code=500, detail="Login failed")

        _logger.info(f"Login succeeded for member {member.id}")
        return response
    except HTTPException:
        raise
    except Exception as e:
        _logger.error(f"Error in login: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")


@router.post("/logout")
async def logout(request: Request):
    """Logout and clear session"""
    response = JSONResponse(content={"success": True})
    destroy_session(request, response)
    return response


@router.get("/me")
async def get_current_member(request: Request):
    """Current member and derived capabilities, or null when not signed in"""
    member = await get_session_member(request)
    if member is None:
        return None
    return {"member": member.to_dict(), "capabilities": capability_set(member)}


@router.post("/change-password")
async def change_password(request: Request, member=Depends(require_session_member)):
    body = await read_json_body(request)
    current_password = body.get("currentPassword")
    new_password = body.get("newPassword")

    if not current_password or not new_password:
        raise HTTPException(status_code=400, detail="Current and new password are required")
    if len(new_password) < config.PASSWORD_MIN_LENGTH:
        raise HTTPException(status_code=400, detail="New password must be at least 8 characters")

    try:
        credentials = database.get_credentials_by_member(member.id)
        if not credentials:
            raise HTTPException(status_code=404, detail="Credentials not found")

        if credentials.password_hash and \
                not auth_services.verify_password(current_password, credentials.password_hash):
            raise HTTPException(status_code=401, detail="Current password is incorrect")

        auth_services.change_password(credentials, new_password)

        session = await get_session(request)
        if session and not update_session(session.id, {"isTemporaryPassword": False}):
            _logger.warning(f"Password changed but session for member {member.id} was not updated")

        _logger.info(f"Password changed for member {member.id}")
        return {"success": True, "message": "Password changed successfully"}
    except HTTPException:
        raise
    except Exception as e:
        _logger.error(f"Error in change_password: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to change password")


@router.post("/set-password", dependencies=[Depends(require_database)])
async def set_password(request: Request):
    """Set a password, either first-time or with a reset token"""
    body = await read_json_body(request)
    email = body.get("email")
    password = body.get("password")
    token = body.get("token")

    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if len(password) < config.PASSWORD_MIN_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    try:
        member = database.get_member_by_email(email)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        if token:
            token_error = auth_services.check_reset_token(member, token)
            if token_error:
                raise HTTPException(status_code=401, detail=token_error)
        elif auth_services.has_password(member):
            # Without a reset token only first-time setup is allowed
            _logger.warning(f"Rejected token-less password overwrite for member {member.id}")
            raise HTTPException(status_code=401, detail="Password already set")

        auth_services.save_password(member, password)

        response = JSONResponse(content=jsonable_encoder({"success": True, "member": member.to_dict()}))
        session = create_session(response, {
            "memberId": member.id,
            "memberEmail": member.email,
            "isTemporaryPassword": False,
        })
        if session is None:
            raise HTTPException(status_code=500, detail="Failed to set password")
        _logger.info(f"Password set for member {member.id}")
        return response
    except HTTPException:
        raise
    except Exception as e:
        _logger.error(f"Error in set_password: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to set password")


@router.post("/request-password-reset", dependencies=[Depends(require_database)])
async def request_password_reset(request: Request):
    body = await read_json_body(request)
    email = body.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    try:
        member = database.get_member_by_email(email)
        if not member:
            _logger.info("Password reset requested for unknown email")
            return {"success": True, "message": RESET_REQUESTED_MESSAGE}

        token = auth_services.issue_reset_token(member)

        host = request.headers.get("host", "localhost")
        scheme = "http" if "localhost" in host else "https"
        reset_url = f"{scheme}://{host}/reset-password?token={token}&email={quote(email)}"
        send_password_reset_email(email, member.first_name, reset_url)

        return {"success": True, "message": RESET_REQUESTED_MESSAGE}
    except Exception as e:
        _logger.error(f"Error in request_password_reset: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process request")


@router.post("/check-password-status", dependencies=[Depends(require_database)])
async def check_password_status(request: Request):
    body = await read_json_body(request)
    email = body.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    try:
        member = database.get_member_by_email(email)
        if not member:
            return {"exists": False, "hasPassword": False}

        credentials = database.get_credentials_by_member(member.id)
        return {
            "exists": True,
            "hasPassword": bool(credentials and credentials.password_hash),
            "memberId": member.id,
        }
    except Exception as e:
        _logger.error(f"Error in check_password_status: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to check status")
