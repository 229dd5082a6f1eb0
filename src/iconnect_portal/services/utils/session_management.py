import logging
from dataclasses import dataclass
from fastapi import Request, Response
from starlette.requests import cookie_parser
from iconnect_portal import config
from iconnect_portal.model.Member import Member
from iconnect_portal.services import database
from iconnect_portal.services.session_store import session_store
from iconnect_portal.services.utils.cookie_signing import sign, unsign

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionData:
    id: str
    data: dict


def read_session_id(cookie_header: str | None) -> str | None:
    """Extract and verify the session id carried by a Cookie header."""
    if not cookie_header:
        return None
    signed_value = cookie_parser(cookie_header).get(config.SESSION_COOKIE_NAME)
    return unsign(signed_value, config.SESSION_SECRET)


def resolve_session(cookie_header: str | None) -> SessionData | None:
    session_id = read_session_id(cookie_header)
    if not session_id:
        return None

    stored = session_store.get(session_id)
    if stored is None:
        return None
    return SessionData(id=session_id, data=stored.sess)


async def get_session(request: Request) -> SessionData | None:
    return resolve_session(request.headers.get("cookie"))


def _set_session_cookie(response: Response, value: str, max_age: int):
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax",
    )


def create_session(response: Response, data: dict) -> SessionData | None:
    """Persist a new session and attach its signed cookie to ``response``."""
    session_id = session_store.create(data)
    if session_id is None:
        return None

    _set_session_cookie(
        response,
        sign(session_id, config.SESSION_SECRET),
        int(config.SESSION_MAX_AGE.total_seconds()),
    )
    return SessionData(id=session_id, data=data)


def update_session(session_id: str, data: dict) -> bool:
    return session_store.update(session_id, data)


def destroy_session(request: Request, response: Response):
    session_id = read_session_id(request.headers.get("cookie"))
    if session_id:
        session_store.delete(session_id)
    _set_session_cookie(response, "", 0)


async def get_session_member(request: Request) -> Member | None:
    session = await get_session(request)
    member_id = session.data.get("memberId") if session else None
    if not member_id:
        return None

    try:
        return database.get_member_by_id(member_id)
    except Exception as e:
        _logger.error(f"Error loading session member: {str(e)}", exc_info=True)
        return None
