"""Persistent session rows keyed by session id.

Expiry is checked when a row is read: an expired row is deleted on the
spot and reported as absent. There is no background sweep.

Every method logs and swallows store failures, returning None/False, so
callers branch on return values rather than catching exceptions.
"""
import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from iconnect_portal import config
from iconnect_portal.model.UserSession import UserSession
from iconnect_portal.services import database

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSession:
    sess: dict
    expire: datetime


def generate_session_id() -> str:
    """256 random bits, hex encoded"""
    return secrets.token_hex(32)


def cookie_metadata(expire: datetime) -> dict:
    return {
        "originalMaxAge": int(config.SESSION_MAX_AGE.total_seconds() * 1000),
        "expires": expire.isoformat(),
        "secure": config.IS_PRODUCTION,
        "httpOnly": True,
        "path": "/",
        "sameSite": "lax",
    }


def _decode_sess(raw: Any) -> dict:
    if isinstance(raw, str):
        return json.loads(raw)
    return dict(raw or {})


def _short(sid: str) -> str:
    return f"{sid[:8]}..."


class SessionStore:

    def get(self, sid: str) -> Optional[StoredSession]:
        if not database.is_configured() or not sid:
            return None

        db = database.get_db_session()
        try:
            row = db.get(UserSession, sid)
            if row is None:
                return None

            if database.as_utc(row.expire) < datetime.now(timezone.utc):
                _logger.info(f"Session {_short(sid)} expired; removing row")
                db.delete(row)
                db.commit()
                return None

            return StoredSession(sess=_decode_sess(row.sess), expire=database.as_utc(row.expire))
        except Exception as e:
            db.rollback()
            _logger.error(f"Error reading session {_short(sid)}: {str(e)}", exc_info=True)
            return None
        finally:
            db.close()

    def create(self, sess_data: dict) -> Optional[str]:
        if not database.is_configured():
            return None

        sid = generate_session_id()
        expire = datetime.now(timezone.utc) + config.SESSION_MAX_AGE
        sess = {"cookie": cookie_metadata(expire), **sess_data}

        db = database.get_db_session()
        try:
            db.add(UserSession(sid=sid, sess=sess, expire=expire))
            db.commit()
            _logger.info(f"Created session {_short(sid)}")
            return sid
        except Exception as e:
            db.rollback()
            _logger.error(f"Error creating session: {str(e)}", exc_info=True)
            return None
        finally:
            db.close()

    def update(self, sid: str, partial: dict) -> bool:
        """Merge ``partial`` into the stored data and push expiry out by the full max age."""
        if not database.is_configured() or not sid:
            return False

        expire = datetime.now(timezone.utc) + config.SESSION_MAX_AGE
        db = database.get_db_session()
        try:
            row = db.get(UserSession, sid)
            if row is None:
                return False

            existing = _decode_sess(row.sess)
            sess = {**existing, **partial}
            cookie = dict(sess.get("cookie") or cookie_metadata(expire))
            cookie["expires"] = expire.isoformat()
            sess["cookie"] = cookie

            row.sess = sess
            row.expire = expire
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            _logger.error(f"Error updating session {_short(sid)}: {str(e)}", exc_info=True)
            return False
        finally:
            db.close()

    def delete(self, sid: str) -> bool:
        if not database.is_configured() or not sid:
            return False

        db = database.get_db_session()
        try:
            row = db.get(UserSession, sid)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            _logger.error(f"Error deleting session {_short(sid)}: {str(e)}", exc_info=True)
            return False
        finally:
            db.close()


session_store = SessionStore()
