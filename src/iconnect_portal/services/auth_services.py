import hmac
import logging
import uuid
from datetime import datetime, timezone
import bcrypt
from iconnect_portal import config
from iconnect_portal.model.Member import Member
from iconnect_portal.model.MemberCredentials import MemberCredentials
from iconnect_portal.services import database

_logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        _logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def is_locked(credentials: MemberCredentials, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    locked_until = database.as_utc(credentials.locked_until)
    return locked_until is not None and locked_until > now


def record_failed_login(credentials: MemberCredentials) -> bool:
    """Count a failed attempt; lock the account once the limit is reached.

    Returns:
        bool: True if this attempt locked the account
    """
    attempts = (credentials.failed_attempts or 0) + 1
    updates = {"failed_attempts": attempts}
    locked = attempts >= config.MAX_FAILED_LOGINS
    if locked:
        updates["locked_until"] = datetime.now(timezone.utc) + config.LOCKOUT_DURATION
        _logger.warning(f"Locking credentials {credentials.id} after {attempts} failed attempts")
    database.update_credentials(credentials.id, **updates)
    return locked


def record_successful_login(credentials: MemberCredentials):
    database.update_credentials(
        credentials.id,
        failed_attempts=0,
        locked_until=None,
        last_login=datetime.now(timezone.utc),
    )


def ensure_member_role(member: Member) -> Member:
    if member.role_id:
        return member
    return database.assign_default_role(member)


def has_password(member: Member) -> bool:
    credentials = database.get_credentials_by_member(member.id)
    return bool(credentials and credentials.password_hash)


def save_password(member: Member, password: str):
    """Store a new password for the member, creating credentials if needed."""
    values = {
        "password_hash": hash_password(password),
        "is_temp_password": False,
        "password_set_at": datetime.now(timezone.utc),
        "reset_token": None,
        "reset_token_expires": None,
        "failed_attempts": 0,
        "locked_until": None,
    }
    credentials = database.get_credentials_by_member(member.id)
    if credentials:
        database.update_credentials(credentials.id, **values)
        _logger.info(f"Updated existing credentials for member {member.id}")
    else:
        database.create_credentials(member.id, member.email, **values)
        _logger.info(f"Created new credentials for member {member.id}")


def change_password(credentials: MemberCredentials, new_password: str):
    database.update_credentials(
        credentials.id,
        password_hash=hash_password(new_password),
        is_temp_password=False,
        password_set_at=datetime.now(timezone.utc),
    )


def issue_reset_token(member: Member) -> str:
    token = str(uuid.uuid4())
    expires = datetime.now(timezone.utc) + config.RESET_TOKEN_TTL
    credentials = database.get_credentials_by_member(member.id)
    if credentials:
        database.update_credentials(credentials.id, reset_token=token, reset_token_expires=expires)
    else:
        database.create_credentials(member.id, member.email, reset_token=token, reset_token_expires=expires)
    return token


def check_reset_token(member: Member, token: str) -> str | None:
    """Validate a password reset token.

    Returns:
        str | None: an error message, or None when the token is usable
    """
    credentials = database.get_credentials_by_member(member.id)
    if not credentials or not credentials.reset_token \
            or not hmac.compare_digest(credentials.reset_token, token):
        return "Invalid or expired reset token"

    expires = database.as_utc(credentials.reset_token_expires)
    if expires is not None and expires < datetime.now(timezone.utc):
        return "Reset token has expired"
    return None
