import logging
from datetime import datetime, timezone
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker, Session
from iconnect_portal import config
from iconnect_portal.model.base import Base
from iconnect_portal.model.Role import Role
from iconnect_portal.model.Member import Member
from iconnect_portal.model.MemberCredentials import MemberCredentials
from iconnect_portal.model.Organization import Organization
from iconnect_portal.model.MemberCommunicationPreference import MemberCommunicationPreference
from iconnect_portal.model.UserSession import UserSession  # noqa: F401
from iconnect_portal.model.ZoomWebinar import ZoomWebinar

_logger = logging.getLogger(__name__)


def _build_engine(database_url):
    if not database_url:
        _logger.warning("DATABASE_URL is not set; database-backed endpoints will answer 503")
        return None
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        pool_pre_ping=True,
    )


engine = _build_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine) if engine else None


def is_configured() -> bool:
    return SessionLocal is not None


def init_db():
    """Create missing tables"""
    if engine is not None:
        Base.metadata.create_all(bind=engine)


def get_db_session() -> Session:
    """Get a database session"""
    if SessionLocal is None:
        raise RuntimeError("Database not configured")
    return SessionLocal()  # Session will be closed by caller


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps read back from drivers that drop tzinfo"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def get_member_by_id(member_id: str) -> Member | None:
    db = get_db_session()
    try:
        return db.get(Member, member_id)
    except Exception as e:
        _logger.error(f"Error retrieving member {member_id}: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()


def get_member_by_email(email: str) -> Member | None:
    """
    Retrieve a member by email address.

    Args:
        email (str): The member's email address, matched case-insensitively

    Returns:
        Member | None: Member object if found, None otherwise
    """
    db = get_db_session()
    try:
        return db.query(Member).filter(Member.email == email.lower()).first()
    except Exception as e:
        _logger.error(f"Error retrieving member by email: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()


def get_role(role_id: str) -> Role | None:
    db = get_db_session()
    try:
        return db.get(Role, role_id)
    finally:
        db.close()


def assign_default_role(member: Member) -> Member:
    """Give a roleless member the 'Member' role, else the role flagged as default."""
    db = get_db_session()
    try:
        roles = db.query(Role).all()
        default_role = next((r for r in roles if r.name == "Member"), None) \
            or next((r for r in roles if r.is_default), None)
        if default_role is None:
            _logger.warning(f"No default role available for member {member.id}")
            return member

        row = db.get(Member, member.id)
        row.role_id = default_role.id
        db.commit()
        db.refresh(row)
        _logger.info(f"Assigned default role {default_role.name} to member {member.id}")
        return row
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_credentials_by_email(email: str) -> MemberCredentials | None:
    db = get_db_session()
    try:
        return db.query(MemberCredentials).filter(MemberCredentials.email == email.lower()).first()
    finally:
        db.close()


def get_credentials_by_member(member_id: str) -> MemberCredentials | None:
    db = get_db_session()
    try:
        return db.query(MemberCredentials).filter(MemberCredentials.member_id == member_id).first()
    finally:
        db.close()


def update_credentials(credentials_id: str, **values) -> bool:
    """Apply column updates to one credentials row."""
    db = get_db_session()
    try:
        row = db.get(MemberCredentials, credentials_id)
        if not row:
            return False
        for key, value in values.items():
            setattr(row, key, value)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        _logger.error(f"Error updating credentials {credentials_id}: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()


def create_credentials(member_id: str, email: str, **values) -> MemberCredentials:
    db = get_db_session()
    try:
        row = MemberCredentials(member_id=member_id, email=email.lower(), **values)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def update_member_fields(member_id: str, updates: dict) -> Member | None:
    db = get_db_session()
    try:
        member = db.get(Member, member_id)
        if not member:
            return None
        for key, value in updates.items():
            setattr(member, key, value)
        db.commit()
        db.refresh(member)
        return member
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def update_organization_fields(organization_id: str, updates: dict) -> Organization | None:
    db = get_db_session()
    try:
        organization = db.get(Organization, organization_id)
        if not organization:
            return None
        for key, value in updates.items():
            setattr(organization, key, value)
        db.commit()
        db.refresh(organization)
        return organization
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def list_organizations() -> list[dict]:
    db = get_db_session()
    try:
        rows = db.execute(select(Organization.id, Organization.name).order_by(Organization.name))
        return [{"id": row.id, "name": row.name} for row in rows]
    finally:
        db.close()


def upsert_communication_preference(member_id: str, category_id: str,
                                    is_subscribed: bool) -> MemberCommunicationPreference:
    """Create or update the single preference row for a member and category."""
    db = get_db_session()
    try:
        preference = db.query(MemberCommunicationPreference).filter(
            MemberCommunicationPreference.member_id == member_id,
            MemberCommunicationPreference.category_id == category_id,
        ).first()

        if preference:
            preference.is_subscribed = is_subscribed
            preference.updated_at = datetime.now(timezone.utc)
        else:
            preference = MemberCommunicationPreference(
                member_id=member_id,
                category_id=category_id,
                is_subscribed=is_subscribed,
            )
            db.add(preference)

        db.commit()
        db.refresh(preference)
        return preference
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_webinar(webinar_id: str) -> ZoomWebinar | None:
    db = get_db_session()
    try:
        return db.get(ZoomWebinar, webinar_id)
    finally:
        db.close()
