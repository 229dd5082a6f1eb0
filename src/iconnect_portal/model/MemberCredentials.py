from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from iconnect_portal.model.base import Base, new_id


class MemberCredentials(Base):
    """Password and lockout state, kept apart from the member profile"""
    __tablename__ = "member_credentials"

    id = Column(String, primary_key=True, default=new_id)
    member_id = Column(String, ForeignKey("member.id"), nullable=False, unique=True, index=True)
    email = Column(String, nullable=False, index=True)
    password_hash = Column(String, nullable=True)
    is_temp_password = Column(Boolean, nullable=False, default=False)
    password_set_at = Column(DateTime(timezone=True))
    failed_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True))
    last_login = Column(DateTime(timezone=True))
    reset_token = Column(String, index=True)
    reset_token_expires = Column(DateTime(timezone=True))
