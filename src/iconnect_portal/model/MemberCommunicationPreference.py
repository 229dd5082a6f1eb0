from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from iconnect_portal.model.base import Base, new_id


class MemberCommunicationPreference(Base):
    __tablename__ = "member_communication_preference"
    __table_args__ = (UniqueConstraint("member_id", "category_id"),)

    id = Column(String, primary_key=True, default=new_id)
    member_id = Column(String, ForeignKey("member.id"), nullable=False, index=True)
    category_id = Column(String, nullable=False, index=True)
    is_subscribed = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))
