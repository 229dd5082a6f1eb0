from sqlalchemy import Column, DateTime, JSON, String
from iconnect_portal.model.base import Base


class UserSession(Base):
    """One row per login; `sess` carries cookie metadata plus member identity"""
    __tablename__ = "session"

    sid = Column(String, primary_key=True)
    sess = Column(JSON, nullable=False)
    expire = Column(DateTime(timezone=True), nullable=False, index=True)
