from sqlalchemy import Boolean, Column, String
from iconnect_portal.model.base import Base, new_id


class ZoomWebinar(Base):
    """Local record pointing at a webinar hosted on Zoom"""
    __tablename__ = "zoom_webinar"

    id = Column(String, primary_key=True, default=new_id)
    zoom_webinar_id = Column(String, index=True)
    topic = Column(String)
    registration_required = Column(Boolean, nullable=False, default=False)
