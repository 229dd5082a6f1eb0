from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from iconnect_portal.model.base import Base, new_id


class Member(Base):
    __tablename__ = "member"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    first_name = Column(String)
    last_name = Column(String)
    job_title = Column(String)
    biography = Column(Text)
    profile_photo_url = Column(String)
    linkedin_url = Column(String)
    twitter_url = Column(String)
    phone_number = Column(String)
    pronouns = Column(String)
    location_summary = Column(String)
    show_in_directory = Column(Boolean, default=True)
    role_id = Column(String, ForeignKey("role.id"), nullable=True, index=True)
    organization_id = Column(String, ForeignKey("organization.id"), nullable=True, index=True)
