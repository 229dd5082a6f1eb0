from sqlalchemy import Column, String, Text
from iconnect_portal.model.base import Base, new_id


class Organization(Base):
    __tablename__ = "organization"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    description = Column(Text)
    website_url = Column(String)
    logo_url = Column(String)
    phone = Column(String)
    invoicing_email = Column(String)
    invoicing_address = Column(Text)
