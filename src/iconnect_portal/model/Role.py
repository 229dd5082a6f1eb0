from sqlalchemy import Boolean, Column, JSON, String
from iconnect_portal.model.base import Base, new_id


class Role(Base):
    __tablename__ = "role"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_default = Column(Boolean, nullable=False, default=False)
    # Features are enabled unless listed here
    excluded_features = Column(JSON, nullable=False, default=list)
