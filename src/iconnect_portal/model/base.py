import uuid
from sqlalchemy.orm import declarative_base

_DeclarativeBase = declarative_base()


def new_id():
    return str(uuid.uuid4())


class Base(_DeclarativeBase):
    __abstract__ = True

    def to_dict(self, not_included_columns=None):
        if not_included_columns is None:
            not_included_columns = []

        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in not_included_columns
        }
