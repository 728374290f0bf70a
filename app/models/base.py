"""Base Models"""

import uuid
from sqlalchemy import Column, String

from app.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    """
    Base model class for all tables.

    Provides an opaque string primary key generated by the server.
    """
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=new_id, index=True)
