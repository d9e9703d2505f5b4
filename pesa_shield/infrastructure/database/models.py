"""SQLAlchemy ORM models for local durable storage"""

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class KeyValueEntry(Base):
    """Single JSON document stored under a well-known key"""

    __tablename__ = "key_value_store"

    key = Column(Text, primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
