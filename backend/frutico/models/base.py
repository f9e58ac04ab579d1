"""Shared timestamp columns for Frutico tables."""

from datetime import datetime

from sqlalchemy import Column, DateTime, func

from ..database import Base


def utcnow() -> datetime:
    """Naive UTC, the convention for every stored timestamp."""
    return datetime.utcnow()


class BaseModel(Base):
    __abstract__ = True

    # Orders are seeded by the booking flow, sometimes with plain SQL, so the
    # store fills the timestamps when the ORM does not.
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
