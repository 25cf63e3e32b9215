"""SQLAlchemy ORM models for TwinTimer."""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class StateSlot(Base):
    """One durable key → JSON payload slot.

    The timer keeps its whole snapshot (countdowns plus activity log) in
    a single row so every save is one atomic write.
    """

    __tablename__ = "state_slots"

    key = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<StateSlot key={self.key} updated_at={self.updated_at}>"
