"""Task model definitions."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from backend.database import Base


class TaskStatus(str, enum.Enum):
    """Lifecycle states, declared in lifecycle order."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(TaskStatus).index(self)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    """Represents a task assigned to a single user."""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(TaskStatus, native_enum=False, values_callable=lambda states: [state.value for state in states]),
        nullable=False,
        default=TaskStatus.NOT_STARTED,
    )
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
