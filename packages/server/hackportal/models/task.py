"""Task model."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UTCDateTime, UUIDMixin


class Task(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="todo")  # todo | doing | done
    priority: Optional[str] = None  # low | medium | high
    due_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_by: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)
    assigned_to: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id", index=True)
    team: Optional[str] = Field(default=None, index=True)
