"""Event people: volunteers, mentors, judges, sponsors and partners (RLS-scoped)."""

from typing import List, Optional
import uuid

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin

# text[] on PostgreSQL, JSON elsewhere (SQLite in tests)
SkillList = sa.JSON().with_variant(ARRAY(sa.Text()), "postgresql")


class EventPerson(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "event_people"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    person_type: str = Field(nullable=False, index=True)
    full_name: str = Field(nullable=False)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role_title: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = Field(default=None, sa_type=SkillList)
    notes: Optional[str] = None
    created_by: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)
