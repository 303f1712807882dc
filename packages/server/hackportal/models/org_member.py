"""Organization membership (join table, RLS-scoped, read-only here)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UTCDateTime, utcnow


class OrgMember(SQLModel, table=True):
    __tablename__ = "org_members"

    user_id: uuid.UUID = Field(foreign_key="profiles.id", primary_key=True)
    org_id: uuid.UUID = Field(foreign_key="organizations.id", primary_key=True, index=True)
    role: str = Field(nullable=False, default="member")  # free text, e.g. lead
    team: Optional[str] = None  # tech | logistics | sponsorship | outreach
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
        sa_type=UTCDateTime,
    )
