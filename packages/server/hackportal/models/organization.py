"""Organization model (static reference data, not RLS-scoped for reads)."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UTCDateTime, UUIDMixin, utcnow


class Organization(UUIDMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False)
    slug: Optional[str] = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
        sa_type=UTCDateTime,
    )
