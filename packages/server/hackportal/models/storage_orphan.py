"""Stored objects whose deletion failed and are waiting for cleanup."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UTCDateTime, UUIDMixin, utcnow


class StorageOrphan(UUIDMixin, SQLModel, table=True):
    __tablename__ = "storage_orphans"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    storage_path: str = Field(nullable=False)
    reason: str = Field(nullable=False)  # upload_compensation | resource_delete
    last_error: Optional[str] = None
    attempts: int = Field(default=0, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
        sa_type=UTCDateTime,
    )
