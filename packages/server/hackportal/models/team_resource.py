"""Team resources: links, guides and uploaded documents (RLS-scoped)."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class TeamResource(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "team_resources"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    team: str = Field(nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    resource_type: str = Field(nullable=False)  # document | link | guide | other
    url: str = Field(nullable=False)
    storage_path: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(default=None, sa_type=sa.BigInteger)
    file_type: Optional[str] = None
    created_by: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)
