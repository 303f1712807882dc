"""Team resource schemas (links, guides and uploaded documents)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict

from .common import ResourceType, Team


class TeamResourceCreate(BaseModel):
    """Request body for link-style resources. Documents go through the upload endpoint."""
    team: str
    title: str
    description: Optional[str] = None
    resource_type: str = ResourceType.LINK.value
    url: str


class TeamResourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    org_id: uuid.UUID
    team: Team
    title: str
    description: Optional[str] = None
    resource_type: ResourceType
    url: str
    storage_path: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
