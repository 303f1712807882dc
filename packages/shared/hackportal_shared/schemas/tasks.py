"""Task-related Pydantic schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict

from .common import TaskPriority, TaskStatus, Team


# ---------------------------------------------------------------------------
# Task CRUD
#
# Enum-valued inputs are plain strings: the service layer checks them so that
# HTTP callers and in-process callers get the same error messages.
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[uuid.UUID] = None
    team: Optional[str] = None


class TaskUpdate(BaseModel):
    """Partial update. An explicit ``None`` clears a field; an omitted field is left alone."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[uuid.UUID] = None
    team: Optional[str] = None


class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    org_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    created_by: uuid.UUID
    assigned_to: Optional[uuid.UUID] = None
    team: Optional[Team] = None
    created_at: datetime
    updated_at: datetime
