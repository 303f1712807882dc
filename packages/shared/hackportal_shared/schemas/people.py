"""Schemas for event people: volunteers, mentors, judges, sponsors and partners."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel, ConfigDict

from .common import PersonType


class EventPersonCreate(BaseModel):
    person_type: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role_title: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    notes: Optional[str] = None


class EventPersonUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role_title: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    notes: Optional[str] = None


class EventPersonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    org_id: uuid.UUID
    person_type: PersonType
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role_title: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    notes: Optional[str] = None
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
