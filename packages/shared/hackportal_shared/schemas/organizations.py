"""
Organization-related Pydantic schemas.

Covers: organizations, a user's memberships, the member roster of an org,
and org selection.
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from .common import Team


class OrganizationRead(BaseModel):
    id: uuid.UUID
    name: Optional[str] = None
    slug: Optional[str] = None


class OrgMembershipRead(BaseModel):
    """One organization the current user belongs to."""
    org_id: uuid.UUID
    role: str
    team: Optional[Team] = None
    organization: OrganizationRead


class OrgMembershipListResponse(BaseModel):
    data: list[OrgMembershipRead] = Field(default_factory=list)


class MemberProfile(BaseModel):
    id: uuid.UUID
    full_name: Optional[str] = None


class OrgMemberRead(BaseModel):
    """One member of an organization, as seen by another member."""
    user_id: uuid.UUID
    role: str
    team: Optional[Team] = None
    profile: MemberProfile
    email: Optional[str] = None


class OrgSelectRequest(BaseModel):
    org_id: uuid.UUID


class SessionUserRead(BaseModel):
    id: uuid.UUID
    email: str
