"""
Organization API endpoints.

GET  /api/v1/orgs          - Memberships of the authenticated user
GET  /api/v1/orgs/current  - The organization the caller works in (or 303)
POST /api/v1/orgs/select   - Persist the selected organization
GET  /api/v1/orgs/members  - Member roster of the resolved organization
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends

from hackportal.api.deps import get_request_context
from hackportal.api.errors import ActionFailed, unwrap
from hackportal.core.context import RequestContext
from hackportal.core.results import auth_required
from hackportal.services import organizations as org_service
from hackportal_shared.schemas.organizations import (
    OrgMemberRead,
    OrgMembershipListResponse,
    OrgMembershipRead,
    OrgSelectRequest,
)

router = APIRouter()


@router.get("", response_model=OrgMembershipListResponse)
async def list_orgs(ctx: RequestContext = Depends(get_request_context)):
    """List orgs the authenticated user belongs to."""
    if ctx.user is None:
        raise ActionFailed(auth_required())
    memberships = await org_service.get_user_organizations(ctx.session, ctx.user.id)
    return OrgMembershipListResponse(data=memberships)


@router.get("/current", response_model=OrgMembershipRead)
async def current_org(ctx: RequestContext = Depends(get_request_context)):
    """Resolve the working organization; redirects to login, /join or /select-org."""
    return await org_service.require_selected_org(ctx)


@router.post("/select")
async def select_org(
    body: OrgSelectRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Remember the chosen organization for subsequent requests."""
    if ctx.user is None:
        raise ActionFailed(auth_required())
    org_service.set_selected_org(ctx, body.org_id)
    return {"ok": True, "org_id": str(body.org_id)}


@router.get("/members", response_model=List[OrgMemberRead])
async def list_members(
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Members of the resolved organization, ordered by role."""
    return unwrap(await org_service.get_org_members(ctx, org_id))
