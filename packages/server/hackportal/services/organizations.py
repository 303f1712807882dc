"""
Organization service: memberships, the selected organization, and the
membership guard every other service runs before touching tenant data.
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from hackportal.core.context import RequestContext, SessionUser
from hackportal.core.results import (
    ActionError,
    ActionResult,
    Ok,
    RedirectRequired,
    action,
    auth_required,
    no_org_selected,
    not_a_member,
)
from hackportal.models.org_member import OrgMember
from hackportal.models.organization import Organization
from hackportal.models.profile import Profile
from hackportal_shared.schemas.organizations import (
    MemberProfile,
    OrganizationRead,
    OrgMemberRead,
    OrgMembershipRead,
)

log = structlog.get_logger()

LOGIN_ROUTE = "/auth/login"
JOIN_ROUTE = "/join"
SELECT_ORG_ROUTE = "/select-org"

OrgIdInput = Optional[Union[uuid.UUID, str]]


def parse_uuid(value: Union[uuid.UUID, str, None]) -> Optional[uuid.UUID]:
    """Coerce an id from a caller; None if it is missing or malformed."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Memberships
# ---------------------------------------------------------------------------


async def get_user_organizations(
    session: AsyncSession, user_id: uuid.UUID
) -> list[OrgMembershipRead]:
    """Every organization the user belongs to. Never raises; [] on backend failure."""
    try:
        result = await session.execute(
            select(OrgMember, Organization)
            .join(Organization, Organization.id == OrgMember.org_id)
            .where(OrgMember.user_id == user_id)
            .order_by(Organization.name)
        )
        rows = result.all()
    except SQLAlchemyError:
        log.warning("org.memberships_lookup_failed", user_id=str(user_id), exc_info=True)
        await session.rollback()
        return []

    return [
        OrgMembershipRead(
            org_id=member.org_id,
            role=member.role,
            team=member.team,
            organization=OrganizationRead(id=org.id, name=org.name, slug=org.slug),
        )
        for member, org in rows
    ]


async def verify_org_membership(
    session: AsyncSession, user_id: uuid.UUID, org_id: uuid.UUID
) -> bool:
    """Fail-closed membership check: backend errors count as "not a member"."""
    memberships = await get_user_organizations(session, user_id)
    return org_id in {m.org_id for m in memberships}


# ---------------------------------------------------------------------------
# Guards used inside actions (raise ActionError)
# ---------------------------------------------------------------------------


def current_user(ctx: RequestContext) -> SessionUser:
    if ctx.user is None:
        raise ActionError(auth_required())
    return ctx.user


async def resolve_org_id(ctx: RequestContext, org_id: OrgIdInput = None) -> uuid.UUID:
    """Pick the organization an action runs against and verify the caller is in it.

    An explicit ``org_id`` wins over the persisted selection. The selection is
    not validated when it is stored, so a stale one is rejected here.
    """
    user = current_user(ctx)

    if org_id is None:
        org_id = ctx.selection.get()
        if not org_id:
            raise ActionError(no_org_selected())

    resolved = parse_uuid(org_id)
    if resolved is None or not await verify_org_membership(ctx.session, user.id, resolved):
        log.info("org.membership_denied", user_id=str(user.id), org_id=str(org_id))
        raise ActionError(not_a_member())
    return resolved


# ---------------------------------------------------------------------------
# Page-level guards (raise RedirectRequired)
# ---------------------------------------------------------------------------


def require_user(ctx: RequestContext) -> SessionUser:
    if ctx.user is None:
        raise RedirectRequired(LOGIN_ROUTE)
    return ctx.user


async def require_selected_org(ctx: RequestContext) -> OrgMembershipRead:
    """The membership the caller is working in, or a redirect to pick one.

    - no memberships: onboarding (``/join``)
    - exactly one: that one, whatever the selection says
    - several: the persisted selection, or ``/select-org`` if it is missing
      or no longer matches a membership
    """
    user = require_user(ctx)
    memberships = await get_user_organizations(ctx.session, user.id)

    if not memberships:
        log.info("org.no_memberships", user_id=str(user.id))
        raise RedirectRequired(JOIN_ROUTE)

    if len(memberships) == 1:
        return memberships[0]

    selected_id = parse_uuid(ctx.selection.get())
    for membership in memberships:
        if membership.org_id == selected_id:
            return membership

    raise RedirectRequired(SELECT_ORG_ROUTE)


def set_selected_org(ctx: RequestContext, org_id: uuid.UUID) -> None:
    """Persist the selection. Membership is checked later, per operation."""
    ctx.selection.set(str(org_id))
    log.info("org.selected", org_id=str(org_id))


# ---------------------------------------------------------------------------
# Member roster
# ---------------------------------------------------------------------------


@action("Failed to fetch organization members")
async def get_org_members(
    ctx: RequestContext, org_id: OrgIdInput = None
) -> ActionResult[list[OrgMemberRead]]:
    resolved = await resolve_org_id(ctx, org_id)

    result = await ctx.session.execute(
        select(OrgMember, Profile)
        .join(Profile, Profile.id == OrgMember.user_id, isouter=True)
        .where(OrgMember.org_id == resolved)
        .order_by(OrgMember.role)
    )
    members = [
        OrgMemberRead(
            user_id=member.user_id,
            role=member.role,
            team=member.team,
            profile=MemberProfile(
                id=member.user_id,
                full_name=profile.full_name if profile else None,
            ),
            email=profile.email if profile else None,
        )
        for member, profile in result.all()
    ]
    return Ok(members)
