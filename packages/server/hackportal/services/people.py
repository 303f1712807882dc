"""
People service: the organization's contact list of volunteers, mentors,
judges, sponsors and partners. Independent of memberships.
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog
from sqlmodel import select

from hackportal.core.cache import revalidate_paths
from hackportal.core.context import RequestContext
from hackportal.core.results import ActionError, ActionResult, Ok, action, not_found
from hackportal.models.base import utcnow
from hackportal.models.event_person import EventPerson
from hackportal.services.organizations import (
    OrgIdInput,
    current_user,
    parse_uuid,
    resolve_org_id,
)
from hackportal.services.validation import choice, clean_text, optional_choice, required_text
from hackportal_shared.schemas.common import PersonType
from hackportal_shared.schemas.people import (
    EventPersonCreate,
    EventPersonRead,
    EventPersonUpdate,
)

log = structlog.get_logger()

PEOPLE_ROUTE = "/people"

TEXT_FIELDS = ("email", "phone", "company", "role_title", "bio", "notes")


def _clean_skills(skills: Optional[list[str]]) -> Optional[list[str]]:
    if skills is None:
        return None
    return [s.strip() for s in skills if s and s.strip()]


async def _load_person(
    ctx: RequestContext, person_id: Union[uuid.UUID, str], org_id: uuid.UUID
) -> EventPerson:
    parsed = parse_uuid(person_id)
    if parsed is None:
        raise ActionError(not_found("Person not found"))
    result = await ctx.session.execute(
        select(EventPerson).where(EventPerson.id == parsed, EventPerson.org_id == org_id)
    )
    person = result.scalar_one_or_none()
    if person is None:
        raise ActionError(not_found("Person not found"))
    return person


@action("Failed to list people")
async def list_event_people(
    ctx: RequestContext,
    person_type: Optional[Union[PersonType, str]] = None,
    org_id: OrgIdInput = None,
) -> ActionResult[list[EventPersonRead]]:
    resolved = await resolve_org_id(ctx, org_id)
    person_type = optional_choice(person_type, PersonType, "person_type", "Invalid person type")

    stmt = select(EventPerson).where(EventPerson.org_id == resolved)
    if person_type:
        stmt = stmt.where(EventPerson.person_type == person_type)
    stmt = stmt.order_by(EventPerson.created_at.desc())

    result = await ctx.session.execute(stmt)
    return Ok([EventPersonRead.model_validate(p) for p in result.scalars().all()])


@action("Failed to get person")
async def get_event_person(
    ctx: RequestContext, person_id: Union[uuid.UUID, str], org_id: OrgIdInput = None
) -> ActionResult[EventPersonRead]:
    resolved = await resolve_org_id(ctx, org_id)
    person = await _load_person(ctx, person_id, resolved)
    return Ok(EventPersonRead.model_validate(person))


@action("Failed to create person")
async def create_event_person(
    ctx: RequestContext, person_in: EventPersonCreate, org_id: OrgIdInput = None
) -> ActionResult[EventPersonRead]:
    user = current_user(ctx)
    resolved = await resolve_org_id(ctx, org_id)

    full_name = required_text(person_in.full_name, "full_name", "Full name is required")
    person_type = choice(person_in.person_type, PersonType, "person_type", "Invalid person type")

    person = EventPerson(
        org_id=resolved,
        person_type=person_type,
        full_name=full_name,
        skills=_clean_skills(person_in.skills),
        created_by=user.id,
        **{name: clean_text(getattr(person_in, name)) for name in TEXT_FIELDS},
    )
    ctx.session.add(person)
    await ctx.session.commit()
    await ctx.session.refresh(person)

    log.info("person.created", person_id=str(person.id), person_type=person_type, org_id=str(resolved))
    await revalidate_paths(ctx.cache, PEOPLE_ROUTE)
    return Ok(EventPersonRead.model_validate(person))


@action("Failed to update person")
async def update_event_person(
    ctx: RequestContext,
    person_id: Union[uuid.UUID, str],
    person_in: EventPersonUpdate,
    org_id: OrgIdInput = None,
) -> ActionResult[EventPersonRead]:
    resolved = await resolve_org_id(ctx, org_id)
    person = await _load_person(ctx, person_id, resolved)

    changes = person_in.model_dump(exclude_unset=True)
    if "full_name" in changes:
        changes["full_name"] = required_text(
            changes["full_name"], "full_name", "Full name cannot be empty"
        )
    if "skills" in changes:
        changes["skills"] = _clean_skills(changes["skills"])
    for name in TEXT_FIELDS:
        if name in changes:
            changes[name] = clean_text(changes[name])

    for key, value in changes.items():
        setattr(person, key, value)
    person.updated_at = utcnow()
    ctx.session.add(person)
    await ctx.session.commit()
    await ctx.session.refresh(person)

    log.info("person.updated", person_id=str(person.id), fields=sorted(changes))
    await revalidate_paths(ctx.cache, PEOPLE_ROUTE)
    return Ok(EventPersonRead.model_validate(person))


@action("Failed to delete person")
async def delete_event_person(
    ctx: RequestContext, person_id: Union[uuid.UUID, str], org_id: OrgIdInput = None
) -> ActionResult[None]:
    resolved = await resolve_org_id(ctx, org_id)
    person = await _load_person(ctx, person_id, resolved)

    await ctx.session.delete(person)
    await ctx.session.commit()

    log.info("person.deleted", person_id=str(person_id), org_id=str(resolved))
    await revalidate_paths(ctx.cache, PEOPLE_ROUTE)
    return Ok(None)
