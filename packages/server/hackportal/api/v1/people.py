"""
Event people endpoints (volunteers, mentors, judges, sponsors, partners).
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from hackportal.api.deps import get_request_context
from hackportal.api.errors import unwrap
from hackportal.core.context import RequestContext
from hackportal.services import people as people_service
from hackportal_shared.schemas.people import (
    EventPersonCreate,
    EventPersonRead,
    EventPersonUpdate,
)

router = APIRouter()


@router.get("", response_model=List[EventPersonRead])
async def list_people_endpoint(
    person_type: Optional[str] = None,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await people_service.list_event_people(ctx, person_type, org_id))


@router.post("", response_model=EventPersonRead, status_code=201)
async def create_person_endpoint(
    person_in: EventPersonCreate,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await people_service.create_event_person(ctx, person_in, org_id))


@router.get("/{person_id}", response_model=EventPersonRead)
async def get_person_endpoint(
    person_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await people_service.get_event_person(ctx, person_id, org_id))


@router.patch("/{person_id}", response_model=EventPersonRead)
async def update_person_endpoint(
    person_id: uuid.UUID,
    person_in: EventPersonUpdate,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await people_service.update_event_person(ctx, person_id, person_in, org_id))


@router.delete("/{person_id}", status_code=204)
async def delete_person_endpoint(
    person_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    unwrap(await people_service.delete_event_person(ctx, person_id, org_id))
    return Response(status_code=204)
