"""
Task endpoints.

Statuses: todo, doing, done, with no enforced transition order. The optional
``org_id`` query parameter overrides the selected organization.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from hackportal.api.deps import get_request_context
from hackportal.api.errors import unwrap
from hackportal.core.context import RequestContext
from hackportal.services import tasks as task_service
from hackportal_shared.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

router = APIRouter()


@router.get("", response_model=List[TaskRead])
async def list_tasks_endpoint(
    org_id: Optional[uuid.UUID] = None,
    team: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """List tasks, newest first, optionally for one team."""
    return unwrap(await task_service.list_tasks(ctx, org_id, team))


@router.post("", response_model=TaskRead, status_code=201)
async def create_task_endpoint(
    task_in: TaskCreate,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a new task."""
    return unwrap(await task_service.create_task(ctx, task_in, org_id))


@router.get("/{task_id}", response_model=TaskRead)
async def get_task_endpoint(
    task_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await task_service.get_task(ctx, task_id, org_id))


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task_endpoint(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Partial update: ``null`` clears a field, omitting it leaves it alone."""
    return unwrap(await task_service.update_task(ctx, task_id, task_in, org_id))


@router.delete("/{task_id}", status_code=204)
async def delete_task_endpoint(
    task_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    unwrap(await task_service.delete_task(ctx, task_id, org_id))
    return Response(status_code=204)
