"""
Task service: the organization task board.

Every operation authenticates, resolves the organization (explicit id or the
persisted selection), verifies membership, validates, and then runs a single
scoped query. Any member may edit or delete any task in their organization.
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog
from sqlmodel import select

from hackportal.core.cache import revalidate_paths
from hackportal.core.context import RequestContext
from hackportal.core.results import (
    ActionError,
    ActionResult,
    Ok,
    action,
    not_found,
    validation_failed,
)
from hackportal.models.base import utcnow
from hackportal.models.task import Task
from hackportal.services.organizations import (
    OrgIdInput,
    current_user,
    parse_uuid,
    resolve_org_id,
    verify_org_membership,
)
from hackportal.services.validation import choice, max_length, optional_choice
from hackportal_shared.schemas.common import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
    Team,
)
from hackportal_shared.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

log = structlog.get_logger()

TASK_ROUTES = ("/tasks", "/dashboard")

TITLE_TOO_LONG = f"Title must be {TITLE_MAX_LENGTH} characters or less"
DESCRIPTION_TOO_LONG = f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less"
ASSIGNEE_NOT_MEMBER = "Assigned user must be a member of the organization"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _load_task(ctx: RequestContext, task_id: Union[uuid.UUID, str], org_id: uuid.UUID) -> Task:
    """Fetch a task by id *and* organization so ids from other tenants look absent."""
    parsed = parse_uuid(task_id)
    if parsed is None:
        raise ActionError(not_found("Task not found"))
    result = await ctx.session.execute(
        select(Task).where(Task.id == parsed, Task.org_id == org_id)
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise ActionError(not_found("Task not found"))
    return task


async def _check_assignee(ctx: RequestContext, assignee_id: Optional[uuid.UUID], org_id: uuid.UUID) -> None:
    if assignee_id is None:
        return
    if not await verify_org_membership(ctx.session, assignee_id, org_id):
        raise ActionError(validation_failed("assigned_to", ASSIGNEE_NOT_MEMBER))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@action("Failed to list tasks")
async def list_tasks(
    ctx: RequestContext,
    org_id: OrgIdInput = None,
    team: Optional[Union[Team, str]] = None,
) -> ActionResult[list[TaskRead]]:
    """All tasks in the organization, newest first, optionally for one team."""
    resolved = await resolve_org_id(ctx, org_id)
    team = optional_choice(team or None, Team, "team", "Invalid team")

    stmt = select(Task).where(Task.org_id == resolved)
    if team:
        stmt = stmt.where(Task.team == team)
    stmt = stmt.order_by(Task.created_at.desc())

    result = await ctx.session.execute(stmt)
    return Ok([TaskRead.model_validate(t) for t in result.scalars().all()])


@action("Failed to get task")
async def get_task(
    ctx: RequestContext, task_id: Union[uuid.UUID, str], org_id: OrgIdInput = None
) -> ActionResult[TaskRead]:
    resolved = await resolve_org_id(ctx, org_id)
    task = await _load_task(ctx, task_id, resolved)
    return Ok(TaskRead.model_validate(task))


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@action("Failed to create task")
async def create_task(
    ctx: RequestContext, task_in: TaskCreate, org_id: OrgIdInput = None
) -> ActionResult[TaskRead]:
    user = current_user(ctx)
    resolved = await resolve_org_id(ctx, org_id)

    if not task_in.title or not task_in.title.strip():
        raise ActionError(validation_failed("title", "Title is required"))
    max_length(task_in.title, TITLE_MAX_LENGTH, "title", TITLE_TOO_LONG)
    max_length(task_in.description, DESCRIPTION_MAX_LENGTH, "description", DESCRIPTION_TOO_LONG)
    status = choice(task_in.status or TaskStatus.TODO, TaskStatus, "status", "Invalid status")
    priority = optional_choice(task_in.priority or None, TaskPriority, "priority", "Invalid priority")
    team = optional_choice(task_in.team or None, Team, "team", "Invalid team")
    await _check_assignee(ctx, task_in.assigned_to, resolved)

    task = Task(
        org_id=resolved,
        created_by=user.id,
        title=task_in.title.strip(),
        description=(task_in.description or "").strip() or None,
        status=status,
        priority=priority,
        due_date=task_in.due_date,
        assigned_to=task_in.assigned_to,
        team=team,
    )
    ctx.session.add(task)
    await ctx.session.commit()
    await ctx.session.refresh(task)

    log.info("task.created", task_id=str(task.id), org_id=str(resolved), user_id=str(user.id))
    await revalidate_paths(ctx.cache, *TASK_ROUTES)
    return Ok(TaskRead.model_validate(task))


@action("Failed to update task")
async def update_task(
    ctx: RequestContext,
    task_id: Union[uuid.UUID, str],
    task_in: TaskUpdate,
    org_id: OrgIdInput = None,
) -> ActionResult[TaskRead]:
    """Partial update. Fields left unset are untouched; explicit None clears."""
    resolved = await resolve_org_id(ctx, org_id)
    task = await _load_task(ctx, task_id, resolved)

    changes = task_in.model_dump(exclude_unset=True)

    if "title" in changes:
        title = changes["title"]
        if not title or not title.strip():
            raise ActionError(validation_failed("title", "Title cannot be empty"))
        max_length(title, TITLE_MAX_LENGTH, "title", TITLE_TOO_LONG)
        changes["title"] = title.strip()
    if "description" in changes:
        max_length(changes["description"], DESCRIPTION_MAX_LENGTH, "description", DESCRIPTION_TOO_LONG)
        changes["description"] = (changes["description"] or "").strip() or None
    if "status" in changes:
        changes["status"] = choice(changes["status"], TaskStatus, "status", "Invalid status")
    if "priority" in changes:
        changes["priority"] = optional_choice(changes["priority"], TaskPriority, "priority", "Invalid priority")
    if "team" in changes:
        changes["team"] = optional_choice(changes["team"], Team, "team", "Invalid team")
    if "assigned_to" in changes:
        await _check_assignee(ctx, changes["assigned_to"], resolved)

    for key, value in changes.items():
        setattr(task, key, value)
    task.updated_at = utcnow()
    ctx.session.add(task)
    await ctx.session.commit()
    await ctx.session.refresh(task)

    log.info("task.updated", task_id=str(task.id), fields=sorted(changes))
    await revalidate_paths(ctx.cache, *TASK_ROUTES)
    return Ok(TaskRead.model_validate(task))


@action("Failed to delete task")
async def delete_task(
    ctx: RequestContext, task_id: Union[uuid.UUID, str], org_id: OrgIdInput = None
) -> ActionResult[None]:
    resolved = await resolve_org_id(ctx, org_id)
    task = await _load_task(ctx, task_id, resolved)

    await ctx.session.delete(task)
    await ctx.session.commit()

    log.info("task.deleted", task_id=str(task_id), org_id=str(resolved))
    await revalidate_paths(ctx.cache, *TASK_ROUTES)
    return Ok(None)
