"""
Team resource service: links, guides and uploaded documents per team.

Document uploads are a two-phase operation:

1. store the object under ``{org_id}/{team}/{epoch_ms}-{name}``;
2. insert the ``team_resources`` row pointing at it.

If phase 2 fails the object is deleted again. If that deletion fails too, the
path is recorded in ``storage_orphans`` so ``purge_storage_orphans`` can retry
it later. The same applies to the object behind a deleted document resource.
"""

from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import quote

import structlog
from sqlmodel import select

from hackportal.core.cache import revalidate_paths
from hackportal.core.config import get_settings
from hackportal.core.context import RequestContext
from hackportal.core.results import (
    ActionError,
    ActionResult,
    Ok,
    action,
    auth_required,
    backend,
    not_a_member,
    not_found,
    validation_failed,
)
from hackportal.core.storage import StorageError
from hackportal.models.storage_orphan import StorageOrphan
from hackportal.models.team_resource import TeamResource
from hackportal.services.organizations import (
    OrgIdInput,
    current_user,
    parse_uuid,
    resolve_org_id,
    verify_org_membership,
)
from hackportal.services.validation import choice, clean_text, required_text
from hackportal_shared.schemas.common import ResourceType, Team
from hackportal_shared.schemas.resources import TeamResourceCreate, TeamResourceRead

log = structlog.get_logger()
settings = get_settings()

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class DocumentUpload:
    """A file received from the caller."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def team_route(team: str) -> str:
    return f"/team/{team}"


def build_storage_path(org_id: uuid.UUID, team: str, filename: str) -> str:
    timestamp = int(time.time() * 1000)
    return f"{org_id}/{team}/{timestamp}-{UNSAFE_FILENAME_CHARS.sub('_', filename)}"


def document_url(resource_id: uuid.UUID, storage_path: str) -> str:
    """Download route for a document; redirects to a short-lived signed URL."""
    return f"/api/v1/team-resources/{resource_id}/url?storage_path={quote(storage_path, safe='')}"


def _document_org_id(storage_path: str) -> Optional[uuid.UUID]:
    """Owning organization of a stored object; None unless the path is `{org_id}/…`
    with no empty or dot segments.
    """
    segments = storage_path.split("/")
    if len(segments) < 2 or any(s in ("", ".", "..") for s in segments):
        return None
    return parse_uuid(segments[0])


async def _load_resource(
    ctx: RequestContext, resource_id: Union[uuid.UUID, str], org_id: uuid.UUID
) -> TeamResource:
    parsed = parse_uuid(resource_id)
    if parsed is None:
        raise ActionError(not_found("Resource not found"))
    result = await ctx.session.execute(
        select(TeamResource).where(TeamResource.id == parsed, TeamResource.org_id == org_id)
    )
    resource = result.scalar_one_or_none()
    if resource is None:
        raise ActionError(not_found("Resource not found"))
    return resource


async def _remove_object(
    ctx: RequestContext, org_id: uuid.UUID, storage_path: str, reason: str
) -> bool:
    """Delete a stored object; on failure queue it as an orphan. True if removed.

    The orphan row is added to the session but not committed.
    """
    try:
        await ctx.storage.remove([storage_path])
        return True
    except StorageError as exc:
        log.warning("resource.object_delete_failed", path=storage_path, reason=reason, error=str(exc))
        ctx.session.add(
            StorageOrphan(org_id=org_id, storage_path=storage_path, reason=reason, last_error=str(exc))
        )
        return False


async def _compensate_upload(ctx: RequestContext, org_id: uuid.UUID, storage_path: str) -> None:
    """Undo phase 1 of an upload whose metadata row could not be written."""
    await ctx.session.rollback()
    if await _remove_object(ctx, org_id, storage_path, "upload_compensation"):
        log.info("resource.upload_compensated", path=storage_path)
        return
    try:
        await ctx.session.commit()
    except Exception:
        await ctx.session.rollback()
        log.error("resource.orphan_unrecorded", path=storage_path, exc_info=True)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@action("Failed to list resources")
async def list_team_resources(
    ctx: RequestContext, team: Union[Team, str], org_id: OrgIdInput = None
) -> ActionResult[list[TeamResourceRead]]:
    resolved = await resolve_org_id(ctx, org_id)
    team = choice(team, Team, "team", "Invalid team")

    result = await ctx.session.execute(
        select(TeamResource)
        .where(TeamResource.org_id == resolved, TeamResource.team == team)
        .order_by(TeamResource.created_at.desc())
    )
    return Ok([TeamResourceRead.model_validate(r) for r in result.scalars().all()])


@action("Failed to get document URL")
async def get_document_url(
    ctx: RequestContext, storage_path: str, expires_in: int = settings.signed_url_expires_in
) -> ActionResult[str]:
    """Signed download URL for a stored document of one of the caller's organizations."""
    if ctx.user is None:
        return auth_required()

    org_id = _document_org_id(storage_path)
    if org_id is None:
        return not_found("Document not found")
    if not await verify_org_membership(ctx.session, ctx.user.id, org_id):
        return not_a_member()

    try:
        url = await ctx.storage.create_signed_url(storage_path, expires_in)
    except StorageError as exc:
        log.warning("resource.sign_failed", path=storage_path, error=str(exc))
        return backend(str(exc))
    return Ok(url)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@action("Failed to create resource")
async def create_team_resource(
    ctx: RequestContext, resource_in: TeamResourceCreate, org_id: OrgIdInput = None
) -> ActionResult[TeamResourceRead]:
    """Link, guide or other resource pointing at an external URL."""
    user = current_user(ctx)
    resolved = await resolve_org_id(ctx, org_id)

    team = choice(resource_in.team, Team, "team", "Invalid team")
    title = required_text(resource_in.title, "title", "Title is required")
    resource_type = choice(resource_in.resource_type, ResourceType, "resource_type", "Invalid resource type")
    if resource_type == ResourceType.DOCUMENT.value:
        raise ActionError(validation_failed("resource_type", "Documents must be uploaded as files"))
    url = required_text(resource_in.url, "url", "URL is required")

    resource = TeamResource(
        org_id=resolved,
        team=team,
        title=title,
        description=clean_text(resource_in.description),
        resource_type=resource_type,
        url=url,
        created_by=user.id,
    )
    ctx.session.add(resource)
    await ctx.session.commit()
    await ctx.session.refresh(resource)

    log.info("resource.created", resource_id=str(resource.id), team=team, org_id=str(resolved))
    await revalidate_paths(ctx.cache, team_route(team))
    return Ok(TeamResourceRead.model_validate(resource))


@action("Failed to upload document")
async def upload_team_document(
    ctx: RequestContext,
    upload: Optional[DocumentUpload],
    team: Union[Team, str],
    title: str,
    description: Optional[str] = None,
    org_id: OrgIdInput = None,
) -> ActionResult[TeamResourceRead]:
    user = current_user(ctx)
    resolved = await resolve_org_id(ctx, org_id)

    team = choice(team, Team, "team", "Invalid team")
    title = required_text(title, "title", "Title is required")
    if upload is None or not upload.filename:
        raise ActionError(validation_failed("file", "File is required"))

    # Phase 1: object
    storage_path = build_storage_path(resolved, team, upload.filename)
    try:
        await ctx.storage.upload(storage_path, upload.content, content_type=upload.content_type)
    except StorageError as exc:
        log.warning("resource.upload_failed", path=storage_path, error=str(exc))
        return backend(f"Failed to upload file: {exc}")

    # Phase 2: metadata row
    resource_id = uuid.uuid4()
    resource = TeamResource(
        id=resource_id,
        org_id=resolved,
        team=team,
        title=title,
        description=clean_text(description),
        resource_type=ResourceType.DOCUMENT.value,
        url=document_url(resource_id, storage_path),
        storage_path=storage_path,
        file_name=upload.filename,
        file_size=len(upload.content),
        file_type=upload.content_type,
        created_by=user.id,
    )
    try:
        ctx.session.add(resource)
        await ctx.session.commit()
        await ctx.session.refresh(resource)
    except Exception as exc:
        log.warning("resource.metadata_insert_failed", path=storage_path, error=str(exc))
        await _compensate_upload(ctx, resolved, storage_path)
        return backend(f"Failed to create resource: {exc}")

    log.info("resource.uploaded", resource_id=str(resource.id), path=storage_path, size=resource.file_size)
    await revalidate_paths(ctx.cache, team_route(team))
    return Ok(TeamResourceRead.model_validate(resource))


@action("Failed to delete resource")
async def delete_team_resource(
    ctx: RequestContext, resource_id: Union[uuid.UUID, str], org_id: OrgIdInput = None
) -> ActionResult[None]:
    """Delete the stored object first (best effort), then the row."""
    resolved = await resolve_org_id(ctx, org_id)
    resource = await _load_resource(ctx, resource_id, resolved)
    team = resource.team

    if resource.storage_path:
        await _remove_object(ctx, resolved, resource.storage_path, "resource_delete")

    await ctx.session.delete(resource)
    await ctx.session.commit()

    log.info("resource.deleted", resource_id=str(resource_id), org_id=str(resolved))
    await revalidate_paths(ctx.cache, team_route(team))
    return Ok(None)
