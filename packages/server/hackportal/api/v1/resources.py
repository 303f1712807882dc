"""
Team resource endpoints.

Links and guides are created from JSON; documents arrive as multipart uploads
and are downloaded through ``/{resource_id}/url``, which redirects to a
signed URL valid for one hour.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.responses import RedirectResponse

from hackportal.api.deps import get_request_context
from hackportal.api.errors import error_response, unwrap
from hackportal.core.config import get_settings
from hackportal.core.context import RequestContext
from hackportal.core.results import Err, validation_failed
from hackportal.services import resources as resource_service
from hackportal.services.resources import DocumentUpload
from hackportal_shared.schemas.resources import TeamResourceCreate, TeamResourceRead

router = APIRouter()
settings = get_settings()


@router.get("", response_model=List[TeamResourceRead])
async def list_resources_endpoint(
    team: str,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    return unwrap(await resource_service.list_team_resources(ctx, team, org_id))


@router.post("", response_model=TeamResourceRead, status_code=201)
async def create_resource_endpoint(
    resource_in: TeamResourceCreate,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Create a link, guide or other URL resource."""
    return unwrap(await resource_service.create_team_resource(ctx, resource_in, org_id))


@router.post("/upload", response_model=TeamResourceRead, status_code=201)
async def upload_document_endpoint(
    file: UploadFile = File(...),
    team: str = Form(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Store a document and record it as a team resource."""
    upload = DocumentUpload(
        filename=file.filename or "",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream",
    )
    return unwrap(
        await resource_service.upload_team_document(ctx, upload, team, title, description, org_id)
    )


@router.delete("/{resource_id}", status_code=204)
async def delete_resource_endpoint(
    resource_id: uuid.UUID,
    org_id: Optional[uuid.UUID] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    unwrap(await resource_service.delete_team_resource(ctx, resource_id, org_id))
    return Response(status_code=204)


@router.get("/{resource_id}/url")
async def document_url_endpoint(
    resource_id: str,
    storage_path: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Redirect to a signed download URL. 400 without a path, 500 if signing fails."""
    if not storage_path:
        return error_response(validation_failed("storage_path", "storage_path is required"), 400)

    result = await resource_service.get_document_url(ctx, storage_path, settings.signed_url_expires_in)
    if isinstance(result, Err):
        return error_response(result, 500)
    return RedirectResponse(result.data, status_code=307)
