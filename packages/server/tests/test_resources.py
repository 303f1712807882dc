"""
Tests for team resources and document storage.

Tests cover:
- Link resources and their validation
- Document upload, including cleanup when the metadata insert fails
- Resource deletion with a failing object store
- Signed download URLs
- The orphan purge job
"""

from __future__ import annotations

import dataclasses
import re

import httpx
import pytest
from sqlmodel import select

from hackportal.core.results import Err, Ok
from hackportal.core.storage import SupabaseStorage
from hackportal.models.storage_orphan import StorageOrphan
from hackportal.models.team_resource import TeamResource
from hackportal.services import resources as resource_service
from hackportal.services.resources import DocumentUpload, build_storage_path
from hackportal.tasks.storage_orphans import purge_orphans
from hackportal_shared.schemas.common import ErrorKind, ResourceType
from hackportal_shared.schemas.resources import TeamResourceCreate


def _upload(name="Venue Contract (final).pdf", content=b"%PDF-1.7 contract"):
    return DocumentUpload(filename=name, content=content, content_type="application/pdf")


async def _orphans(session):
    result = await session.execute(select(StorageOrphan))
    return result.scalars().all()


async def _resources(session):
    result = await session.execute(select(TeamResource))
    return result.scalars().all()


def _fail_commit_once(monkeypatch, session, message="insert failed"):
    real_commit = session.commit
    calls = []

    async def flaky_commit():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError(message)
        await real_commit()

    monkeypatch.setattr(session, "commit", flaky_commit)


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


class TestLinkResources:
    async def test_create_and_list_by_team(self, seed, make_ctx, cache):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await resource_service.create_team_resource(
            ctx,
            TeamResourceCreate(team="tech", title=" Wifi guide ", url="https://wiki.example.com/wifi", resource_type="guide"),
        )
        assert isinstance(result, Ok)
        assert result.data.title == "Wifi guide"
        assert result.data.resource_type == ResourceType.GUIDE
        assert cache.paths == ["/team/tech"]

        tech = await resource_service.list_team_resources(ctx, "tech")
        logistics = await resource_service.list_team_resources(ctx, "logistics")
        assert [r.id for r in tech.data] == [result.data.id]
        assert logistics.data == []

    async def test_url_is_required(self, seed, make_ctx):
        result = await resource_service.create_team_resource(
            make_ctx(seed.alice, seed.org_a), TeamResourceCreate(team="tech", title="Empty", url=" ")
        )
        assert result == Err(ErrorKind.VALIDATION_FAILED, "URL is required", field="url")

    async def test_documents_need_an_upload(self, seed, make_ctx):
        result = await resource_service.create_team_resource(
            make_ctx(seed.alice, seed.org_a),
            TeamResourceCreate(team="tech", title="Doc", url="https://x", resource_type="document"),
        )
        assert result.message == "Documents must be uploaded as files"

    @pytest.mark.parametrize(
        "fields, message",
        [
            ({"team": "catering"}, "Invalid team"),
            ({"resource_type": "video"}, "Invalid resource type"),
            ({"title": ""}, "Title is required"),
        ],
    )
    async def test_invalid_fields(self, seed, make_ctx, fields, message):
        body = {"team": "tech", "title": "Thing", "url": "https://x", **fields}
        result = await resource_service.create_team_resource(
            make_ctx(seed.alice, seed.org_a), TeamResourceCreate(**body)
        )
        assert result.message == message

    async def test_list_other_tenant_is_rejected(self, seed, make_ctx):
        result = await resource_service.list_team_resources(make_ctx(seed.carol), "tech", seed.org_a)
        assert result.kind == ErrorKind.NOT_A_MEMBER


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestDocumentUpload:
    def test_storage_path_is_sanitized(self, seed):
        path = build_storage_path(seed.org_a, "tech", "My File (v2)#.pdf")
        assert re.fullmatch(rf"{seed.org_a}/tech/\d{{13}}-My_File__v2__.pdf", path)

    async def test_upload_stores_object_and_row(self, seed, make_ctx, storage, session, cache):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await resource_service.upload_team_document(ctx, _upload(), "logistics", "Venue contract")

        assert isinstance(result, Ok)
        resource = result.data
        assert resource.resource_type == ResourceType.DOCUMENT
        assert resource.storage_path.startswith(f"{seed.org_a}/logistics/")
        assert resource.storage_path in storage.objects
        assert resource.file_name == "Venue Contract (final).pdf"
        assert resource.file_size == len(b"%PDF-1.7 contract")
        assert resource.file_type == "application/pdf"
        assert resource.url.startswith(f"/api/v1/team-resources/{resource.id}/url?storage_path=")
        assert cache.paths == ["/team/logistics"]

    async def test_file_is_required(self, seed, make_ctx, storage):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await resource_service.upload_team_document(ctx, None, "tech", "Nothing")
        assert result == Err(ErrorKind.VALIDATION_FAILED, "File is required", field="file")
        assert storage.objects == {}

    async def test_empty_file_is_accepted(self, seed, make_ctx, storage):
        ctx = make_ctx(seed.alice, seed.org_a)
        result = await resource_service.upload_team_document(ctx, _upload(name="empty.txt", content=b""), "tech", "Placeholder")
        assert isinstance(result, Ok)
        assert result.data.file_size == 0
        assert storage.objects[result.data.storage_path] == b""

    async def test_upload_failure_writes_no_row(self, seed, make_ctx, storage, session):
        storage.fail_upload = True
        result = await resource_service.upload_team_document(
            make_ctx(seed.alice, seed.org_a), _upload(), "tech", "Broken"
        )
        assert result == Err(ErrorKind.BACKEND, "Failed to upload file: upload rejected")
        assert await _resources(session) == []

    async def test_failed_insert_removes_uploaded_object(self, seed, make_ctx, storage, session, monkeypatch):
        ctx = make_ctx(seed.alice, seed.org_a)
        _fail_commit_once(monkeypatch, session)

        result = await resource_service.upload_team_document(ctx, _upload(), "tech", "Contract")

        assert result == Err(ErrorKind.BACKEND, "Failed to create resource: insert failed")
        assert storage.objects == {}
        assert len(storage.removed) == 1
        assert await _resources(session) == []
        assert await _orphans(session) == []

    async def test_failed_insert_and_failed_cleanup_records_orphan(
        self, seed, make_ctx, storage, session, monkeypatch
    ):
        ctx = make_ctx(seed.alice, seed.org_a)
        _fail_commit_once(monkeypatch, session)
        storage.fail_remove = True

        result = await resource_service.upload_team_document(ctx, _upload(), "tech", "Contract")

        assert result.kind == ErrorKind.BACKEND
        [path] = storage.objects
        [orphan] = await _orphans(session)
        assert orphan.storage_path == path
        assert orphan.org_id == seed.org_a
        assert orphan.reason == "upload_compensation"
        assert orphan.last_error == "remove rejected"
        assert await _resources(session) == []


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDeleteResource:
    async def test_delete_document_removes_object(self, seed, make_ctx, storage, session):
        ctx = make_ctx(seed.alice, seed.org_a)
        resource = (await resource_service.upload_team_document(ctx, _upload(), "tech", "Doc")).data

        assert await resource_service.delete_team_resource(ctx, resource.id) == Ok(None)
        assert storage.objects == {}
        assert await _resources(session) == []

    async def test_delete_with_storage_failure_keeps_orphan(self, seed, make_ctx, storage, session):
        ctx = make_ctx(seed.alice, seed.org_a)
        resource = (await resource_service.upload_team_document(ctx, _upload(), "tech", "Doc")).data
        storage.fail_remove = True

        assert await resource_service.delete_team_resource(ctx, resource.id) == Ok(None)
        assert await _resources(session) == []
        [orphan] = await _orphans(session)
        assert orphan.storage_path == resource.storage_path
        assert orphan.reason == "resource_delete"

    async def test_delete_link_does_not_touch_storage(self, seed, make_ctx, storage):
        ctx = make_ctx(seed.alice, seed.org_a)
        link = (await resource_service.create_team_resource(
            ctx, TeamResourceCreate(team="outreach", title="Flyer", url="https://x")
        )).data
        assert await resource_service.delete_team_resource(ctx, link.id) == Ok(None)
        assert storage.removed == []

    async def test_delete_other_tenant(self, seed, make_ctx):
        ctx = make_ctx(seed.alice, seed.org_a)
        resource = (await resource_service.upload_team_document(ctx, _upload(), "tech", "Doc")).data
        result = await resource_service.delete_team_resource(make_ctx(seed.carol, seed.org_b), resource.id)
        assert result == Err(ErrorKind.NOT_FOUND, "Resource not found")


# ---------------------------------------------------------------------------
# Signed URLs
# ---------------------------------------------------------------------------


class TestDocumentUrl:
    async def test_member_gets_signed_url(self, seed, make_ctx):
        path = f"{seed.org_a}/tech/1700000000000-a.pdf"
        result = await resource_service.get_document_url(make_ctx(seed.bob), path)
        assert result == Ok(f"https://storage.test/signed/{path}?expires_in=3600")

    async def test_requires_authentication(self, seed, make_ctx):
        result = await resource_service.get_document_url(make_ctx(None), f"{seed.org_a}/tech/a.pdf")
        assert result.kind == ErrorKind.AUTH_REQUIRED

    async def test_other_tenant_is_rejected(self, seed, make_ctx):
        result = await resource_service.get_document_url(make_ctx(seed.carol), f"{seed.org_a}/tech/a.pdf")
        assert result.kind == ErrorKind.NOT_A_MEMBER

    async def test_path_without_org_prefix(self, seed, make_ctx):
        result = await resource_service.get_document_url(make_ctx(seed.alice), "tech/a.pdf")
        assert result == Err(ErrorKind.NOT_FOUND, "Document not found")

    @pytest.mark.parametrize(
        "suffix",
        ["../{other}/tech/1-secret.pdf", "./tech/a.pdf", "tech//a.pdf", "", "tech/../../{other}/a.pdf"],
    )
    async def test_dot_and_empty_segments_are_rejected(self, seed, make_ctx, storage, suffix):
        path = f"{seed.org_a}/" + suffix.format(other=seed.org_b)
        storage.fail_sign = True
        result = await resource_service.get_document_url(make_ctx(seed.alice), path)
        assert result == Err(ErrorKind.NOT_FOUND, "Document not found")

    async def test_traversal_never_reaches_storage_api(self, seed, make_ctx):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"signedURL": "/object/sign/x?token=t"})

        storage = SupabaseStorage(
            httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            "https://proj.supabase.test", "service-key", "team-documents",
        )
        ctx = dataclasses.replace(make_ctx(seed.alice), storage=storage)

        result = await resource_service.get_document_url(ctx, f"{seed.org_a}/../{seed.org_b}/tech/1-secret.pdf")
        assert result.kind == ErrorKind.NOT_FOUND
        assert requests == []

    async def test_signing_failure(self, seed, make_ctx, storage):
        storage.fail_sign = True
        result = await resource_service.get_document_url(make_ctx(seed.alice), f"{seed.org_a}/tech/a.pdf")
        assert result == Err(ErrorKind.BACKEND, "Object not found")


# ---------------------------------------------------------------------------
# Orphan purge
# ---------------------------------------------------------------------------


class TestPurgeOrphans:
    async def test_purge_removes_and_retries(self, seed, storage, session):
        storage.objects["a/x"] = b"1"
        session.add_all([
            StorageOrphan(org_id=seed.org_a, storage_path="a/x", reason="resource_delete"),
            StorageOrphan(org_id=seed.org_a, storage_path="a/y", reason="upload_compensation"),
        ])
        await session.commit()

        assert await purge_orphans(session, storage) == 2
        await session.commit()
        assert await _orphans(session) == []
        assert sorted(storage.removed) == ["a/x", "a/y"]

    async def test_failed_purge_counts_attempts(self, seed, storage, session):
        session.add(StorageOrphan(org_id=seed.org_a, storage_path="a/z", reason="resource_delete"))
        await session.commit()
        storage.fail_remove = True

        assert await purge_orphans(session, storage) == 0
        await session.commit()
        [orphan] = await _orphans(session)
        assert orphan.attempts == 1
        assert orphan.last_error == "remove rejected"
