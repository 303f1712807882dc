"""
Object storage for team documents.

Talks to the hosted storage REST API with the service-role key. Access control
happens in the service layer before any call reaches this module.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx
import structlog

from hackportal.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()


class StorageError(Exception):
    """An object-storage call failed."""


class ObjectStorage(Protocol):
    async def upload(
        self, path: str, content: bytes, *, content_type: str, upsert: bool = False
    ) -> None: ...

    async def remove(self, paths: list[str]) -> None: ...

    async def create_signed_url(self, path: str, expires_in: int) -> str: ...


class SupabaseStorage:
    """Bucket-scoped client for the hosted storage API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, service_key: str, bucket: str):
        self._client = client
        self._base_url = base_url.rstrip("/") + "/storage/v1"
        self._bucket = bucket
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }

    def _object_url(self, *parts: str) -> str:
        return "/".join([self._base_url, "object", *parts])

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(
                method, url, headers={**self._headers, **kwargs.pop("headers", {})}, **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(_error_message(exc.response)) from exc
        except httpx.HTTPError as exc:
            raise StorageError(str(exc) or exc.__class__.__name__) from exc
        return response

    async def upload(
        self, path: str, content: bytes, *, content_type: str, upsert: bool = False
    ) -> None:
        await self._send(
            "POST",
            self._object_url(self._bucket, quote(path)),
            content=content,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "cache-control": "max-age=3600",
                "x-upsert": "true" if upsert else "false",
            },
        )
        log.info("storage.uploaded", bucket=self._bucket, path=path, size=len(content))

    async def remove(self, paths: list[str]) -> None:
        await self._send(
            "DELETE",
            self._object_url(self._bucket),
            json={"prefixes": paths},
        )
        log.info("storage.removed", bucket=self._bucket, paths=paths)

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        response = await self._send(
            "POST",
            self._object_url("sign", self._bucket, quote(path)),
            json={"expiresIn": expires_in},
        )
        signed = response.json().get("signedURL")
        if not signed:
            raise StorageError("Storage did not return a signed URL")
        return f"{self._base_url}{signed}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Storage request failed with status {response.status_code}"
    return body.get("message") or body.get("error") or f"Storage request failed with status {response.status_code}"


_http_client: httpx.AsyncClient | None = None


async def get_storage() -> SupabaseStorage:
    """Get the storage client, creating the shared HTTP client on first use."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
    return SupabaseStorage(
        _http_client,
        settings.supabase_url,
        settings.supabase_service_role_key,
        settings.storage_bucket,
    )


async def close_storage() -> None:
    """Close the shared HTTP client."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
