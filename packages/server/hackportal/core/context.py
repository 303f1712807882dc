"""
Request-scoped context passed explicitly to every service call.

The "selected organization" lives behind ``OrgSelectionStore`` so services
never touch cookies directly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request
from starlette.responses import Response

from hackportal.core.cache import RouteCache
from hackportal.core.storage import ObjectStorage


@dataclass(frozen=True)
class SessionUser:
    """The authenticated caller, as reported by the identity provider."""
    id: uuid.UUID
    email: str


class OrgSelectionStore(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, org_id: str) -> None: ...

    def clear(self) -> None: ...


class CookieOrgSelectionStore:
    """Selection persisted in a secure, http-only, same-site cookie."""

    def __init__(self, request: Request, response: Response, cookie_name: str):
        self._request = request
        self._response = response
        self._cookie_name = cookie_name
        self._value: Optional[str] = request.cookies.get(cookie_name)

    def get(self) -> Optional[str]:
        return self._value or None

    def set(self, org_id: str) -> None:
        self._value = org_id
        self._response.set_cookie(
            self._cookie_name,
            org_id,
            httponly=True,
            secure=True,
            samesite="lax",
            path="/",
        )

    def clear(self) -> None:
        self._value = None
        self._response.delete_cookie(self._cookie_name, path="/")


class InMemoryOrgSelectionStore:
    """Selection held for the lifetime of the object (jobs, scripts, tests)."""

    def __init__(self, org_id: Optional[str] = None):
        self._value = org_id

    def get(self) -> Optional[str]:
        return self._value

    def set(self, org_id: str) -> None:
        self._value = org_id

    def clear(self) -> None:
        self._value = None


@dataclass
class RequestContext:
    session: AsyncSession
    user: Optional[SessionUser]
    selection: OrgSelectionStore
    cache: RouteCache
    storage: ObjectStorage
