"""
FastAPI dependencies that assemble the per-request ``RequestContext``.
"""

from __future__ import annotations

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hackportal.core.auth import get_session_user
from hackportal.core.cache import RouteCache
from hackportal.core.config import get_settings
from hackportal.core.context import CookieOrgSelectionStore, RequestContext
from hackportal.core.database import get_session, set_rls_user
from hackportal.core.redis import get_route_cache
from hackportal.core.storage import ObjectStorage, get_storage

settings = get_settings()


async def get_request_context(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
    cache: RouteCache = Depends(get_route_cache),
    storage: ObjectStorage = Depends(get_storage),
) -> RequestContext:
    """Identity, selection store and backends for one request."""
    user = get_session_user(request)
    set_rls_user(session, user.id if user else None)

    return RequestContext(
        session=session,
        user=user,
        selection=CookieOrgSelectionStore(request, response, settings.org_cookie_name),
        cache=cache,
        storage=storage,
    )
