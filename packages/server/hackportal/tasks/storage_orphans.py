"""
ARQ background task: retry deletion of stored objects left behind by failed
uploads or resource deletions.

Scheduled to run periodically (e.g., every hour).
"""

from __future__ import annotations

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from hackportal.core.database import get_session_context
from hackportal.core.storage import ObjectStorage, StorageError, close_storage, get_storage
from hackportal.models.storage_orphan import StorageOrphan

log = structlog.get_logger()

BATCH_SIZE = 100


async def purge_orphans(session: AsyncSession, storage: ObjectStorage, limit: int = BATCH_SIZE) -> int:
    """Delete up to ``limit`` recorded orphans. Returns how many were removed.

    Rows whose object still cannot be deleted stay, with the attempt counted.
    """
    result = await session.execute(
        select(StorageOrphan).order_by(StorageOrphan.created_at).limit(limit)
    )
    removed = 0
    for orphan in result.scalars().all():
        try:
            await storage.remove([orphan.storage_path])
        except StorageError as exc:
            orphan.attempts += 1
            orphan.last_error = str(exc)
            session.add(orphan)
            log.warning("storage_orphan.retry_failed", path=orphan.storage_path, attempts=orphan.attempts)
            continue
        await session.delete(orphan)
        removed += 1
    await session.flush()
    return removed


async def purge_storage_orphans(ctx: dict) -> int:
    async with get_session_context() as session:
        count = await purge_orphans(session, await get_storage())

    if count:
        log.info("storage_orphan.batch_purged", count=count)
    return count


async def shutdown(ctx: dict) -> None:
    await close_storage()


# ARQ worker settings
class WorkerSettings:
    """ARQ worker configuration."""

    functions = [purge_storage_orphans]
    on_shutdown = shutdown
    cron_jobs = [
        # Run every hour
        cron(purge_storage_orphans, minute=0),
    ]
