"""
API v1 Router

Tenant-scoped endpoints resolve the organization from the ``org_id`` query
parameter or the selected-organization cookie.
"""

from fastapi import APIRouter

from . import organizations, people, resources, tasks

router = APIRouter()

router.include_router(organizations.router, prefix="/orgs", tags=["Organizations"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(people.router, prefix="/people", tags=["People"])
router.include_router(resources.router, prefix="/team-resources", tags=["Team Resources"])


@router.get("/", tags=["API"])
async def api_root():
    """API root - returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/orgs",
            "/orgs/current",
            "/orgs/select",
            "/orgs/members",
            "/tasks",
            "/people",
            "/team-resources",
        ],
    }
