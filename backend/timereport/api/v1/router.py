"""API v1 router aggregator.

All v1 endpoint routers are included here; ``create_app`` mounts this
router at /api/v1.
"""

from fastapi import APIRouter

from timereport.api.v1 import auth, projects, time_entries

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Per-user data
# =============================================================================

router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(
    time_entries.router, prefix="/time-entries", tags=["time-entries"]
)
