"""FastAPI API endpoints under /api.

Endpoint groups: health, story validation, and play sessions
(/api/sessions/{session_id}/choose, /finish).
"""

from fastapi import APIRouter

from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(sessions_router)
