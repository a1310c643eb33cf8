"""
API v1 package.

Contains versioned API routes for the membership API.
"""

from fastapi import APIRouter

from src.api.v1.admin import router as admin_router
from src.api.v1.members import router as members_router

router = APIRouter()
router.include_router(members_router)
router.include_router(admin_router)

__all__ = ["router"]
