"""
API v1 routes.
"""

from fastapi import APIRouter

from forum_trust.api.v1 import admin, audit, discussions, moderation, reports, users

router = APIRouter()

router.include_router(moderation.router, prefix="/moderation", tags=["Moderation"])
router.include_router(discussions.router, tags=["Discussion Controls"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(audit.router, prefix="/audit", tags=["Audit"])
router.include_router(admin.router, tags=["Admin"])
