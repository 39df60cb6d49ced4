"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.auth import router as auth_router
from api.v1.complaints import router as complaints_router
from api.v1.feedback import router as feedback_router
from api.v1.locations import router as locations_router
from api.v1.notifications import router as notifications_router
from api.v1.stats import router as stats_router

router = APIRouter()

router.include_router(auth_router, prefix="/user", tags=["Authentication"])
# Feedback routes span /complaint/{id}/feedback and /feedback/...
router.include_router(feedback_router, tags=["Feedback"])
router.include_router(complaints_router, prefix="/complaint", tags=["Complaints"])
router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
router.include_router(stats_router, prefix="/stats", tags=["Statistics"])
router.include_router(locations_router)
