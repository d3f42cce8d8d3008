"""
API v1 routes aggregation.
"""

from fastapi import APIRouter
from healthscope.api.v1.conditions import router as conditions_router

router = APIRouter()

# Include sub-routers
router.include_router(conditions_router)
