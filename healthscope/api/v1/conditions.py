"""Condition lookup endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query

from healthscope.core.dependencies import get_conditions_service
from healthscope.schemas.common import ErrorResponse
from healthscope.schemas.condition import (
    BodyImpact,
    ConditionDetails,
    GeoEstimate,
    SearchResult,
)
from healthscope.services.conditions_service import ConditionsService

router = APIRouter(prefix="/conditions", tags=["conditions"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed id, country or query"}
}


@router.get("/search", response_model=List[SearchResult], responses=ERROR_RESPONSES)
async def search_conditions(
    q: str = Query("", description="Free-text condition name, at least 2 characters"),
    service: ConditionsService = Depends(get_conditions_service),
):
    """Search conditions by name."""
    return await service.search(q)


@router.get(
    "/{condition_id}", response_model=ConditionDetails, responses=ERROR_RESPONSES
)
async def get_condition(
    condition_id: str,
    service: ConditionsService = Depends(get_conditions_service),
):
    """
    Merged condition record: overview, symptom and risk-factor lists with
    agreement scores, prevention, body systems, indicators and sources.
    """
    return await service.get_condition(condition_id)


@router.get(
    "/{condition_id}/body", response_model=BodyImpact, responses=ERROR_RESPONSES
)
async def get_body_impact(
    condition_id: str,
    service: ConditionsService = Depends(get_conditions_service),
):
    """Body systems affected by a condition."""
    return await service.get_body_impact(condition_id)


@router.get(
    "/{condition_id}/geo", response_model=GeoEstimate, responses=ERROR_RESPONSES
)
async def get_geo(
    condition_id: str,
    country: str = Query("", description="ISO 3166-1 alpha-2 country code"),
    service: ConditionsService = Depends(get_conditions_service),
):
    """Prevalence estimate for a condition in one country."""
    return await service.get_geo(condition_id, country)
