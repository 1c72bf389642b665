"""Places router for cached review summaries."""

import logging

from fastapi import APIRouter, status

from placesum.presentation.api.dependencies import PlaceService
from placesum.presentation.api.schemas import (
    ErrorResponse,
    PlaceSummaryRequest,
    PlaceSummaryResponseSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/summary",
    response_model=PlaceSummaryResponseSchema,
    status_code=status.HTTP_200_OK,
    summary="Get a review summary for a place",
    responses={
        500: {"model": ErrorResponse, "description": "Unexpected server error"},
    },
)
async def get_place_summary(
    request: PlaceSummaryRequest,
    service: PlaceService,
) -> PlaceSummaryResponseSchema:
    """
    Return the AI review summary for a place.

    Every outcome is a 200: the ``status`` field tells how fresh the data
    is (``cached``, ``fresh``, ``stale``, ``degraded`` or ``minimal``).
    Stale responses trigger a background refresh.
    """
    response = await service.fetch_summary(request.place_name)
    logger.debug(
        "Summary for '%s' served as %s",
        request.place_name,
        response.status.value,
    )
    return PlaceSummaryResponseSchema.from_dto(response)
