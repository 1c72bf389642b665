"""Place summary request/response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from placesum.application.dtos import PlaceSummaryResponse
from placesum.domain.places.value_objects import PlaceSummary


class PlaceSummaryRequest(BaseModel):
    """Request body for a place summary lookup."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={"example": {"place_name": "스타벅스 강남점"}},
    )

    place_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Place name as typed by the user",
    )


class PlaceSummaryData(BaseModel):
    """Summary of a place's reviews."""

    place_name_original: str = Field(description="First query that produced it")
    normalized_key: str = Field(description="Cache key derived from the name")
    summary: str
    pros: list[str]
    cons: list[str]
    sentiment: str = Field(description="positive, neutral or negative")
    review_count: int
    source_url: str = Field(description="Link to the place on the map service")

    @classmethod
    def from_domain(cls, summary: PlaceSummary) -> "PlaceSummaryData":
        return cls(
            place_name_original=summary.place_name_original,
            normalized_key=summary.normalized_key,
            summary=summary.summary,
            pros=list(summary.pros),
            cons=list(summary.cons),
            sentiment=summary.sentiment.value,
            review_count=summary.review_count,
            source_url=summary.source_url,
        )


class PlaceSummaryResponseSchema(BaseModel):
    """Place summary with the freshness level that produced it."""

    status: str = Field(description="cached, fresh, stale, degraded or minimal")
    data: PlaceSummaryData
    is_fresh: bool
    message: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "cached",
                "data": {
                    "place_name_original": "스타벅스 강남점",
                    "normalized_key": "강남스타벅스",
                    "summary": "넓고 쾌적한 매장으로 작업하기 좋다는 평이 많습니다.",
                    "pros": ["넓은 좌석", "친절한 직원"],
                    "cons": ["주말 혼잡"],
                    "sentiment": "positive",
                    "review_count": 120,
                    "source_url": "https://map.naver.com/p/entry/place/123",
                },
                "is_fresh": True,
            },
        },
    )

    @classmethod
    def from_dto(cls, response: PlaceSummaryResponse) -> "PlaceSummaryResponseSchema":
        return cls(
            status=response.status.value,
            data=PlaceSummaryData.from_domain(response.data),
            is_fresh=response.is_fresh,
            message=response.message,
            warning=response.warning,
            error=response.error,
        )
