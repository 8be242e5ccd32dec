"""Pydantic schemas for restaurant reviews and place groups."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_RATING = 1.0
MAX_RATING = 5.0


def _check_rating(value: float) -> float:
    # 1.0, 1.5, ..., 5.0 만 허용
    if not MIN_RATING <= value <= MAX_RATING or (value * 2) != int(value * 2):
        raise ValueError("rating must be one of 1.0, 1.5, ..., 5.0")
    return value


class BoundingBox(BaseModel):
    """Normalized map rectangle."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def from_corners(cls, lat1: float, lng1: float, lat2: float, lng2: float) -> "BoundingBox":
        """Build a box from two opposite corners given in any order."""
        return cls(
            min_lat=min(lat1, lat2),
            max_lat=max(lat1, lat2),
            min_lng=min(lng1, lng2),
            max_lng=max(lng1, lng2),
        )

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def to_param(self) -> str:
        """Render as the ``bounds`` query parameter."""
        return f"{self.min_lat},{self.min_lng},{self.max_lat},{self.max_lng}"


class RestaurantFields(BaseModel):
    """Fields shared by create and update requests."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    lat: float
    lng: float
    rating: float
    review: Optional[str] = None
    user_id: int = Field(..., alias="userId")
    kakao_place_id: Optional[str] = Field(None, alias="kakaoPlaceId")
    category: Optional[str] = None
    model_url: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, value: float) -> float:
        return _check_rating(value)


class RestaurantCreate(RestaurantFields):
    pass


class RestaurantUpdate(RestaurantFields):
    pass


class RestaurantOut(BaseModel):
    """A single review row as stored."""

    id: int
    name: str
    address: str
    lat: float
    lng: float
    rating: float
    review: Optional[str] = None
    user_id: int
    kakao_place_id: Optional[str] = None
    category: Optional[str] = None
    model_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewOut(RestaurantOut):
    """Group member annotated with the author's nickname."""

    nickname: Optional[str] = None


class PlaceGroup(BaseModel):
    """Reviews believed to refer to the same physical place."""

    group_key: str
    kakao_place_id: Optional[str] = None
    name: str
    address: str
    lat: float
    lng: float
    avg_rating: float
    review_count: int = Field(..., ge=1)
    latest_update: datetime
    category: Optional[str] = None
    reviews: list[ReviewOut]


class RestaurantCreated(BaseModel):
    id: int
    success: bool = True


class SuccessResponse(BaseModel):
    success: bool = True
