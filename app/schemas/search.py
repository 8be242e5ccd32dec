"""Schemas for place search."""

from typing import Optional

from pydantic import BaseModel, Field


class PlaceSearchRequest(BaseModel):
    query: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None


class PlaceCandidate(BaseModel):
    """One document of the Kakao keyword search response.

    Kakao returns coordinates as strings: ``x`` is longitude, ``y`` latitude.
    """

    id: Optional[str] = None
    place_name: str
    address_name: str = ""
    road_address_name: str = ""
    category_name: str = ""
    phone: str = ""
    x: float
    y: float

    model_config = {"extra": "ignore"}


class PlaceMatch(BaseModel):
    """Best candidate reduced to what the add/edit form needs."""

    place_name: str
    address: str
    lat: float
    lng: float
    phone: str = ""
    kakao_place_id: Optional[str] = None
    category: Optional[str] = None
    distance_km: float = Field(..., ge=0)
