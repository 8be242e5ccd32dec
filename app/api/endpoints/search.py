"""Place search proxy endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from app.core.errors import ValidationError
from app.schemas.search import PlaceSearchRequest
from app.services.place_search import KakaoPlaceSearch, get_place_search

router = APIRouter(tags=["search"])


@router.post("/search-place")
async def search_place(
    payload: PlaceSearchRequest,
    search: KakaoPlaceSearch = Depends(get_place_search),
) -> dict[str, Any]:
    """Forward a keyword search to Kakao and return its JSON unchanged."""
    if not payload.query.strip():
        raise ValidationError("Query parameter is required")
    return await search.search(payload.query, payload.lat, payload.lng)
