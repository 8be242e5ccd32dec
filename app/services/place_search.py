"""Kakao keyword search proxy and nearest-candidate selection."""

from __future__ import annotations

import logging
import asyncio
from collections.abc import Iterable
from math import asin, cos, radians, sin, sqrt
from typing import Any

import aiohttp

from app.core.config import settings
from app.core.errors import UpstreamError
from app.schemas.search import PlaceCandidate, PlaceMatch

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
KAKAO_TIMEOUT_SECONDS = 10

# 지도 기본 중심 (세종시)
DEFAULT_CENTER = (36.4800, 127.2890)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS84 points in kilometres."""
    rlat1, rlng1 = radians(lat1), radians(lng1)
    rlat2, rlng2 = radians(lat2), radians(lng2)
    dlat = rlat2 - rlat1
    dlng = rlng2 - rlng1
    a = sin(dlat / 2) ** 2 + cos(rlat1) * cos(rlat2) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * asin(sqrt(a))


def pick_nearest(
    documents: Iterable[dict[str, Any] | PlaceCandidate],
    lat: float,
    lng: float,
) -> tuple[PlaceCandidate, float] | None:
    """Return the candidate closest to (lat, lng) with its distance.

    Ties go to the earliest candidate. ``None`` when there are no candidates.
    """
    best: tuple[PlaceCandidate, float] | None = None
    for doc in documents:
        candidate = doc if isinstance(doc, PlaceCandidate) else PlaceCandidate.model_validate(doc)
        distance = haversine_km(lat, lng, candidate.y, candidate.x)
        if best is None or distance < best[1]:
            best = (candidate, distance)
    return best


def category_label(category_name: str) -> str | None:
    """Last segment of a Kakao category path (``"음식점 > 한식 > 국밥"`` -> ``"국밥"``)."""
    label = category_name.split(">")[-1].strip()
    return label or None


def to_match(candidate: PlaceCandidate, distance_km: float) -> PlaceMatch:
    """Reduce a search candidate to the fields the restaurant form uses."""
    return PlaceMatch(
        place_name=candidate.place_name,
        address=candidate.road_address_name or candidate.address_name,
        lat=candidate.y,
        lng=candidate.x,
        phone=candidate.phone,
        kakao_place_id=candidate.id,
        category=category_label(candidate.category_name),
        distance_km=distance_km,
    )


def best_match(
    documents: Iterable[dict[str, Any] | PlaceCandidate],
    lat: float,
    lng: float,
) -> PlaceMatch | None:
    nearest = pick_nearest(documents, lat, lng)
    if nearest is None:
        return None
    return to_match(*nearest)


class KakaoPlaceSearch:
    """Thin async client for the Kakao local keyword search API."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        timeout: float = KAKAO_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url or settings.kakao_search_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def search(self, query: str, lat: float | None = None, lng: float | None = None) -> dict[str, Any]:
        """Run a keyword search and return the raw response JSON."""
        if not self.api_key:
            raise UpstreamError(
                "Kakao API key not configured",
                "KAKAO_API_KEY environment variable is missing",
            )

        params = {"query": query}
        if lat is not None and lng is not None:
            # 기준 좌표를 넘기면 응답에 distance 필드가 포함된다
            params["x"] = str(lng)
            params["y"] = str(lat)
        headers = {"Authorization": f"KakaoAK {self.api_key}"}

        logger.info("Calling Kakao API with query: %s", query)
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.base_url, params=params, headers=headers) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        logger.warning("Kakao API error %s: %s", resp.status, body)
                        raise UpstreamError(
                            "Failed to search place",
                            f"Kakao API error: {resp.status} - {body}",
                        )
                    data = await resp.json()
        except aiohttp.ClientError as exc:
            logger.error("Kakao API request failed: %s", exc)
            raise UpstreamError("Failed to search place", str(exc)) from exc
        except asyncio.TimeoutError as exc:
            logger.error("Kakao API request timed out after %ss", self.timeout.total)
            raise UpstreamError(
                "Failed to search place",
                f"Kakao API timed out after {self.timeout.total}s",
            ) from exc

        logger.info("Kakao API success, documents count: %d", len(data.get("documents") or []))
        return data


def get_place_search() -> KakaoPlaceSearch:
    """FastAPI dependency returning the configured search client."""
    return KakaoPlaceSearch(settings.kakao_api_key)
