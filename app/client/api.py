"""Async client for the Matzip HTTP API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from app.schemas.restaurant import BoundingBox, PlaceGroup, RestaurantOut
from app.schemas.search import PlaceMatch
from app.services.place_search import DEFAULT_CENTER, best_match

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Non-2xx response or transport failure."""

    def __init__(self, status: int, error: str, details: str | None = None) -> None:
        super().__init__(f"{status}: {error}" + (f" ({details})" if details else ""))
        self.status = status
        self.error = error
        self.details = details


def to_api_error(exc: Exception) -> ApiError:
    """Normalize a client-side failure to ``ApiError``."""
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, asyncio.TimeoutError):
        return ApiError(0, "Request timed out", str(exc) or None)
    if isinstance(exc, ValidationError):
        return ApiError(0, "Invalid response", str(exc))
    return ApiError(0, "Network error", str(exc))


class MatzipClient:
    """Calls the restaurant, user and search endpoints.

    Pass an existing ``aiohttp.ClientSession`` to reuse connections; the
    client never closes a session it did not create.
    """

    def __init__(
        self,
        base_url: str = "",
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "MatzipClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            async with self._get_session().request(method, url, **kwargs) as resp:
                if resp.status >= 400:
                    try:
                        body = await resp.json()
                    except (aiohttp.ContentTypeError, ValueError):
                        body = {"error": await resp.text()}
                    raise ApiError(resp.status, body.get("error", "Request failed"), body.get("details"))
                return await resp.json()
        except aiohttp.ClientError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(0, "Network error", str(exc)) from exc
        except asyncio.TimeoutError as exc:
            logger.error("%s %s timed out", method, url)
            raise to_api_error(exc) from exc

    @staticmethod
    def _parse(model, items: list[Any]) -> list[Any]:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as exc:
            logger.error("Unexpected %s payload: %s", model.__name__, exc)
            raise to_api_error(exc) from exc

    # ── Restaurants ─────────────────────────────────────────────────────

    async def fetch_groups(self, bounds: Optional[BoundingBox] = None) -> list[PlaceGroup]:
        """Aggregated places, optionally limited to ``bounds``."""
        params = {"aggregated": "true"}
        if bounds is not None:
            params["bounds"] = bounds.to_param()
        data = await self._request("GET", "/api/restaurants", params=params)
        return self._parse(PlaceGroup, data)

    async def fetch_my_restaurants(self, user_id: int) -> list[RestaurantOut]:
        data = await self._request("GET", "/api/restaurants", params={"userId": str(user_id)})
        return self._parse(RestaurantOut, data)

    async def create_restaurant(self, user_id: int, **fields: Any) -> int:
        body = {**fields, "userId": user_id}
        data = await self._request("POST", "/api/restaurants", json=body)
        return data["id"]

    async def update_restaurant(self, restaurant_id: int, user_id: int, **fields: Any) -> None:
        body = {**fields, "userId": user_id}
        await self._request("PUT", f"/api/restaurants/{restaurant_id}", json=body)

    async def delete_restaurant(self, restaurant_id: int, user_id: int) -> None:
        await self._request("DELETE", f"/api/restaurants/{restaurant_id}/{user_id}")

    # ── Users ───────────────────────────────────────────────────────────

    async def register(self, nickname: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/api/users/register", json={"nickname": nickname, "password": password}
        )

    async def login(self, nickname: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/api/users/login", json={"nickname": nickname, "password": password}
        )

    # ── Search ──────────────────────────────────────────────────────────

    async def search_place(self, query: str, lat: float | None = None, lng: float | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"query": query}
        if lat is not None and lng is not None:
            body.update(lat=lat, lng=lng)
        return await self._request("POST", "/api/search-place", json=body)

    async def find_place(
        self,
        keyword: str,
        reference: tuple[float, float] | None = None,
        region_hint: str | None = None,
    ) -> PlaceMatch | None:
        """Search ``keyword`` and pick the result nearest to ``reference``.

        ``reference`` defaults to the map's default center. Returns ``None``
        when the search has no results.
        """
        lat, lng = reference or DEFAULT_CENTER
        query = f"{keyword} {region_hint}" if region_hint else keyword
        data = await self.search_place(query, lat, lng)
        return best_match(data.get("documents") or [], lat, lng)
