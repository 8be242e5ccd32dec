"""Incremental map data loading.

Only panning at the minimum zoom level fetches more data: the unbounded
startup load already covers every closer zoom. Pans are debounced, at most
one request is in flight, and results are merged additively by group key.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from pydantic import ValidationError

from app.client.api import ApiError, to_api_error
from app.client.state import AppState
from app.schemas.restaurant import BoundingBox, PlaceGroup

logger = logging.getLogger(__name__)

DEFAULT_MIN_ZOOM = 13
DEBOUNCE_SECONDS = 0.5

# fetch_groups 가 MatzipClient 가 아닐 수도 있으므로 함께 잡는다
LOAD_ERRORS = (ApiError, asyncio.TimeoutError, ValidationError)

FetchGroups = Callable[[Optional[BoundingBox]], Awaitable[list[PlaceGroup]]]


class MapDataLoader:
    """Reacts to map view-settled events and keeps ``state.places`` filled."""

    def __init__(
        self,
        fetch_groups: FetchGroups,
        state: AppState | None = None,
        *,
        min_zoom: int = DEFAULT_MIN_ZOOM,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        on_error: Callable[[ApiError], None] | None = None,
    ) -> None:
        self.fetch_groups = fetch_groups
        self.state = state if state is not None else AppState(zoom=min_zoom)
        self.min_zoom = min_zoom
        self.debounce_seconds = debounce_seconds
        self.on_error = on_error
        self.in_flight = False
        self._pending: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    async def load_initial(self) -> None:
        """Unbounded aggregated load done once at startup."""
        try:
            groups = await self.fetch_groups(None)
        except LOAD_ERRORS as exc:
            self._report(to_api_error(exc))
            return
        self.state.replace_places(groups)
        logger.info("Loaded %d places", len(groups))

    def on_view_settled(self, bounds: BoundingBox, zoom: int) -> None:
        """Handle the end of a pan or zoom gesture."""
        if self.in_flight:
            return
        if zoom != self.state.zoom:
            self.state.zoom = zoom
            self._cancel_pending()
            return
        if zoom != self.min_zoom:
            return

        self._cancel_pending()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.debounce_seconds, self._fire, bounds)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, bounds: BoundingBox) -> None:
        self._pending = None
        # 태스크가 처음 실행되기 전에 들어온 이벤트도 막아야 한다
        self.in_flight = True
        self._task = asyncio.ensure_future(self._fetch_bounded(bounds))

    async def _fetch_bounded(self, bounds: BoundingBox) -> None:
        try:
            groups = await self.fetch_groups(bounds)
        except LOAD_ERRORS as exc:
            self._report(to_api_error(exc))
            return
        finally:
            self.in_flight = False
        added = self.state.merge_places(groups)
        logger.debug("Bounded load %s added %d places", bounds.to_param(), len(added))

    def _report(self, exc: ApiError) -> None:
        logger.error("Failed to load restaurants: %s", exc)
        if self.on_error is not None:
            self.on_error(exc)

    async def wait_idle(self) -> None:
        """Wait until no fetch is scheduled or running."""
        while self._pending is not None or (self._task is not None and not self._task.done()):
            if self._task is not None and not self._task.done():
                await self._task
            else:
                await asyncio.sleep(self.debounce_seconds / 4 or 0.01)
