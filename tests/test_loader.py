import asyncio

from pydantic import ValidationError

from app.client.api import ApiError
from app.client.loader import MapDataLoader
from app.client.state import AppState, merge_place_groups
from app.schemas.restaurant import BoundingBox, PlaceGroup

WINDOW = 0.2
MIN_ZOOM = 13


def _group(key, name="국밥집"):
    return PlaceGroup(
        group_key=key,
        name=name,
        address="세종",
        lat=36.48,
        lng=127.29,
        avg_rating=4.0,
        review_count=1,
        latest_update="2024-01-01T00:00:00",
        reviews=[],
    )


def _validation_error():
    try:
        PlaceGroup.model_validate({"group_key": "k1"})
    except ValidationError as exc:
        return exc


def _box(offset=0.0):
    return BoundingBox.from_corners(36.4 + offset, 127.2 + offset, 36.6 + offset, 127.4 + offset)


class RecordingFetch:
    def __init__(self, responses=None, gate=None):
        self.calls = []
        self.responses = list(responses or [])
        self.gate = gate

    async def __call__(self, bounds):
        self.calls.append(bounds)
        if self.gate is not None:
            await self.gate.wait()
        if self.responses:
            result = self.responses.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return []


def _loader(fetch, **kwargs):
    return MapDataLoader(
        fetch,
        AppState(zoom=MIN_ZOOM),
        min_zoom=MIN_ZOOM,
        debounce_seconds=WINDOW,
        **kwargs,
    )


def test_merge_keeps_first_entry():
    collection = {}
    first = _group("A", name="처음")
    second = _group("A", name="나중")

    assert merge_place_groups(collection, [first]) == ["A"]
    assert merge_place_groups(collection, [second, _group("B")]) == ["B"]

    assert list(collection) == ["A", "B"]
    assert collection["A"].name == "처음"


def test_burst_of_pans_fetches_once_with_last_bounds():
    fetch = RecordingFetch()

    async def scenario():
        loader = _loader(fetch)
        for offset in (0.0, 0.01, 0.02):
            loader.on_view_settled(_box(offset), MIN_ZOOM)
            await asyncio.sleep(0.01)
        await asyncio.sleep(WINDOW * 3)
        await loader.wait_idle()

    asyncio.run(scenario())

    assert fetch.calls == [_box(0.02)]


def test_separate_pans_fetch_separately():
    fetch = RecordingFetch()

    async def scenario():
        loader = _loader(fetch)
        loader.on_view_settled(_box(0.0), MIN_ZOOM)
        await asyncio.sleep(WINDOW * 3)
        await loader.wait_idle()
        loader.on_view_settled(_box(0.5), MIN_ZOOM)
        await asyncio.sleep(WINDOW * 3)
        await loader.wait_idle()

    asyncio.run(scenario())

    assert fetch.calls == [_box(0.0), _box(0.5)]


def test_zoom_change_only_records_zoom():
    fetch = RecordingFetch()

    async def scenario():
        loader = _loader(fetch)
        loader.on_view_settled(_box(), MIN_ZOOM + 1)
        assert loader.state.zoom == MIN_ZOOM + 1
        assert not loader.has_pending
        loader.on_view_settled(_box(), MIN_ZOOM)
        assert loader.state.zoom == MIN_ZOOM
        assert not loader.has_pending
        await asyncio.sleep(WINDOW * 3)

    asyncio.run(scenario())

    assert fetch.calls == []


def test_pan_above_min_zoom_does_not_fetch():
    fetch = RecordingFetch()

    async def scenario():
        loader = MapDataLoader(
            fetch, AppState(zoom=MIN_ZOOM + 2), min_zoom=MIN_ZOOM, debounce_seconds=WINDOW
        )
        loader.on_view_settled(_box(), MIN_ZOOM + 2)
        loader.on_view_settled(_box(0.1), MIN_ZOOM + 2)
        assert not loader.has_pending
        await asyncio.sleep(WINDOW * 3)

    asyncio.run(scenario())

    assert fetch.calls == []


def test_events_ignored_while_in_flight_and_results_merged():
    async def scenario():
        gate = asyncio.Event()
        fetch = RecordingFetch(responses=[[_group("A"), _group("B")]], gate=gate)
        loader = _loader(fetch)
        loader.state.merge_places([_group("A", name="기존")])

        loader.on_view_settled(_box(0.0), MIN_ZOOM)
        await asyncio.sleep(WINDOW * 3)
        assert loader.in_flight

        loader.on_view_settled(_box(0.3), MIN_ZOOM)
        assert not loader.has_pending

        gate.set()
        await loader.wait_idle()
        return fetch, loader

    fetch, loader = asyncio.run(scenario())

    assert fetch.calls == [_box(0.0)]
    assert not loader.in_flight
    assert list(loader.state.places) == ["A", "B"]
    assert loader.state.places["A"].name == "기존"


def test_overlapping_pans_do_not_duplicate():
    async def scenario():
        fetch = RecordingFetch(responses=[[_group("A", name="첫번째")], [_group("A", name="두번째")]])
        loader = _loader(fetch)
        for offset in (0.0, 0.01):
            loader.on_view_settled(_box(offset), MIN_ZOOM)
            await asyncio.sleep(WINDOW * 3)
            await loader.wait_idle()
        return loader

    loader = asyncio.run(scenario())

    assert len(loader.state.places) == 1
    assert loader.state.places["A"].name == "첫번째"


def test_load_initial_replaces_collection():
    async def scenario():
        fetch = RecordingFetch(responses=[[_group("A"), _group("B")]])
        loader = _loader(fetch)
        loader.state.merge_places([_group("stale")])
        await loader.load_initial()
        return fetch, loader

    fetch, loader = asyncio.run(scenario())

    assert fetch.calls == [None]
    assert list(loader.state.places) == ["A", "B"]


def test_fetch_failure_is_reported_and_clears_in_flight():
    errors = []

    async def scenario():
        fetch = RecordingFetch(responses=[ApiError(500, "Failed to load restaurants")])
        loader = _loader(fetch, on_error=errors.append)
        loader.on_view_settled(_box(), MIN_ZOOM)
        await asyncio.sleep(WINDOW * 3)
        await loader.wait_idle()
        return loader

    loader = asyncio.run(scenario())

    assert len(errors) == 1
    assert errors[0].status == 500
    assert not loader.in_flight
    assert loader.state.places == {}


def test_event_in_same_tick_as_timer_does_not_start_second_fetch():
    async def scenario():
        gate = asyncio.Event()
        fetch = RecordingFetch(gate=gate)
        loader = _loader(fetch)

        # 타이머 콜백 직후, 태스크가 돌기 전에 이벤트가 들어온 상황
        loader._fire(_box(0.0))
        loader.on_view_settled(_box(0.3), MIN_ZOOM)
        assert loader.in_flight
        assert not loader.has_pending

        await asyncio.sleep(WINDOW * 3)
        gate.set()
        await loader.wait_idle()
        return fetch

    fetch = asyncio.run(scenario())

    assert fetch.calls == [_box(0.0)]


def test_zoom_change_cancels_scheduled_fetch():
    fetch = RecordingFetch()

    async def scenario():
        loader = _loader(fetch)
        loader.on_view_settled(_box(), MIN_ZOOM)
        assert loader.has_pending
        loader.on_view_settled(_box(), MIN_ZOOM + 1)
        assert not loader.has_pending
        await asyncio.sleep(WINDOW * 3)

    asyncio.run(scenario())

    assert fetch.calls == []


def test_timeout_and_bad_payload_are_reported():
    errors = []

    async def scenario():
        fetch = RecordingFetch(responses=[asyncio.TimeoutError(), _validation_error()])
        loader = _loader(fetch, on_error=errors.append)
        for offset in (0.0, 0.5):
            loader.on_view_settled(_box(offset), MIN_ZOOM)
            await asyncio.sleep(WINDOW * 3)
            await loader.wait_idle()
        return loader

    loader = asyncio.run(scenario())

    assert [e.error for e in errors] == ["Request timed out", "Invalid response"]
    assert all(isinstance(e, ApiError) for e in errors)
    assert not loader.in_flight


def test_initial_load_timeout_is_reported():
    errors = []

    async def scenario():
        loader = _loader(RecordingFetch(responses=[asyncio.TimeoutError()]), on_error=errors.append)
        await loader.load_initial()

    asyncio.run(scenario())

    assert [e.error for e in errors] == ["Request timed out"]
