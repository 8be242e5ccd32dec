"""Client application state."""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass, field
from typing import Optional

from app.schemas.restaurant import PlaceGroup
from app.services.place_search import DEFAULT_CENTER

DEFAULT_ZOOM = 13


def merge_place_groups(
    collection: MutableMapping[str, PlaceGroup],
    incoming: Iterable[PlaceGroup],
) -> list[str]:
    """Add groups whose key is not loaded yet; return the keys added.

    Existing entries are never overwritten.
    """
    added: list[str] = []
    for group in incoming:
        if group.group_key in collection:
            continue
        collection[group.group_key] = group
        added.append(group.group_key)
    return added


@dataclass
class CurrentUser:
    user_id: int
    nickname: str


@dataclass
class AppState:
    """Everything the map UI needs: who is logged in, the view, the places."""

    current_user: Optional[CurrentUser] = None
    center: tuple[float, float] = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM
    places: dict[str, PlaceGroup] = field(default_factory=dict)

    def replace_places(self, groups: Iterable[PlaceGroup]) -> None:
        self.places = {g.group_key: g for g in groups}

    def merge_places(self, groups: Iterable[PlaceGroup]) -> list[str]:
        return merge_place_groups(self.places, groups)

    def log_in(self, user_id: int, nickname: str) -> None:
        self.current_user = CurrentUser(user_id=user_id, nickname=nickname)

    def log_out(self) -> None:
        self.current_user = None
