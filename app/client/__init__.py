"""Python client for the Matzip map API."""

from app.client.api import ApiError, MatzipClient  # noqa: F401
from app.client.loader import MapDataLoader  # noqa: F401
from app.client.state import AppState, merge_place_groups  # noqa: F401
