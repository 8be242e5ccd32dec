"""Expose schemas for easier import."""

from app.schemas.restaurant import (  # noqa: F401
    BoundingBox,
    PlaceGroup,
    RestaurantCreate,
    RestaurantOut,
    RestaurantUpdate,
    ReviewOut,
)
from app.schemas.search import PlaceCandidate, PlaceMatch, PlaceSearchRequest  # noqa: F401
from app.schemas.upload import ModelUploadResponse  # noqa: F401
from app.schemas.user import AuthResponse, Credentials, UserLookupResponse, UserOut  # noqa: F401
