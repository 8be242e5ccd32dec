"""Import models so they register with the declarative base."""

from app.models.restaurant import Restaurant  # noqa: F401
from app.models.user import User  # noqa: F401
