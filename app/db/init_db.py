"""Database initialization utilities."""

import logging

from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create the restaurants and users tables if they are missing."""
    Base.metadata.create_all(bind=engine)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
