"""Expose API endpoint routers."""

from app.api.endpoints import model_files, restaurants, search, users

__all__ = ["model_files", "restaurants", "search", "users"]
