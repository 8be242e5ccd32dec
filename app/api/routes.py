"""Root API router."""

from fastapi import APIRouter

from app.api.endpoints import model_files, restaurants, search, users

router = APIRouter()

router.include_router(restaurants.router)
router.include_router(users.router)
router.include_router(search.router)
router.include_router(model_files.router)
