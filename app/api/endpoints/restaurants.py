"""Restaurant endpoints."""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.restaurant import (
    PlaceGroup,
    RestaurantCreate,
    RestaurantCreated,
    RestaurantOut,
    RestaurantUpdate,
    SuccessResponse,
)
from app.services import restaurants as service

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("", response_model=Union[list[PlaceGroup], list[RestaurantOut]])
def list_restaurants(
    user_id: Optional[int] = Query(None, alias="userId"),
    aggregated: bool = False,
    bounds: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Return one user's reviews, grouped places, or every review."""
    if user_id is not None:
        return service.list_restaurants(db, user_id=user_id)
    box = service.parse_bounds(bounds) if bounds is not None else None
    if aggregated:
        return service.aggregate_places(db, bounds=box)
    return service.list_restaurants(db)


@router.post("", response_model=RestaurantCreated)
def create_restaurant(payload: RestaurantCreate, db: Session = Depends(get_db)) -> RestaurantCreated:
    restaurant = service.create_restaurant(db, payload)
    return RestaurantCreated(id=restaurant.id)


@router.put("/{restaurant_id}", response_model=SuccessResponse)
def update_restaurant(
    restaurant_id: int,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db),
) -> SuccessResponse:
    service.update_restaurant(db, restaurant_id, payload)
    return SuccessResponse()


@router.delete("/{restaurant_id}/{user_id}", response_model=SuccessResponse)
def delete_restaurant(restaurant_id: int, user_id: int, db: Session = Depends(get_db)) -> SuccessResponse:
    service.delete_restaurant(db, restaurant_id, user_id)
    return SuccessResponse()
