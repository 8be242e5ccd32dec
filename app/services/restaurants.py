"""Restaurant review storage and place grouping."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PermissionDeniedError, StorageError, ValidationError
from app.models.restaurant import Restaurant
from app.models.user import User
from app.schemas.restaurant import (
    BoundingBox,
    PlaceGroup,
    RestaurantCreate,
    RestaurantOut,
    RestaurantUpdate,
    ReviewOut,
)

logger = logging.getLogger(__name__)

SYNTHETIC_KEY_PREFIX = "restaurant_"


def parse_bounds(raw: str) -> BoundingBox:
    """Parse ``"lat1,lng1,lat2,lng2"`` into a normalized box.

    Corners may come in either diagonal order.
    """
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 4:
        raise ValidationError(
            "Invalid bounds",
            f"expected 4 comma-separated numbers, got {len(parts)}",
        )
    try:
        lat1, lng1, lat2, lng2 = (float(p) for p in parts)
    except ValueError as exc:
        raise ValidationError("Invalid bounds", str(exc)) from exc
    if not all(math.isfinite(v) for v in (lat1, lng1, lat2, lng2)):
        raise ValidationError("Invalid bounds", "bounds must be finite numbers")
    return BoundingBox.from_corners(lat1, lng1, lat2, lng2)


def group_key_for(row: Restaurant) -> str:
    """Kakao place id when present, otherwise a key unique to the row."""
    if row.kakao_place_id:
        return row.kakao_place_id
    return f"{SYNTHETIC_KEY_PREFIX}{row.id}"


def _member_order(row: Restaurant) -> tuple[datetime, int]:
    return row.created_at, row.id


def group_reviews(rows: Iterable[tuple[Restaurant, str | None]]) -> list[PlaceGroup]:
    """Fold (review, author nickname) pairs into place groups.

    Members are ordered newest first; the newest member supplies the
    representative name, address, coordinates and category. Groups are
    ordered by their latest member update, newest first.
    """
    buckets: dict[str, list[tuple[Restaurant, str | None]]] = {}
    for row, nickname in rows:
        buckets.setdefault(group_key_for(row), []).append((row, nickname))

    groups: list[PlaceGroup] = []
    for key, members in buckets.items():
        members.sort(key=lambda m: _member_order(m[0]), reverse=True)
        head = members[0][0]
        ratings = [m[0].rating for m in members]
        groups.append(
            PlaceGroup(
                group_key=key,
                kakao_place_id=head.kakao_place_id,
                name=head.name,
                address=head.address,
                lat=head.lat,
                lng=head.lng,
                avg_rating=sum(ratings) / len(ratings),
                review_count=len(members),
                latest_update=max(m[0].updated_at for m in members),
                category=head.category,
                reviews=[
                    ReviewOut(**RestaurantOut.model_validate(row).model_dump(), nickname=nickname)
                    for row, nickname in members
                ],
            )
        )

    # sort()는 stable이므로 동률이면 저장소 순서 유지
    groups.sort(key=lambda g: g.latest_update, reverse=True)
    return groups


def aggregate_places(db: Session, bounds: BoundingBox | None = None) -> list[PlaceGroup]:
    """Group every review (or those inside ``bounds``) into places."""
    stmt = (
        select(Restaurant, User.nickname)
        .outerjoin(User, Restaurant.user_id == User.id)
        .order_by(Restaurant.id)
    )
    if bounds is not None:
        stmt = stmt.where(
            Restaurant.lat >= bounds.min_lat,
            Restaurant.lat <= bounds.max_lat,
            Restaurant.lng >= bounds.min_lng,
            Restaurant.lng <= bounds.max_lng,
        )
    try:
        rows = db.execute(stmt).all()
    except SQLAlchemyError as exc:
        logger.exception("Aggregation query failed")
        raise StorageError("Failed to load restaurants", str(exc)) from exc

    groups = group_reviews(rows)
    logger.info("Aggregated %d reviews into %d places (bounds=%s)", len(rows), len(groups), bounds)
    return groups


def list_restaurants(db: Session, user_id: int | None = None) -> list[RestaurantOut]:
    """Return review rows newest first, optionally only one owner's."""
    stmt = select(Restaurant).order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    if user_id is not None:
        stmt = stmt.where(Restaurant.user_id == user_id)
    try:
        rows = db.execute(stmt).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception("Restaurant listing failed")
        raise StorageError("Failed to load restaurants", str(exc)) from exc
    return [RestaurantOut.model_validate(r) for r in rows]


def _get_owned(db: Session, restaurant_id: int, user_id: int) -> Restaurant:
    restaurant = db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found", f"id={restaurant_id}")
    if restaurant.user_id != user_id:
        raise PermissionDeniedError("Only the owner can modify this restaurant")
    return restaurant


def _require_user(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise ValidationError("Unknown user", f"userId={user_id}")


def create_restaurant(db: Session, payload: RestaurantCreate) -> Restaurant:
    """Insert a new review row."""
    _require_user(db, payload.user_id)
    now = datetime.now()
    restaurant = Restaurant(
        **payload.model_dump(),
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(restaurant)
        db.commit()
        db.refresh(restaurant)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Restaurant insert failed")
        raise StorageError("Failed to create restaurant", str(exc)) from exc
    logger.info("Created restaurant id=%s by user=%s", restaurant.id, restaurant.user_id)
    return restaurant


def update_restaurant(db: Session, restaurant_id: int, payload: RestaurantUpdate) -> Restaurant:
    """Overwrite a review row; only its owner may do so.

    Optional place metadata (kakao id, category, model url) is left untouched
    when the request omits it.
    """
    _require_user(db, payload.user_id)
    try:
        restaurant = _get_owned(db, restaurant_id, payload.user_id)
        for field in ("name", "address", "lat", "lng", "rating", "review"):
            setattr(restaurant, field, getattr(payload, field))
        for field in ("kakao_place_id", "category", "model_url"):
            if field in payload.model_fields_set:
                setattr(restaurant, field, getattr(payload, field))
        restaurant.updated_at = datetime.now()
        db.commit()
        db.refresh(restaurant)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Restaurant update failed")
        raise StorageError("Failed to update restaurant", str(exc)) from exc
    logger.info("Updated restaurant id=%s", restaurant_id)
    return restaurant


def delete_restaurant(db: Session, restaurant_id: int, user_id: int) -> None:
    """Delete a review row; only its owner may do so."""
    try:
        restaurant = _get_owned(db, restaurant_id, user_id)
        db.delete(restaurant)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Restaurant delete failed")
        raise StorageError("Failed to delete restaurant", str(exc)) from exc
    logger.info("Deleted restaurant id=%s", restaurant_id)
