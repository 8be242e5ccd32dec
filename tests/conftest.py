from __future__ import annotations

import os

# 앱을 import 하기 전에 테스트용 설정을 고정한다
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("KAKAO_API_KEY", None)
os.environ.pop("VITE_KAKAO_API_KEY", None)

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models.restaurant import Restaurant
from app.models.user import User
from app.services.users import hash_password


class InMemoryModelStorage:
    """Stands in for S3ModelStorage."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, dict[str, str]]] = {}

    def put(self, file_name: str, data: bytes, metadata: dict[str, str]) -> str:
        self.objects[file_name] = (data, dict(metadata))
        return f"models/{file_name}"

    def get(self, file_name: str):
        found = self.objects.get(file_name)
        if found is None:
            return None
        data, metadata = found
        return data, {k.lower(): v for k, v in metadata.items()}


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(nickname: str = "tester", password: str = "pw1234") -> User:
        user = User(nickname=nickname, password_hash=hash_password(password, nickname))
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_review(db):
    """Insert a review row with explicit timestamps."""
    counter = {"n": 0}

    def _make(user: User, **fields) -> Restaurant:
        counter["n"] += 1
        stamp = fields.pop("created_at", datetime(2024, 1, 1, 12, 0, counter["n"]))
        values = {
            "name": "국밥집",
            "address": "세종특별자치시 한누리대로 1",
            "lat": 36.48,
            "lng": 127.29,
            "rating": 4.0,
            "review": "맛있어요",
            "user_id": user.id,
        }
        values.update(fields)
        values.setdefault("updated_at", stamp)
        row = Restaurant(created_at=stamp, **values)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def model_storage():
    from app.services.model_files import get_model_storage

    storage = InMemoryModelStorage()
    app.dependency_overrides[get_model_storage] = lambda: storage
    return storage
