"""User account endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.user import AuthResponse, Credentials, UserLookupResponse, UserOut
from app.services import users as service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=AuthResponse)
def register(payload: Credentials, db: Session = Depends(get_db)) -> AuthResponse:
    user = service.register_user(db, payload.nickname, payload.password)
    return AuthResponse(user_id=user.id, nickname=user.nickname)


@router.post("/login", response_model=AuthResponse)
def login(payload: Credentials, db: Session = Depends(get_db)) -> AuthResponse:
    user = service.authenticate(db, payload.nickname, payload.password)
    return AuthResponse(user_id=user.id, nickname=user.nickname)


@router.get("/{nickname}", response_model=UserLookupResponse)
def get_user(nickname: str, db: Session = Depends(get_db)) -> UserLookupResponse:
    user = service.lookup_user(db, nickname)
    return UserLookupResponse(user=UserOut.model_validate(user))
