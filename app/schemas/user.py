"""Schemas for user accounts."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user_id: int = Field(..., serialization_alias="userId")
    nickname: str


class UserOut(BaseModel):
    id: int
    nickname: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserLookupResponse(BaseModel):
    success: bool = True
    user: UserOut
