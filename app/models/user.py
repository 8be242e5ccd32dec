"""User account model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nickname = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(64), nullable=False)  # sha256 hex
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    restaurants = relationship("Restaurant", back_populates="owner")
