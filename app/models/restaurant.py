"""Restaurant review model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Restaurant(Base):
    """One user's review of one place."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    rating = Column(Float, nullable=False)  # 1.0 ~ 5.0, 0.5 단위
    review = Column(Text)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    kakao_place_id = Column(String(50), index=True)  # 카카오 장소 ID (검색으로 등록한 경우)
    category = Column(String(100))
    model_url = Column(Text)  # 업로드된 3D 모델 경로
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    owner = relationship("User", back_populates="restaurants")
