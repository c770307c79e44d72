from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.models.user import user_interests


class Interest(Base):
    __tablename__ = "interests"

    id: Mapped[int] = mapped_column(primary_key=True)
    interest_type: Mapped[str] = mapped_column(String(200), unique=True, index=True)

    users = relationship("User", secondary=user_interests, back_populates="interests")
