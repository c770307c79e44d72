from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Photo(Base):
    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    photo_url: Mapped[str] = mapped_column(String(1024))
    # Only one main photo per user; kept in line by PhotoService, not by a constraint.
    is_main: Mapped[bool] = mapped_column(Boolean, default=False)
    upload_date: Mapped[date] = mapped_column(Date, default=date.today)

    user = relationship("User", back_populates="photos")
