from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class PhotoView(BaseModel):
    """Stored photo record."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., examples=[7])
    user_id: int = Field(..., examples=[1])
    photo_url: str = Field(..., examples=["/srv/meetyou/photos/3f2b9c0e.png"])
    is_main: bool = Field(False, examples=[True])
    upload_date: date


class PhotoUpdate(BaseModel):
    """Fields to change on an existing photo. Unset fields are left as they are."""

    photo_url: str | None = Field(
        None, max_length=1024, examples=["/srv/meetyou/photos/3f2b9c0e.png"]
    )
    is_main: bool | None = Field(None, examples=[True])
    upload_date: date | None = None
