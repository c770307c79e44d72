from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InterestView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., examples=[3])
    interest_type: str = Field(..., examples=["Hiking"])


class UserView(BaseModel):
    """User with the interests attached to them."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "email": "alex@example.com",
                    "name": "Alex",
                    "age": 29,
                    "interests": [{"id": 3, "interest_type": "Hiking"}],
                }
            ]
        },
    )

    id: int = Field(..., examples=[1])
    email: str = Field(..., examples=["alex@example.com"])
    name: str | None = Field(None, examples=["Alex"])
    age: int | None = Field(None, examples=[29])
    interests: list[InterestView] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Profile fields to change. Fields left unset keep their current value."""

    email: str | None = Field(None, max_length=320, examples=["alex@example.com"])
    name: str | None = Field(None, max_length=100, examples=["Alex"])
    age: int | None = Field(None, ge=0, le=150, examples=[29])
