from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageView(BaseModel):
    """A message as seen by either participant of a conversation."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 42,
                    "content": "Hi! Want to grab a coffee?",
                    "timestamp": "2025-03-14T18:30:00Z",
                    "sender_id": 1,
                    "receiver_id": 2,
                    "is_read": False,
                }
            ]
        },
    )

    id: int = Field(..., examples=[42])
    content: str = Field(..., examples=["Hi! Want to grab a coffee?"])
    timestamp: datetime
    sender_id: int = Field(..., examples=[1])
    receiver_id: int = Field(..., examples=[2])
    is_read: bool = Field(False, examples=[False])
