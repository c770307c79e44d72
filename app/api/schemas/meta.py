from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Liveness payload: the service is up and which deployment answered."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"status": "ok", "app_name": "meetyou-api", "environment": "local"}]
        }
    )

    status: str = Field(..., description="Service status", examples=["ok"])
    app_name: str = Field(..., description="Configured application name", examples=["meetyou-api"])
    environment: str = Field(..., description="Deployment environment", examples=["local"])
