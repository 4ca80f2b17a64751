"""Request/response contracts for the favorites endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class FavoriteCreateRequest(BaseModel):
    """JSON body for POST /favorites."""

    assetId: StrictStr = Field(..., min_length=1, description="Upstream asset id, e.g. bitcoin")


class FavoriteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_id: str
    created_at: datetime
    updated_at: datetime
