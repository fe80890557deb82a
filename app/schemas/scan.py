"""
Smart scan schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.models.scan import ScanStatus
from app.schemas.base import CamelModel


class DetectedItem(CamelModel):
    """One normalized entry of a vision model response."""

    label: str = Field(min_length=1)
    count: int = Field(ge=1)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class ScanSessionResponse(CamelModel):
    id: UUID
    image_url: str | None
    status: ScanStatus
    created_at: datetime


class ScanResultResponse(CamelModel):
    id: UUID
    label: str
    count: int
    confidence: float | None
    inventory_item_id: UUID | None = None


class ScanDetailResponse(CamelModel):
    """Scan session together with its detected items."""

    scan: ScanSessionResponse
    results: list[ScanResultResponse]
