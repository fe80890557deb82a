"""
Inventory schemas.

Request/response models for the organization-scoped inventory endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.models.inventory import InventoryStatus
from app.schemas.base import CamelModel


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class InventoryItemCreateRequest(CamelModel):
    """Request body for POST /inventory."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    image_url: str = Field(max_length=500)
    bin_number: str = Field(default="", max_length=50)
    rack_number: str = Field(default="", max_length=50)
    platform: str = Field(default="", max_length=50)
    quantity: int = Field(default=1, ge=1)
    par_level: int | None = Field(default=None, ge=0)
    cost: float | None = None
    status: InventoryStatus = InventoryStatus.pending


class InventoryItemUpdateRequest(CamelModel):
    """Request body for PATCH /inventory/{id}. Only fields sent are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    bin_number: str | None = Field(default=None, min_length=1, max_length=50)
    rack_number: str | None = Field(default=None, min_length=1, max_length=50)
    platform: str | None = Field(default=None, min_length=1, max_length=50)
    quantity: int | None = Field(default=None, ge=1)
    par_level: int | None = Field(default=None, ge=0)
    cost: float | None = None
    status: InventoryStatus | None = None
    sold_price: float | None = None
    ship_by_date: datetime | None = None
    shipper_qr_code: str | None = Field(default=None, max_length=500)


class InventorySearchRequest(CamelModel):
    """Request body for POST /inventory/search."""

    query: str | None = None
    status: InventoryStatus | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class InventoryItemResponse(CamelModel):
    id: UUID
    name: str
    description: str | None
    image_url: str
    bin_number: str
    rack_number: str
    platform: str
    status: InventoryStatus
    quantity: int
    par_level: int | None
    cost: float | None
    sold_at: datetime | None
    sold_price: float | None
    ship_by_date: datetime | None
    shipper_qr_code: str | None
    created_at: datetime
    updated_at: datetime


class InventoryStats(CamelModel):
    total: int
    pending: int
    completed: int
    sold: int


class InventoryListResponse(CamelModel):
    """All items of the caller's organization, newest first, with status counts."""

    items: list[InventoryItemResponse]
    stats: InventoryStats


class InventoryDeleteResponse(CamelModel):
    success: bool = True
    message: str
