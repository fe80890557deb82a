"""
Inventory endpoints.

CRUD and text search over the caller's organization inventory.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.inventory import (
    InventoryDeleteResponse,
    InventoryItemCreateRequest,
    InventoryItemResponse,
    InventoryItemUpdateRequest,
    InventoryListResponse,
    InventorySearchRequest,
)
from app.services.inventory_service import InventoryService

router = APIRouter()


def get_inventory_service(db: AsyncSession = Depends(get_db)) -> InventoryService:
    return InventoryService(db)


@router.get(
    "",
    response_model=InventoryListResponse,
    summary="List inventory items with status counts",
)
async def list_items(
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryListResponse:
    return await service.list_items(current_user)


@router.post(
    "",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an inventory item",
)
async def create_item(
    data: InventoryItemCreateRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryItemResponse:
    return await service.create_item(data, current_user)


@router.post(
    "/search",
    response_model=list[InventoryItemResponse],
    summary="Search inventory items",
)
async def search_items(
    data: InventorySearchRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> list[InventoryItemResponse]:
    """Match `query` against name, description, bin, rack and platform."""
    return await service.search_items(data, current_user)


@router.get(
    "/{item_id}",
    response_model=InventoryItemResponse,
    summary="Get an inventory item",
)
async def get_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryItemResponse:
    return await service.get_item(item_id, current_user)


@router.patch(
    "/{item_id}",
    response_model=InventoryItemResponse,
    summary="Update an inventory item",
)
async def update_item(
    item_id: UUID,
    data: InventoryItemUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryItemResponse:
    """Partial update; setting status to `sold` records the sale time."""
    return await service.update_item(item_id, data, current_user)


@router.delete(
    "/{item_id}",
    response_model=InventoryDeleteResponse,
    summary="Delete an inventory item",
)
async def delete_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryDeleteResponse:
    return await service.delete_item(item_id, current_user)
