"""
Inventory business logic.

Items belong to an organization. Every operation resolves the caller's
current organization first; callers without one get 400 NOT_A_MEMBER and
items of other organizations are reported as not found.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.inventory import InventoryItem, InventoryStatus
from app.models.member import OrgMember
from app.models.user import User
from app.schemas.inventory import (
    InventoryDeleteResponse,
    InventoryItemCreateRequest,
    InventoryItemResponse,
    InventoryItemUpdateRequest,
    InventoryListResponse,
    InventorySearchRequest,
    InventoryStats,
)

logger = logging.getLogger(__name__)

# Columns that may be omitted from a PATCH but never cleared by it.
REQUIRED_FIELDS = frozenset(
    {"name", "image_url", "bin_number", "rack_number", "platform", "quantity", "status"}
)


class InventoryService:
    """Handles inventory item CRUD within the caller's organization."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # List
    # -----------------------------------------------------------------------

    async def list_items(self, user: User) -> InventoryListResponse:
        """Return all items, newest first, with per-status counts."""
        org_id = await self._organization_id(user)
        result = await self.db.execute(
            select(InventoryItem)
            .where(InventoryItem.org_id == org_id)
            .order_by(InventoryItem.created_at.desc())
        )
        items = list(result.scalars().all())

        stats = InventoryStats(
            total=len(items),
            pending=sum(1 for i in items if i.status == InventoryStatus.pending),
            completed=sum(1 for i in items if i.status == InventoryStatus.completed),
            sold=sum(1 for i in items if i.status == InventoryStatus.sold),
        )
        logger.info("Listed inventory: org_id=%s items=%s", org_id, len(items))
        return InventoryListResponse(
            items=[InventoryItemResponse.model_validate(i) for i in items],
            stats=stats,
        )

    # -----------------------------------------------------------------------
    # Get
    # -----------------------------------------------------------------------

    async def get_item(self, item_id: UUID, user: User) -> InventoryItemResponse:
        org_id = await self._organization_id(user)
        item = await self._get_item(item_id, org_id)
        return InventoryItemResponse.model_validate(item)

    # -----------------------------------------------------------------------
    # Create
    # -----------------------------------------------------------------------

    async def create_item(
        self, data: InventoryItemCreateRequest, user: User
    ) -> InventoryItemResponse:
        org_id = await self._organization_id(user)

        item = InventoryItem(org_id=org_id, **data.model_dump())
        self.db.add(item)
        await self.db.flush()
        await self.db.refresh(item)

        logger.info("Inventory item created: item_id=%s org_id=%s", item.id, org_id)
        return InventoryItemResponse.model_validate(item)

    # -----------------------------------------------------------------------
    # Update
    # -----------------------------------------------------------------------

    async def update_item(
        self, item_id: UUID, data: InventoryItemUpdateRequest, user: User
    ) -> InventoryItemResponse:
        """
        Apply the fields present in the request.

        - Explicit nulls clear optional fields only
        - Moving to `sold` stamps sold_at once
        """
        org_id = await self._organization_id(user)
        item = await self._get_item(item_id, org_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("status") == InventoryStatus.sold and item.status != InventoryStatus.sold:
            item.sold_at = datetime.now(UTC)

        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(item, field, value)

        await self.db.flush()
        await self.db.refresh(item)

        logger.info("Inventory item updated: item_id=%s fields=%s", item.id, sorted(changes))
        return InventoryItemResponse.model_validate(item)

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    async def delete_item(self, item_id: UUID, user: User) -> InventoryDeleteResponse:
        org_id = await self._organization_id(user)
        item = await self._get_item(item_id, org_id)

        await self.db.delete(item)
        await self.db.flush()

        logger.info("Inventory item deleted: item_id=%s org_id=%s", item_id, org_id)
        return InventoryDeleteResponse(success=True, message="Item deleted successfully")

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    async def search_items(
        self, data: InventorySearchRequest, user: User
    ) -> list[InventoryItemResponse]:
        """Case-insensitive substring match on text fields, optionally by status."""
        org_id = await self._organization_id(user)

        stmt = select(InventoryItem).where(InventoryItem.org_id == org_id)
        if data.status is not None:
            stmt = stmt.where(InventoryItem.status == data.status)
        if data.query:
            pattern = f"%{data.query}%"
            stmt = stmt.where(
                or_(
                    InventoryItem.name.ilike(pattern),
                    InventoryItem.description.ilike(pattern),
                    InventoryItem.bin_number.ilike(pattern),
                    InventoryItem.rack_number.ilike(pattern),
                    InventoryItem.platform.ilike(pattern),
                )
            )

        result = await self.db.execute(stmt.order_by(InventoryItem.created_at.desc()))
        return [InventoryItemResponse.model_validate(i) for i in result.scalars().all()]

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _organization_id(self, user: User) -> UUID:
        result = await self.db.execute(
            select(OrgMember.org_id)
            .where(OrgMember.user_id == user.id)
            .order_by(OrgMember.joined_at)
            .limit(1)
        )
        org_id = result.scalar_one_or_none()
        if org_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "NOT_A_MEMBER", "message": "You are not part of any organization"},
            )
        return org_id

    async def _get_item(self, item_id: UUID, org_id: UUID) -> InventoryItem:
        result = await self.db.execute(
            select(InventoryItem).where(
                InventoryItem.id == item_id,
                InventoryItem.org_id == org_id,
            )
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "ITEM_NOT_FOUND", "message": "Item not found"},
            )
        return item
