"""
InventoryItem ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from app.models.organization import Organization


class InventoryStatus(str, enum.Enum):
    """Inventory item status enumeration."""

    pending = "pending"
    completed = "completed"
    sold = "sold"


class InventoryItem(Base, UUIDMixin, TimestampMixin):
    """A stocked item belonging to one organization."""

    __tablename__ = "inventory_items"

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    bin_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    rack_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    platform: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    status: Mapped[InventoryStatus] = mapped_column(
        Enum(InventoryStatus, name="inventory_status"),
        nullable=False,
        default=InventoryStatus.pending,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    par_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    sold_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sold_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    ship_by_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    shipper_qr_code: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="inventory_items"
    )

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} name={self.name!r} status={self.status}>"
