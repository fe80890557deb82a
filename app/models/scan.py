"""
Smart scan ORM models.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin

if TYPE_CHECKING:
    from app.models.user import User


class ScanStatus(str, enum.Enum):
    """Scan session lifecycle."""

    created = "created"
    processing = "processing"
    done = "done"
    failed = "failed"


class ScanSession(Base, UUIDMixin):
    """One photo submitted for AI item counting."""

    __tablename__ = "scan_sessions"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[ScanStatus] = mapped_column(
        Enum(ScanStatus, name="scan_status"), nullable=False, default=ScanStatus.created
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="scan_sessions")
    results: Mapped[list[ScanResult]] = relationship(
        "ScanResult", back_populates="scan_session", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ScanSession id={self.id} status={self.status}>"


class ScanResult(Base, UUIDMixin):
    """A labelled item count detected in a scan."""

    __tablename__ = "scan_results"

    scan_session_id: Mapped[UUID] = mapped_column(
        ForeignKey("scan_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    inventory_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True, index=True
    )

    scan_session: Mapped[ScanSession] = relationship("ScanSession", back_populates="results")

    def __repr__(self) -> str:
        return f"<ScanResult label={self.label!r} count={self.count}>"
