"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from app.models.base import Base, TimestampMixin, UUIDMixin
from app.models.inventory import InventoryItem, InventoryStatus
from app.models.member import OrgMember, OrgRole
from app.models.organization import Organization
from app.models.scan import ScanResult, ScanSession, ScanStatus
from app.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Organization",
    "User",
    "OrgMember",
    "OrgRole",
    "ScanSession",
    "ScanResult",
    "ScanStatus",
    "InventoryItem",
    "InventoryStatus",
]
