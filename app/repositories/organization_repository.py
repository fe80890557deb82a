"""
Organization persistence.

OrganizationRepository is the storage contract the membership service is
written against; SQLAlchemyOrganizationRepository implements it on an
AsyncSession.
"""

from __future__ import annotations

import logging
from typing import Protocol
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.inventory import InventoryItem
from app.models.member import OrgMember, OrgRole
from app.models.organization import Organization
from app.models.user import User

logger = logging.getLogger(__name__)


class InviteCodeTakenError(Exception):
    """Raised when a write collides with the unique invite code constraint."""

    def __init__(self, invite_code: str) -> None:
        super().__init__(f"Invite code {invite_code!r} is already in use")
        self.invite_code = invite_code


class OrganizationRepository(Protocol):
    """Storage operations needed by OrganizationService."""

    async def get_membership(self, user_id: UUID) -> OrgMember | None: ...

    async def get_organization(self, org_id: UUID) -> Organization | None: ...

    async def get_organization_by_invite_code(self, invite_code: str) -> Organization | None: ...

    async def invite_code_exists(self, invite_code: str) -> bool: ...

    async def list_members(self, org_id: UUID) -> list[tuple[OrgMember, User]]: ...

    async def create_organization(
        self, name: str, invite_code: str, owner_id: UUID
    ) -> Organization: ...

    async def add_member(self, org_id: UUID, user_id: UUID, role: OrgRole) -> OrgMember: ...

    async def update_organization(
        self,
        org: Organization,
        *,
        name: str | None = None,
        invite_code: str | None = None,
    ) -> Organization: ...

    async def delete_membership(self, member: OrgMember) -> None: ...

    async def delete_organization(self, org_id: UUID) -> None: ...


class SQLAlchemyOrganizationRepository:
    """OrganizationRepository backed by a request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get_membership(self, user_id: UUID) -> OrgMember | None:
        result = await self.db.execute(
            select(OrgMember)
            .where(OrgMember.user_id == user_id)
            .order_by(OrgMember.joined_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_organization(self, org_id: UUID) -> Organization | None:
        result = await self.db.execute(
            select(Organization).where(Organization.id == org_id)
        )
        return result.scalar_one_or_none()

    async def get_organization_by_invite_code(self, invite_code: str) -> Organization | None:
        result = await self.db.execute(
            select(Organization).where(Organization.invite_code == invite_code)
        )
        return result.scalar_one_or_none()

    async def invite_code_exists(self, invite_code: str) -> bool:
        result = await self.db.execute(
            select(Organization.id).where(Organization.invite_code == invite_code)
        )
        return result.first() is not None

    async def list_members(self, org_id: UUID) -> list[tuple[OrgMember, User]]:
        result = await self.db.execute(
            select(OrgMember, User)
            .join(User, OrgMember.user_id == User.id)
            .where(OrgMember.org_id == org_id)
            .order_by(OrgMember.joined_at)
        )
        return [(member, user) for member, user in result.all()]

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    async def create_organization(
        self, name: str, invite_code: str, owner_id: UUID
    ) -> Organization:
        """
        Insert the organization and its owner membership in one flush.

        Raises InviteCodeTakenError if the code was claimed concurrently.
        """
        try:
            async with self.db.begin_nested():
                org = Organization(
                    name=name,
                    invite_code=invite_code,
                    members=[OrgMember(user_id=owner_id, role=OrgRole.owner)],
                )
                self.db.add(org)
                await self.db.flush()
        except IntegrityError as exc:
            logger.warning("Invite code collision on insert: code=%s", invite_code)
            raise InviteCodeTakenError(invite_code) from exc

        await self.db.refresh(org)
        return org

    async def add_member(self, org_id: UUID, user_id: UUID, role: OrgRole) -> OrgMember:
        member = OrgMember(org_id=org_id, user_id=user_id, role=role)
        self.db.add(member)
        await self.db.flush()
        return member

    async def update_organization(
        self,
        org: Organization,
        *,
        name: str | None = None,
        invite_code: str | None = None,
    ) -> Organization:
        """
        Apply the given field changes.

        Raises InviteCodeTakenError if the new code was claimed concurrently.
        """
        # Changes must be made after SAVEPOINT is issued, or begin_nested()
        # autoflushes them in the outer transaction.
        try:
            async with self.db.begin_nested():
                if name is not None:
                    org.name = name
                if invite_code is not None:
                    org.invite_code = invite_code
                await self.db.flush()
        except IntegrityError as exc:
            await self.db.refresh(org)
            logger.warning("Invite code collision on update: code=%s", invite_code)
            raise InviteCodeTakenError(invite_code or org.invite_code) from exc

        await self.db.refresh(org)
        return org

    async def delete_membership(self, member: OrgMember) -> None:
        await self.db.delete(member)
        await self.db.flush()

    async def delete_organization(self, org_id: UUID) -> None:
        await self.db.execute(delete(InventoryItem).where(InventoryItem.org_id == org_id))
        await self.db.execute(delete(OrgMember).where(OrgMember.org_id == org_id))
        await self.db.execute(delete(Organization).where(Organization.id == org_id))
        await self.db.flush()
