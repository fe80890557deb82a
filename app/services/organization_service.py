"""
Organization business logic.

Handles org creation, joining by invite code, leaving, renaming and
invite code rotation. A user belongs to at most one organization; the
caller's membership and role are re-read from storage on every call.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import HTTPException, status

from app.core.config import settings
from app.core.permissions import can_manage
from app.models.member import OrgMember, OrgRole
from app.models.organization import Organization
from app.models.user import User
from app.repositories.organization_repository import (
    InviteCodeTakenError,
    OrganizationRepository,
)
from app.schemas.organization import (
    InviteCodeResponse,
    LeaveResponse,
    MemberResponse,
    OrganizationCreateRequest,
    OrganizationDetailResponse,
    OrganizationEnvelope,
    OrganizationJoinRequest,
    OrganizationSummaryResponse,
    OrganizationUpdateRequest,
)
from app.services.invite_codes import generate_invite_code, normalize_invite_code

logger = logging.getLogger(__name__)


class OrganizationService:
    """Handles all organization operations."""

    def __init__(
        self,
        repo: OrganizationRepository,
        code_generator: Callable[[], str] = generate_invite_code,
        lookup_attempts: int | None = None,
        write_attempts: int | None = None,
    ) -> None:
        self.repo = repo
        self.code_generator = code_generator
        self.lookup_attempts = lookup_attempts or settings.INVITE_CODE_LOOKUP_ATTEMPTS
        self.write_attempts = write_attempts or settings.INVITE_CODE_WRITE_ATTEMPTS

    # -----------------------------------------------------------------------
    # Get Current Organization
    # -----------------------------------------------------------------------

    async def get_current_organization(self, user: User) -> OrganizationEnvelope:
        """Return the caller's organization with all members, or null."""
        membership = await self.repo.get_membership(user.id)
        if membership is None:
            logger.info("User has no organization: user_id=%s", user.id)
            return OrganizationEnvelope(organization=None)

        org = await self.repo.get_organization(membership.org_id)
        if org is None:
            return OrganizationEnvelope(organization=None)

        return OrganizationEnvelope(organization=await self._detail(org, membership.role))

    # -----------------------------------------------------------------------
    # Create Organization
    # -----------------------------------------------------------------------

    async def create_organization(
        self, data: OrganizationCreateRequest, owner: User
    ) -> OrganizationEnvelope:
        """
        Create a new organization.

        - Rejects users who already belong to an organization
        - Allocates an unused invite code
        - Creates organization and Owner membership together
        """
        await self._ensure_no_membership(owner)

        org = await self._write_with_fresh_code(
            lambda code: self.repo.create_organization(data.name, code, owner.id)
        )

        logger.info(
            "Organization created: org_id=%s invite_code=%s owner_id=%s",
            org.id, org.invite_code, owner.id,
        )
        return OrganizationEnvelope(organization=await self._detail(org, OrgRole.owner))

    # -----------------------------------------------------------------------
    # Join Organization
    # -----------------------------------------------------------------------

    async def join_organization(
        self, data: OrganizationJoinRequest, user: User
    ) -> OrganizationEnvelope:
        """
        Join an organization by invite code.

        - Rejects users who already belong to an organization
        - Matches the code case-insensitively
        - Adds the user with the Member role
        """
        await self._ensure_no_membership(
            user, message="You are already part of an organization. Leave first to join another."
        )

        code = normalize_invite_code(data.invite_code)
        org = await self.repo.get_organization_by_invite_code(code)
        if org is None:
            logger.info("Invalid invite code: code=%s user_id=%s", code, user.id)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "INVITE_CODE_NOT_FOUND", "message": "Invalid invite code"},
            )

        await self.repo.add_member(org.id, user.id, OrgRole.member)

        logger.info("User joined organization: org_id=%s user_id=%s", org.id, user.id)
        return OrganizationEnvelope(organization=await self._detail(org, OrgRole.member))

    # -----------------------------------------------------------------------
    # Leave Organization
    # -----------------------------------------------------------------------

    async def leave_organization(self, user: User) -> LeaveResponse:
        """
        Leave the current organization.

        - Sole owner must transfer ownership while others remain
        - Last member leaving deletes the organization
        """
        membership = await self._require_membership(user)
        members = await self.repo.list_members(membership.org_id)

        if membership.role == OrgRole.owner:
            other_owners = [
                m for m, _ in members if m.role == OrgRole.owner and m.user_id != user.id
            ]
            if not other_owners and len(members) > 1:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail={
                        "code": "MUST_TRANSFER_OWNERSHIP",
                        "message": "You must transfer ownership before leaving",
                    },
                )

        if len(members) <= 1:
            await self.repo.delete_organization(membership.org_id)
            logger.info("Deleted empty organization: org_id=%s", membership.org_id)
        else:
            await self.repo.delete_membership(membership)
            logger.info("User left organization: org_id=%s user_id=%s", membership.org_id, user.id)

        return LeaveResponse(success=True)

    # -----------------------------------------------------------------------
    # Update Organization
    # -----------------------------------------------------------------------

    async def update_organization(
        self, data: OrganizationUpdateRequest, user: User
    ) -> OrganizationSummaryResponse:
        """Rename the organization. Requires Owner or Admin role."""
        org = await self._managed_organization(
            user, "Only owners and admins can update the organization"
        )

        if data.name is not None:
            org = await self.repo.update_organization(org, name=data.name)

        logger.info("Organization updated: org_id=%s", org.id)
        return OrganizationSummaryResponse(id=org.id, name=org.name, invite_code=org.invite_code)

    # -----------------------------------------------------------------------
    # Regenerate Invite Code
    # -----------------------------------------------------------------------

    async def regenerate_invite_code(self, user: User) -> InviteCodeResponse:
        """Replace the invite code. Requires Owner or Admin role."""
        org = await self._managed_organization(
            user, "Only owners and admins can regenerate the invite code"
        )

        org = await self._write_with_fresh_code(
            lambda code: self.repo.update_organization(org, invite_code=code)
        )

        logger.info("Invite code regenerated: org_id=%s invite_code=%s", org.id, org.invite_code)
        return InviteCodeResponse(invite_code=org.invite_code)

    # -----------------------------------------------------------------------
    # Invite code allocation
    # -----------------------------------------------------------------------

    async def allocate_invite_code(self) -> str:
        """
        Generate a code not currently used by any organization.

        Gives up after lookup_attempts and returns the last candidate; the
        unique constraint on write catches a remaining collision.
        """
        code = self.code_generator()
        for _ in range(self.lookup_attempts):
            if not await self.repo.invite_code_exists(code):
                break
            code = self.code_generator()
        return code

    async def _write_with_fresh_code(
        self, write: Callable[[str], Awaitable[Organization]]
    ) -> Organization:
        for attempt in range(1, self.write_attempts + 1):
            code = await self.allocate_invite_code()
            try:
                return await write(code)
            except InviteCodeTakenError:
                logger.warning(
                    "Invite code taken, retrying: attempt=%s/%s", attempt, self.write_attempts
                )

        logger.error("Could not allocate a unique invite code after %s writes", self.write_attempts)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "code": "INVITE_CODE_UNAVAILABLE",
                "message": "Could not allocate an invite code, please try again",
            },
        )

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _ensure_no_membership(
        self, user: User, message: str = "You are already part of an organization"
    ) -> None:
        if await self.repo.get_membership(user.id) is not None:
            logger.info("User already in an organization: user_id=%s", user.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "ALREADY_MEMBER", "message": message},
            )

    async def _require_membership(self, user: User) -> OrgMember:
        membership = await self.repo.get_membership(user.id)
        if membership is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "NOT_A_MEMBER", "message": "You are not part of any organization"},
            )
        return membership

    async def _managed_organization(self, user: User, message: str) -> Organization:
        membership = await self._require_membership(user)
        if not can_manage(membership.role):
            logger.info(
                "Insufficient role: user_id=%s role=%s", user.id, OrgRole(membership.role).value
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "INSUFFICIENT_ROLE", "message": message},
            )

        org = await self.repo.get_organization(membership.org_id)
        if org is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "NOT_A_MEMBER", "message": "You are not part of any organization"},
            )
        return org

    async def _detail(self, org: Organization, role: OrgRole) -> OrganizationDetailResponse:
        rows = await self.repo.list_members(org.id)
        members = [
            MemberResponse(
                id=member.id,
                user_id=member.user_id,
                name=user.display_name,
                email=user.email,
                image=user.avatar_url,
                role=OrgRole(member.role).value,
                joined_at=member.joined_at,
            )
            for member, user in rows
        ]
        return OrganizationDetailResponse(
            id=org.id,
            name=org.name,
            invite_code=org.invite_code,
            role=OrgRole(role).value,
            members=members,
            created_at=org.created_at,
        )
