"""
Organization endpoints.

Fetch, create, join, leave, rename, regenerate invite code.
Every route acts on the caller's single organization.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.repositories.organization_repository import SQLAlchemyOrganizationRepository
from app.schemas.organization import (
    InviteCodeResponse,
    LeaveResponse,
    OrganizationCreateRequest,
    OrganizationEnvelope,
    OrganizationJoinRequest,
    OrganizationSummaryResponse,
    OrganizationUpdateRequest,
)
from app.services.organization_service import OrganizationService

router = APIRouter()


def get_org_service(db: AsyncSession = Depends(get_db)) -> OrganizationService:
    """Dependency that constructs OrganizationService over the request session."""
    return OrganizationService(repo=SQLAlchemyOrganizationRepository(db))


# ---------------------------------------------------------------------------
# Get Current Organization
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=OrganizationEnvelope,
    summary="Get the caller's organization",
)
async def get_organization(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationEnvelope:
    """Return the organization with members, or `{"organization": null}`."""
    return await service.get_current_organization(current_user)


# ---------------------------------------------------------------------------
# Create Organization
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=OrganizationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new organization",
)
async def create_organization(
    data: OrganizationCreateRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationEnvelope:
    """
    Create a new organization.

    - Caller must not belong to an organization yet
    - Caller becomes Owner
    - A fresh 6-character invite code is assigned
    """
    return await service.create_organization(data, current_user)


# ---------------------------------------------------------------------------
# Join Organization
# ---------------------------------------------------------------------------

@router.post(
    "/join",
    response_model=OrganizationEnvelope,
    summary="Join an organization with an invite code",
)
async def join_organization(
    data: OrganizationJoinRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationEnvelope:
    """Join as Member. The invite code is case-insensitive."""
    return await service.join_organization(data, current_user)


# ---------------------------------------------------------------------------
# Leave Organization
# ---------------------------------------------------------------------------

@router.post(
    "/leave",
    response_model=LeaveResponse,
    summary="Leave the current organization",
)
async def leave_organization(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> LeaveResponse:
    """
    Leave the organization.

    - The only owner cannot leave while other members remain
    - The last member leaving deletes the organization
    """
    return await service.leave_organization(current_user)


# ---------------------------------------------------------------------------
# Update Organization
# ---------------------------------------------------------------------------

@router.patch(
    "",
    response_model=OrganizationSummaryResponse,
    summary="Rename the organization",
)
async def update_organization(
    data: OrganizationUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationSummaryResponse:
    """Update the organization name. Requires Owner or Admin role."""
    return await service.update_organization(data, current_user)


# ---------------------------------------------------------------------------
# Regenerate Invite Code
# ---------------------------------------------------------------------------

@router.post(
    "/regenerate-code",
    response_model=InviteCodeResponse,
    summary="Generate a new invite code",
)
async def regenerate_invite_code(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> InviteCodeResponse:
    """Replace the invite code; the old one stops working. Requires Owner or Admin role."""
    return await service.regenerate_invite_code(current_user)
