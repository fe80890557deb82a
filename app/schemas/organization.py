"""
Organization schemas.

Request/response models for the organization and membership endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class OrganizationCreateRequest(CamelModel):
    """Request body for POST /organization."""

    name: str = Field(min_length=1, max_length=100)


class OrganizationJoinRequest(CamelModel):
    """Request body for POST /organization/join."""

    invite_code: str = Field(min_length=6, max_length=6)


class OrganizationUpdateRequest(CamelModel):
    """Request body for PATCH /organization."""

    name: str | None = Field(default=None, min_length=1, max_length=100)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class MemberResponse(CamelModel):
    """Single org member with user info and role."""

    id: UUID
    user_id: UUID
    name: str
    email: str
    image: str | None
    role: str
    joined_at: datetime


class OrganizationDetailResponse(CamelModel):
    """Organization with the caller's role and every member."""

    id: UUID
    name: str
    invite_code: str
    role: str
    members: list[MemberResponse]
    created_at: datetime


class OrganizationEnvelope(CamelModel):
    """Wrapper used by fetch/create/join; organization is null when the user has none."""

    organization: OrganizationDetailResponse | None


class OrganizationSummaryResponse(CamelModel):
    """Response for PATCH /organization."""

    id: UUID
    name: str
    invite_code: str


class InviteCodeResponse(CamelModel):
    """Response for POST /organization/regenerate-code."""

    invite_code: str


class LeaveResponse(CamelModel):
    """Response for POST /organization/leave."""

    success: bool = True
