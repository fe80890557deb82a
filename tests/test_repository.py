"""
SQLAlchemyOrganizationRepository tests on SQLite.

Checks that the unique invite code constraint surfaces as
InviteCodeTakenError and leaves the session usable.
"""

import itertools

import pytest

from app.models.member import OrgRole
from app.models.user import User
from app.repositories.organization_repository import (
    InviteCodeTakenError,
    SQLAlchemyOrganizationRepository,
)
from app.services.organization_service import OrganizationService


async def add_users(session, *names):
    users = [User(email=f"{n}@example.com", display_name=n) for n in names]
    session.add_all(users)
    await session.flush()
    return users


@pytest.mark.asyncio
async def test_create_organization_adds_owner(session_factory):
    async with session_factory() as session:
        (owner,) = await add_users(session, "owner")
        repo = SQLAlchemyOrganizationRepository(session)

        org = await repo.create_organization("Cafe", "ABC234", owner.id)
        rows = await repo.list_members(org.id)

        assert org.created_at is not None
        assert [(m.user_id, m.role) for m, _ in rows] == [(owner.id, OrgRole.owner)]
        assert await repo.invite_code_exists("ABC234")
        assert not await repo.invite_code_exists("ZZZ999")


@pytest.mark.asyncio
async def test_duplicate_invite_code_raises_taken(session_factory):
    async with session_factory() as session:
        first, second = await add_users(session, "first", "second")
        repo = SQLAlchemyOrganizationRepository(session)
        await repo.create_organization("One", "DUP234", first.id)

        with pytest.raises(InviteCodeTakenError) as exc_info:
            await repo.create_organization("Two", "DUP234", second.id)
        assert exc_info.value.invite_code == "DUP234"

        org = await repo.create_organization("Two", "UNQ567", second.id)
        assert (await repo.get_membership(second.id)).org_id == org.id


@pytest.mark.asyncio
async def test_delete_organization_removes_memberships(session_factory):
    async with session_factory() as session:
        owner, member = await add_users(session, "owner", "member")
        repo = SQLAlchemyOrganizationRepository(session)
        org = await repo.create_organization("Cafe", "DEL234", owner.id)
        await repo.add_member(org.id, member.id, OrgRole.member)

        await repo.delete_organization(org.id)

        assert await repo.get_membership(owner.id) is None
        assert await repo.get_membership(member.id) is None
        assert await repo.get_organization_by_invite_code("DEL234") is None


@pytest.mark.asyncio
async def test_update_to_taken_code_raises_and_session_stays_usable(session_factory):
    async with session_factory() as session:
        first, second = await add_users(session, "first", "second")
        repo = SQLAlchemyOrganizationRepository(session)
        await repo.create_organization("One", "AAA234", first.id)
        org = await repo.create_organization("Two", "BBB234", second.id)

        with pytest.raises(InviteCodeTakenError):
            await repo.update_organization(org, invite_code="AAA234")
        assert org.invite_code == "BBB234"

        updated = await repo.update_organization(org, invite_code="CCC234")
        assert updated.invite_code == "CCC234"
        assert await repo.get_organization_by_invite_code("BBB234") is None
        assert (await repo.get_organization_by_invite_code("CCC234")).id == org.id


@pytest.mark.asyncio
async def test_regenerate_retries_after_write_collision(session_factory):
    async with session_factory() as session:
        first, second = await add_users(session, "first", "second")
        repo = SQLAlchemyOrganizationRepository(session)
        await repo.create_organization("One", "AAA234", first.id)
        await repo.create_organization("Two", "BBB234", second.id)

        # Every lookup sees AAA234 taken, so the last candidate is written
        # anyway and the unique index rejects it.
        codes = itertools.chain(["AAA234"] * 11, itertools.repeat("CCC234"))
        service = OrganizationService(repo, code_generator=lambda: next(codes))

        response = await service.regenerate_invite_code(second)

        assert response.invite_code == "CCC234"
        assert (await repo.get_membership(second.id)).role == OrgRole.owner
