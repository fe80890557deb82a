"""
Organization endpoint tests.

Verifies that:
- Creating an organization makes the caller Owner with a valid invite code
- Invite codes are matched case-insensitively on join
- Users with a membership cannot create or join another organization
- Leaving deletes the organization only when the last member leaves
- A sole owner cannot leave while other members remain
- Only owners and admins can rename or rotate the invite code
- Every endpoint requires a valid bearer token
"""

import uuid

import httpx
import pytest
from sqlalchemy import select, update

from app.models.member import OrgMember, OrgRole
from app.models.organization import Organization
from app.services.invite_codes import INVITE_CODE_ALPHABET

BASE = "/api/organization"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def create_org(client: httpx.AsyncClient, headers: dict, name: str = "Corner Shop") -> dict:
    resp = await client.post(BASE, json={"name": name}, headers=headers)
    assert resp.status_code == 201, f"Create org failed: {resp.text}"
    return resp.json()["organization"]


async def join_org(client: httpx.AsyncClient, headers: dict, invite_code: str) -> httpx.Response:
    return await client.post(f"{BASE}/join", json={"inviteCode": invite_code}, headers=headers)


async def set_role(session_factory, user_id: uuid.UUID, role: OrgRole) -> None:
    async with session_factory() as session:
        await session.execute(
            update(OrgMember).where(OrgMember.user_id == user_id).values(role=role)
        )
        await session.commit()


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_without_membership_returns_null(client, make_user, auth_headers):
    user = await make_user()
    resp = await client.get(BASE, headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json() == {"organization": None}


@pytest.mark.asyncio
async def test_get_returns_members_with_roles(client, make_user, auth_headers):
    owner = await make_user("Owner")
    member = await make_user("Member")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(member), org["inviteCode"])

    resp = await client.get(BASE, headers=auth_headers(member))
    assert resp.status_code == 200
    data = resp.json()["organization"]
    assert data["id"] == org["id"]
    assert data["role"] == "member"
    roles = {m["userId"]: m["role"] for m in data["members"]}
    assert roles == {str(owner.id): "owner", str(member.id): "member"}
    for m in data["members"]:
        assert m["joinedAt"]
        assert m["email"].endswith("@example.com")


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_makes_caller_owner_with_valid_code(client, make_user, auth_headers):
    user = await make_user("Founder")
    org = await create_org(client, auth_headers(user), "Bistro 21")

    assert org["name"] == "Bistro 21"
    assert org["role"] == "owner"
    assert len(org["inviteCode"]) == 6
    assert all(ch in INVITE_CODE_ALPHABET for ch in org["inviteCode"])
    assert len(org["members"]) == 1
    assert org["members"][0]["userId"] == str(user.id)
    assert org["members"][0]["role"] == "owner"
    assert org["members"][0]["name"] == "Founder"


@pytest.mark.asyncio
async def test_create_rejected_when_already_member(client, make_user, auth_headers):
    user = await make_user()
    await create_org(client, auth_headers(user))

    resp = await client.post(BASE, json={"name": "Second"}, headers=auth_headers(user))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "ALREADY_MEMBER"


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "x" * 101])
async def test_create_validates_name_length(client, make_user, auth_headers, name):
    user = await make_user()
    resp = await client.post(BASE, json={"name": name}, headers=auth_headers(user))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Join
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_join_is_case_insensitive(client, make_user, auth_headers):
    owner = await make_user("Owner")
    joiner = await make_user("Joiner")
    org = await create_org(client, auth_headers(owner))

    resp = await join_org(client, auth_headers(joiner), org["inviteCode"].lower())
    assert resp.status_code == 200
    data = resp.json()["organization"]
    assert data["id"] == org["id"]
    assert data["role"] == "member"
    assert len(data["members"]) == 2


@pytest.mark.asyncio
async def test_join_unknown_code_is_404(client, make_user, auth_headers):
    user = await make_user()
    resp = await join_org(client, auth_headers(user), "ZZZZZZ")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "INVITE_CODE_NOT_FOUND"


@pytest.mark.asyncio
async def test_join_rejected_when_already_member(client, make_user, auth_headers):
    owner_a = await make_user("Owner A")
    owner_b = await make_user("Owner B")
    await create_org(client, auth_headers(owner_a), "Shop A")
    org_b = await create_org(client, auth_headers(owner_b), "Shop B")

    resp = await join_org(client, auth_headers(owner_a), org_b["inviteCode"])
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_join_requires_six_character_code(client, make_user, auth_headers):
    user = await make_user()
    resp = await join_org(client, auth_headers(user), "ABC")
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Leave
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_sole_member_leaving_deletes_organization(
    client, make_user, auth_headers, session_factory
):
    user = await make_user()
    org = await create_org(client, auth_headers(user))

    resp = await client.post(f"{BASE}/leave", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    async with session_factory() as session:
        result = await session.execute(
            select(Organization).where(Organization.id == uuid.UUID(org["id"]))
        )
        assert result.scalar_one_or_none() is None

    resp = await client.get(BASE, headers=auth_headers(user))
    assert resp.json() == {"organization": None}


@pytest.mark.asyncio
async def test_member_leaving_keeps_organization(client, make_user, auth_headers):
    owner = await make_user("Owner")
    member = await make_user("Member")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(member), org["inviteCode"])

    resp = await client.post(f"{BASE}/leave", headers=auth_headers(member))
    assert resp.status_code == 200

    data = (await client.get(BASE, headers=auth_headers(owner))).json()["organization"]
    assert data["id"] == org["id"]
    assert [m["userId"] for m in data["members"]] == [str(owner.id)]


@pytest.mark.asyncio
async def test_sole_owner_cannot_leave_with_other_members(client, make_user, auth_headers):
    owner = await make_user("Owner")
    member = await make_user("Member")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(member), org["inviteCode"])

    resp = await client.post(f"{BASE}/leave", headers=auth_headers(owner))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "MUST_TRANSFER_OWNERSHIP"


@pytest.mark.asyncio
async def test_owner_can_leave_when_another_owner_exists(
    client, make_user, auth_headers, session_factory
):
    owner = await make_user("Owner")
    co_owner = await make_user("Co-owner")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(co_owner), org["inviteCode"])
    await set_role(session_factory, co_owner.id, OrgRole.owner)

    resp = await client.post(f"{BASE}/leave", headers=auth_headers(owner))
    assert resp.status_code == 200

    data = (await client.get(BASE, headers=auth_headers(co_owner))).json()["organization"]
    assert data["id"] == org["id"]
    assert len(data["members"]) == 1


@pytest.mark.asyncio
async def test_leave_without_membership_is_400(client, make_user, auth_headers):
    user = await make_user()
    resp = await client.post(f"{BASE}/leave", headers=auth_headers(user))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "NOT_A_MEMBER"


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_owner_can_rename(client, make_user, auth_headers):
    owner = await make_user()
    org = await create_org(client, auth_headers(owner), "Old Name")

    resp = await client.patch(BASE, json={"name": "New Name"}, headers=auth_headers(owner))
    assert resp.status_code == 200
    assert resp.json() == {"id": org["id"], "name": "New Name", "inviteCode": org["inviteCode"]}


@pytest.mark.asyncio
async def test_admin_can_rename(client, make_user, auth_headers, session_factory):
    owner = await make_user("Owner")
    admin = await make_user("Admin")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(admin), org["inviteCode"])
    await set_role(session_factory, admin.id, OrgRole.admin)

    resp = await client.patch(BASE, json={"name": "Admin Rename"}, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Admin Rename"


@pytest.mark.asyncio
async def test_member_cannot_rename(client, make_user, auth_headers):
    owner = await make_user("Owner")
    member = await make_user("Member")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(member), org["inviteCode"])

    resp = await client.patch(BASE, json={"name": "Hijack"}, headers=auth_headers(member))
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_demoted_admin_loses_access_immediately(
    client, make_user, auth_headers, session_factory
):
    owner = await make_user("Owner")
    admin = await make_user("Admin")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(admin), org["inviteCode"])
    await set_role(session_factory, admin.id, OrgRole.admin)

    resp = await client.patch(BASE, json={"name": "First"}, headers=auth_headers(admin))
    assert resp.status_code == 200

    await set_role(session_factory, admin.id, OrgRole.member)
    resp = await client.patch(BASE, json={"name": "Second"}, headers=auth_headers(admin))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Regenerate invite code
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_regenerate_code_invalidates_old_code(client, make_user, auth_headers):
    owner = await make_user("Owner")
    joiner = await make_user("Joiner")
    org = await create_org(client, auth_headers(owner))

    resp = await client.post(f"{BASE}/regenerate-code", headers=auth_headers(owner))
    assert resp.status_code == 200
    new_code = resp.json()["inviteCode"]
    assert len(new_code) == 6
    assert new_code != org["inviteCode"]

    resp = await join_org(client, auth_headers(joiner), org["inviteCode"])
    assert resp.status_code == 404

    resp = await join_org(client, auth_headers(joiner), new_code)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_member_cannot_regenerate_code(client, make_user, auth_headers):
    owner = await make_user("Owner")
    member = await make_user("Member")
    org = await create_org(client, auth_headers(owner))
    await join_org(client, auth_headers(member), org["inviteCode"])

    resp = await client.post(f"{BASE}/regenerate-code", headers=auth_headers(member))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", BASE),
        ("POST", BASE),
        ("POST", f"{BASE}/join"),
        ("POST", f"{BASE}/leave"),
        ("PATCH", BASE),
        ("POST", f"{BASE}/regenerate-code"),
    ],
)
async def test_endpoints_require_token(client, method, path):
    resp = await client.request(method, path, json={})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "MISSING_TOKEN"


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(client):
    resp = await client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_revoked_token_is_rejected(client, make_user, auth_headers, fake_redis):
    user = await make_user()
    fake_redis.keys.add("blacklist:revoked-jti")
    resp = await client.get(BASE, headers=auth_headers(user, jti="revoked-jti"))
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(client, make_user, auth_headers):
    user = await make_user(is_active=False)
    resp = await client.get(BASE, headers=auth_headers(user))
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "USER_NOT_FOUND"
