"""
Tests for invite code generation and the owner/admin policy.
"""

import pytest

from app.core.permissions import can_manage
from app.models.member import OrgRole
from app.services.invite_codes import (
    INVITE_CODE_ALPHABET,
    INVITE_CODE_LENGTH,
    generate_invite_code,
    normalize_invite_code,
)


class TestInviteCodes:

    def test_alphabet_has_no_ambiguous_characters(self):
        assert INVITE_CODE_ALPHABET == "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
        assert len(set(INVITE_CODE_ALPHABET)) == 32
        for ch in "0O1I":
            assert ch not in INVITE_CODE_ALPHABET

    def test_generated_codes_use_alphabet(self):
        for _ in range(200):
            code = generate_invite_code()
            assert len(code) == INVITE_CODE_LENGTH == 6
            assert set(code) <= set(INVITE_CODE_ALPHABET)

    def test_generated_codes_vary(self):
        assert len({generate_invite_code() for _ in range(50)}) > 1

    @pytest.mark.parametrize("raw,expected", [("abc234", "ABC234"), (" xyz789 ", "XYZ789")])
    def test_normalize(self, raw, expected):
        assert normalize_invite_code(raw) == expected


class TestCanManage:

    @pytest.mark.parametrize(
        "role,allowed",
        [
            (OrgRole.owner, True),
            (OrgRole.admin, True),
            (OrgRole.member, False),
            ("owner", True),
            ("admin", True),
            ("member", False),
            ("superuser", False),
        ],
    )
    def test_roles(self, role, allowed):
        assert can_manage(role) is allowed
