"""
Role policy for organization settings.
"""

from __future__ import annotations

from app.models.member import OrgRole

MANAGER_ROLES: frozenset[OrgRole] = frozenset({OrgRole.owner, OrgRole.admin})


def can_manage(role: OrgRole | str) -> bool:
    """Return True if the role may rename the organization or rotate its invite code."""
    try:
        return OrgRole(role) in MANAGER_ROLES
    except ValueError:
        return False
