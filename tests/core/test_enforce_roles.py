"""Membership Rule Enforcement: tests for the pure role and channel rules.

Tests cover:
    - check_role accepts allowed roles, rejects others and non-members
    - role change / removal require an ADMIN of the same server
    - the last ADMIN can be neither demoted nor removed, and cannot leave
      while other members remain
    - "general" is protected; non-creators see NOT_FOUND
    - "general" is reserved as a new channel name
"""

from dataclasses import dataclass

import pytest

from guildhall.core.domain_types import (
    CHANNEL_MANAGER_ROLES, SERVER_ADMIN_ROLES, MemberRole,
)
from guildhall.core.enforce_roles import (
    check_role, is_last_admin, validate_role_change, validate_member_removal,
    validate_leave, validate_channel_deletion, validate_channel_name,
)
from guildhall.core.errors import (
    ForbiddenError, InvalidInputError, LastAdminError,
    ProtectedChannelError, ResourceNotFoundError,
)


@dataclass
class FakeMember:
    id: int
    profile_id: int
    server_id: int
    role: MemberRole


@dataclass
class FakeChannel:
    id: int
    name: str
    profile_id: int
    server_id: int


ADMIN = FakeMember(1, profile_id=10, server_id=100, role=MemberRole.ADMIN)
MODERATOR = FakeMember(2, profile_id=20, server_id=100, role=MemberRole.MODERATOR)
GUEST = FakeMember(3, profile_id=30, server_id=100, role=MemberRole.GUEST)
OTHER_ADMIN = FakeMember(4, profile_id=40, server_id=200, role=MemberRole.ADMIN)


# ─── check_role ──────────────────────────────────────────────────

def test_check_role_returns_member_when_allowed():
    assert check_role(MODERATOR, CHANNEL_MANAGER_ROLES) is MODERATOR


def test_check_role_rejects_guest_for_channel_management():
    with pytest.raises(ForbiddenError) as exc:
        check_role(GUEST, CHANNEL_MANAGER_ROLES)
    assert exc.value.code == "FORBIDDEN"


def test_check_role_rejects_non_member():
    with pytest.raises(ForbiddenError):
        check_role(None, SERVER_ADMIN_ROLES)


def test_check_role_accepts_plain_string_role():
    member = FakeMember(5, 50, 100, "ADMIN")
    assert check_role(member, SERVER_ADMIN_ROLES) is member


# ─── role change ─────────────────────────────────────────────────

def test_admin_can_promote_guest():
    validate_role_change(ADMIN, GUEST, MemberRole.MODERATOR, admin_count=1)


def test_moderator_cannot_change_roles():
    with pytest.raises(ForbiddenError):
        validate_role_change(MODERATOR, GUEST, MemberRole.MODERATOR, admin_count=1)


def test_admin_of_other_server_cannot_change_roles():
    with pytest.raises(ForbiddenError):
        validate_role_change(OTHER_ADMIN, GUEST, MemberRole.MODERATOR, admin_count=1)


def test_last_admin_cannot_be_demoted():
    with pytest.raises(LastAdminError):
        validate_role_change(ADMIN, ADMIN, MemberRole.GUEST, admin_count=1)


def test_admin_can_be_demoted_when_another_admin_exists():
    validate_role_change(ADMIN, ADMIN, MemberRole.GUEST, admin_count=2)


def test_setting_last_admin_to_admin_is_allowed():
    validate_role_change(ADMIN, ADMIN, MemberRole.ADMIN, admin_count=1)


# ─── removal and leave ──────────────────────────────────────────

def test_admin_can_remove_guest():
    validate_member_removal(ADMIN, GUEST, admin_count=1)


def test_guest_cannot_remove_members():
    with pytest.raises(ForbiddenError):
        validate_member_removal(GUEST, MODERATOR, admin_count=1)


def test_last_admin_cannot_be_removed():
    with pytest.raises(LastAdminError):
        validate_member_removal(ADMIN, ADMIN, admin_count=1)


def test_is_last_admin():
    assert is_last_admin(ADMIN, 1)
    assert not is_last_admin(ADMIN, 2)
    assert not is_last_admin(GUEST, 0)


def test_sole_admin_cannot_leave_other_members_behind():
    with pytest.raises(LastAdminError):
        validate_leave(ADMIN, admin_count=1, member_count=2)


def test_sole_admin_of_empty_server_can_leave():
    validate_leave(ADMIN, admin_count=1, member_count=1)


def test_one_of_several_admins_can_leave():
    validate_leave(ADMIN, admin_count=2, member_count=3)


def test_guest_and_non_member_can_leave():
    validate_leave(GUEST, admin_count=1, member_count=2)
    validate_leave(None, admin_count=1, member_count=2)


# ─── channels ───────────────────────────────────────────────────

def test_general_channel_is_protected_even_for_creator():
    general = FakeChannel(1, "general", profile_id=10, server_id=100)
    with pytest.raises(ProtectedChannelError):
        validate_channel_deletion(general, profile_id=10)


def test_non_creator_sees_channel_not_found():
    channel = FakeChannel(2, "random", profile_id=10, server_id=100)
    with pytest.raises(ResourceNotFoundError) as exc:
        validate_channel_deletion(channel, profile_id=20)
    assert exc.value.code == "CHANNEL_NOT_FOUND"


def test_creator_can_delete_channel():
    channel = FakeChannel(2, "random", profile_id=10, server_id=100)
    validate_channel_deletion(channel, profile_id=10)


@pytest.mark.parametrize("name", ["general", "General", "  GENERAL "])
def test_general_is_reserved_channel_name(name):
    with pytest.raises(InvalidInputError) as exc:
        validate_channel_name(name)
    assert exc.value.field == "name"


def test_other_channel_names_pass():
    assert validate_channel_name("announcements") == "announcements"
