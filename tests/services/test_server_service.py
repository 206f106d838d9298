"""Server Service: lifecycle, visibility, invites and leaving.

Invariants:
    - A new server has exactly one "general" TEXT channel and one ADMIN member
    - Servers are visible only to their members
    - A regenerated invite code invalidates the previous one
    - Redeeming an invite twice raises MEMBER_ALREADY_EXISTS
"""

import pytest
from sqlalchemy import select

from guildhall.core.domain_types import ChannelType, MemberRole
from guildhall.core.errors import (
    DuplicateMemberError, ForbiddenError, LastAdminError, ResourceNotFoundError,
)
from guildhall.models.channel import Channel
from guildhall.models.server import Server
from guildhall.services.server_service import (
    SERVER_DELETED_MESSAGE, SERVER_LEFT_MESSAGE, ServerService,
)

IMAGE = "http://test/images/icon.png"


@pytest.fixture
async def alice(make_profile):
    return await make_profile("Alice", "alice@example.com")


@pytest.fixture
async def bob(make_profile):
    return await make_profile("Bob", "bob@example.com")


@pytest.fixture
async def server(test_db, alice):
    return await ServerService(test_db).create_server("Test", alice.id, IMAGE)


# ─── create / read ──────────────────────────────────────────────

async def test_create_server_has_general_channel_and_admin(server, alice):
    assert server.name == "Test"
    assert server.image_url == IMAGE
    assert server.profile_id == alice.id
    assert [(c.name, c.type) for c in server.channels] == [("general", ChannelType.TEXT)]
    assert len(server.members) == 1
    assert server.members[0].profile_id == alice.id
    assert server.members[0].role == MemberRole.ADMIN
    assert server.members[0].profile.email == "alice@example.com"


async def test_create_server_for_missing_profile_raises(test_db):
    with pytest.raises(ResourceNotFoundError) as exc:
        await ServerService(test_db).create_server("Test", 999, IMAGE)
    assert exc.value.code == "PROFILE_NOT_FOUND"


async def test_invite_codes_are_unique(test_db, alice):
    service = ServerService(test_db)
    one = await service.create_server("One", alice.id, IMAGE)
    two = await service.create_server("Two", alice.id, IMAGE)
    assert one.invite_code != two.invite_code


async def test_get_server_visible_to_member(test_db, server):
    found = await ServerService(test_db).get_server(server.id, "alice@example.com")
    assert found.id == server.id


async def test_get_server_hidden_from_non_member(test_db, server, bob):
    with pytest.raises(ResourceNotFoundError) as exc:
        await ServerService(test_db).get_server(server.id, "bob@example.com")
    assert exc.value.code == "SERVER_NOT_FOUND"


async def test_list_servers_only_returns_memberships(test_db, server, bob):
    service = ServerService(test_db)
    assert [s.id for s in await service.list_servers_for_caller("alice@example.com")] == [server.id]
    assert await service.list_servers_for_caller("bob@example.com") == []


async def test_list_servers_for_unknown_email_is_empty(test_db, server):
    assert await ServerService(test_db).list_servers_for_caller("ghost@example.com") == []


# ─── invites ────────────────────────────────────────────────────

async def test_redeem_invite_adds_guest(test_db, server, bob):
    joined = await ServerService(test_db).add_member_to_server(
        server.invite_code, "bob@example.com",
    )
    roles = {m.profile.email: m.role for m in joined.members}
    assert roles == {
        "alice@example.com": MemberRole.ADMIN,
        "bob@example.com": MemberRole.GUEST,
    }


async def test_redeem_invite_twice_conflicts(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")
    with pytest.raises(DuplicateMemberError):
        await service.add_member_to_server(server.invite_code, "bob@example.com")


async def test_unknown_invite_code_not_found(test_db, bob):
    with pytest.raises(ResourceNotFoundError) as exc:
        await ServerService(test_db).add_member_to_server("nope", "bob@example.com")
    assert exc.value.code == "SERVER_NOT_FOUND"


async def test_regenerated_invite_invalidates_old_code(test_db, server, bob):
    service = ServerService(test_db)
    old_code = server.invite_code
    updated = await service.regenerate_invite_code(server.id, "alice@example.com")
    assert updated.invite_code != old_code

    with pytest.raises(ResourceNotFoundError):
        await service.add_member_to_server(old_code, "bob@example.com")
    joined = await service.add_member_to_server(updated.invite_code, "bob@example.com")
    assert len(joined.members) == 2


async def test_guest_cannot_regenerate_invite(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")
    with pytest.raises(ForbiddenError):
        await service.regenerate_invite_code(server.id, "bob@example.com")


async def test_non_member_cannot_regenerate_invite(test_db, server, bob):
    with pytest.raises(ResourceNotFoundError):
        await ServerService(test_db).regenerate_invite_code(server.id, "bob@example.com")


# ─── update / delete / leave ────────────────────────────────────

async def test_admin_updates_name_and_image(test_db, server):
    updated = await ServerService(test_db).update_server(
        server.id, "Renamed", "http://test/images/new.png", "alice@example.com",
    )
    assert updated.name == "Renamed"
    assert updated.image_url == "http://test/images/new.png"


async def test_guest_cannot_update_server(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")
    with pytest.raises(ForbiddenError):
        await service.update_server(server.id, "Hijacked", IMAGE, "bob@example.com")


async def test_member_leaves_server(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")

    assert await service.leave_server(server.id, "bob@example.com") == SERVER_LEFT_MESSAGE

    remaining = await service.get_server(server.id, "alice@example.com")
    assert [m.profile_id for m in remaining.members] == [server.profile_id]
    with pytest.raises(ResourceNotFoundError):
        await service.get_server(server.id, "bob@example.com")


async def test_leaving_without_membership_is_a_no_op(test_db, server, bob):
    result = await ServerService(test_db).leave_server(server.id, "bob@example.com")
    assert result == SERVER_LEFT_MESSAGE


async def test_sole_admin_cannot_leave_members_behind(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")
    with pytest.raises(LastAdminError):
        await service.leave_server(server.id, "alice@example.com")


async def test_last_member_leaving_deletes_server(test_db, server):
    server_id = server.id
    result = await ServerService(test_db).leave_server(server_id, "alice@example.com")
    assert result == SERVER_LEFT_MESSAGE

    remaining = await test_db.execute(select(Server.id).where(Server.id == server_id))
    assert remaining.scalar_one_or_none() is None
    channels = await test_db.execute(select(Channel.id).where(Channel.server_id == server_id))
    assert channels.all() == []


async def test_admin_deletes_server(test_db, server):
    service = ServerService(test_db)
    assert await service.delete_server(server.id, "alice@example.com") == SERVER_DELETED_MESSAGE
    with pytest.raises(ResourceNotFoundError):
        await service.get_server(server.id, "alice@example.com")


async def test_guest_cannot_delete_server(test_db, server, bob):
    service = ServerService(test_db)
    await service.add_member_to_server(server.invite_code, "bob@example.com")
    with pytest.raises(ForbiddenError):
        await service.delete_server(server.id, "bob@example.com")
