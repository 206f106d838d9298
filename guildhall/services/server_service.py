"""Server Service: server lifecycle, invite codes and membership by invitation.

Invariants:
    - createServer writes Server + "general" Channel + ADMIN Member in one commit
    - Reads and role checks go through services/authorization.py
    - Invite codes are UUID4 strings; regenerating replaces the stored one
    - Redeeming an invite twice raises MEMBER_ALREADY_EXISTS, backed by the
      (profile_id, server_id) unique constraint when two redemptions race
    - The sole ADMIN cannot leave while other members remain
    - The last member leaving deletes the server

Design Decisions:
    - Every method returning a server re-reads it after commit (load_server):
      the payload reflects what was persisted, not the in-memory graph
"""

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildhall.core.domain_types import (
    DEFAULT_CHANNEL_NAME, DEFAULT_ROLE, SERVER_ADMIN_ROLES,
    ChannelType, MemberRole, ProfileId, ServerId,
)
from guildhall.core.enforce_roles import validate_leave
from guildhall.core.errors import DuplicateMemberError, ResourceNotFoundError
from guildhall.models.channel import Channel
from guildhall.models.member import Member
from guildhall.models.profile import Profile
from guildhall.models.server import Server
from guildhall.services.authorization import (
    count_admins, count_members, find_membership, get_visible_server,
    load_server, require_role, resolve_caller,
)

logger = logging.getLogger(__name__)

SERVER_LEFT_MESSAGE = "Left server successfully!"
SERVER_DELETED_MESSAGE = "Server deleted successfully!"


def new_invite_code() -> str:
    return str(uuid.uuid4())


class ServerService:
    """Server CRUD with membership and role enforcement."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reload(self, server_id: ServerId) -> Server:
        server = await load_server(self.db, server_id)
        if server is None:
            raise ResourceNotFoundError("Server", server_id)
        return server

    async def create_server(
        self, name: str, creator_profile_id: ProfileId, image_url: str,
    ) -> Server:
        """Create a server with its default channel and its creator as ADMIN."""
        profile = await self.db.get(Profile, creator_profile_id)
        if profile is None:
            raise ResourceNotFoundError("Profile", creator_profile_id)

        server = Server(
            name=name,
            image_url=image_url,
            invite_code=new_invite_code(),
            profile_id=profile.id,
            channels=[
                Channel(
                    name=DEFAULT_CHANNEL_NAME,
                    type=ChannelType.TEXT,
                    profile_id=profile.id,
                ),
            ],
            members=[
                Member(role=MemberRole.ADMIN, profile=profile),
            ],
        )
        self.db.add(server)
        await self.db.commit()

        logger.info(
            "Server created",
            extra={"server_id": server.id, "profile_id": profile.id},
        )
        return await self._reload(server.id)

    async def get_server(self, server_id: ServerId, caller_email: str) -> Server:
        profile = await resolve_caller(self.db, caller_email)
        return await get_visible_server(self.db, server_id, profile.id)

    async def list_servers_for_caller(self, caller_email: str) -> list[Server]:
        """All servers the caller belongs to; an unknown email yields []."""
        result = await self.db.execute(
            select(Server)
            .join(Member, Member.server_id == Server.id)
            .join(Profile, Profile.id == Member.profile_id)
            .where(Profile.email == caller_email)
            .order_by(Server.id)
        )
        return list(result.scalars().unique().all())

    async def regenerate_invite_code(
        self, server_id: ServerId, caller_email: str,
    ) -> Server:
        profile = await resolve_caller(self.db, caller_email)
        server = await get_visible_server(self.db, server_id, profile.id)
        await require_role(self.db, server.id, profile.id, SERVER_ADMIN_ROLES)

        server.invite_code = new_invite_code()
        await self.db.commit()

        logger.info(
            "Invite code regenerated",
            extra={"server_id": server.id, "profile_id": profile.id},
        )
        return await self._reload(server.id)

    async def update_server(
        self, server_id: ServerId, name: str, image_url: str, caller_email: str,
    ) -> Server:
        profile = await resolve_caller(self.db, caller_email)
        server = await get_visible_server(self.db, server_id, profile.id)
        await require_role(self.db, server.id, profile.id, SERVER_ADMIN_ROLES)

        server.name = name
        server.image_url = image_url
        await self.db.commit()
        return await self._reload(server.id)

    async def leave_server(self, server_id: ServerId, caller_email: str) -> str:
        """Drop every membership of the caller in the server (zero rows is fine).

        The last member leaving deletes the server: nobody could see, join
        or delete it afterwards.
        """
        profile = await resolve_caller(self.db, caller_email)
        member = await find_membership(
            self.db, server_id, profile.id, for_update=True,
        )
        last_member = False
        if member is not None:
            member_count = await count_members(self.db, server_id)
            validate_leave(
                member, await count_admins(self.db, server_id), member_count,
            )
            last_member = member_count <= 1

        await self.db.execute(
            delete(Member)
            .where(Member.server_id == server_id)
            .where(Member.profile_id == profile.id)
        )
        if last_member:
            server = await load_server(self.db, server_id)
            if server is not None:
                await self.db.delete(server)
        await self.db.commit()

        logger.info(
            "Last member left, server deleted" if last_member else "Member left server",
            extra={"server_id": server_id, "profile_id": profile.id},
        )
        return SERVER_LEFT_MESSAGE

    async def delete_server(self, server_id: ServerId, caller_email: str) -> str:
        profile = await resolve_caller(self.db, caller_email)
        server = await get_visible_server(self.db, server_id, profile.id)
        await require_role(self.db, server.id, profile.id, SERVER_ADMIN_ROLES)

        await self.db.delete(server)
        await self.db.commit()

        logger.info(
            "Server deleted",
            extra={"server_id": server_id, "profile_id": profile.id},
        )
        return SERVER_DELETED_MESSAGE

    async def add_member_to_server(
        self, invite_code: str, caller_email: str,
    ) -> Server:
        """Redeem an invite code: join as GUEST, reject an existing membership."""
        result = await self.db.execute(
            select(Server).where(Server.invite_code == invite_code),
        )
        server = result.scalar_one_or_none()
        if server is None:
            raise ResourceNotFoundError("Server", invite_code)
        profile = await resolve_caller(self.db, caller_email)

        if await find_membership(self.db, server.id, profile.id) is not None:
            raise DuplicateMemberError()

        self.db.add(
            Member(server_id=server.id, profile_id=profile.id, role=DEFAULT_ROLE),
        )
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateMemberError()

        logger.info(
            "Member joined server",
            extra={"server_id": server.id, "profile_id": profile.id},
        )
        return await self._reload(server.id)
