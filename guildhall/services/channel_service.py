"""Channel Service: create and delete channels inside a server.

Invariants:
    - Only ADMIN or MODERATOR members may create channels
    - The name "general" is reserved for the default channel
    - Only the creator may delete a channel; "general" is never deletable
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from guildhall.core.domain_types import (
    CHANNEL_MANAGER_ROLES, ChannelId, ChannelType, ServerId,
)
from guildhall.core.enforce_roles import validate_channel_deletion, validate_channel_name
from guildhall.core.errors import ResourceNotFoundError
from guildhall.models.channel import Channel
from guildhall.models.server import Server
from guildhall.services.authorization import (
    get_visible_server, load_server, require_role, resolve_caller,
)

logger = logging.getLogger(__name__)

CHANNEL_DELETED_MESSAGE = "Channel deleted successfully!"


class ChannelService:
    """Channel mutations with role enforcement."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_channel(
        self,
        server_id: ServerId,
        name: str,
        channel_type: ChannelType,
        caller_email: str,
    ) -> Server:
        """Add a channel; returns the server with its refreshed channel list."""
        validate_channel_name(name)
        profile = await resolve_caller(self.db, caller_email)
        server = await get_visible_server(self.db, server_id, profile.id)
        await require_role(self.db, server.id, profile.id, CHANNEL_MANAGER_ROLES)

        channel = Channel(
            name=name,
            type=channel_type,
            profile_id=profile.id,
            server_id=server.id,
        )
        self.db.add(channel)
        await self.db.commit()

        logger.info(
            "Channel created",
            extra={
                "server_id": server.id, "channel_id": channel.id,
                "profile_id": profile.id,
            },
        )
        return await load_server(self.db, server.id)

    async def delete_channel(self, channel_id: ChannelId, caller_email: str) -> str:
        profile = await resolve_caller(self.db, caller_email)
        channel = await self.db.get(Channel, channel_id)
        if channel is None:
            raise ResourceNotFoundError("Channel", channel_id)
        validate_channel_deletion(channel, profile.id)

        await self.db.delete(channel)
        await self.db.commit()

        logger.info(
            "Channel deleted",
            extra={"channel_id": channel_id, "profile_id": profile.id},
        )
        return CHANNEL_DELETED_MESSAGE
