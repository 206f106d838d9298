"""GraphQL Mutations: profile, server, channel and membership writes.

Invariants:
    - Every mutation requires authentication (IsAuthenticated)
    - createServer/updateServer require an image; it is stored before the DB
      write and discarded again if the write fails
    - A server is always created for the caller's own profile
"""

from typing import Optional

import strawberry
from strawberry.file_uploads import Upload
from strawberry.types import Info

from guildhall.api.graphql.context import GraphQLContext
from guildhall.api.graphql.inputs import (
    CreateChannelInput, CreateProfileInput, CreateServerInput,
    UpdateServerInput, validate_input,
)
from guildhall.api.graphql.permissions import IsAuthenticated
from guildhall.api.graphql.types import MemberRoleEnum, Profile, Server
from guildhall.core.errors import ForbiddenError, ImageRequiredError, InvalidInputError
from guildhall.schemas.profile import ProfileCreate
from guildhall.schemas.server import ChannelCreate, ServerCreate, ServerUpdate
from guildhall.services.channel_service import ChannelService
from guildhall.services.member_service import MemberService
from guildhall.services.profile_service import ProfileService
from guildhall.services.server_service import ServerService


async def _store_image(context: GraphQLContext, file: Optional[Upload]) -> str:
    if file is None:
        raise ImageRequiredError()
    return await context.image_storage.store(file)


@strawberry.type
class Mutation:

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def create_profile(
        self, info: Info[GraphQLContext, None], input: CreateProfileInput,
    ) -> Profile:
        """Create the caller's profile from the verified token, or return it."""
        data = validate_input(ProfileCreate, input)
        identity = info.context.identity
        if data.email and data.email.lower() != identity.email.lower():
            raise InvalidInputError(
                "email does not match the authenticated identity", "email",
            )
        async with info.context.session() as db:
            return await ProfileService(db).create_profile(
                data.name, identity.email, data.image_url, identity.subject,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def create_server(
        self,
        info: Info[GraphQLContext, None],
        input: CreateServerInput,
        file: Optional[Upload] = None,
    ) -> Server:
        data = validate_input(ServerCreate, input)
        context = info.context
        async with context.session() as db:
            caller = await ProfileService(db).get_profile_by_email(
                context.identity.email,
            )
            if data.profile_id is not None and data.profile_id != caller.id:
                raise ForbiddenError("Servers can only be created for your own profile")

            image_url = await _store_image(context, file)
            try:
                return await ServerService(db).create_server(
                    data.name, caller.id, image_url,
                )
            except Exception:
                await context.image_storage.discard(image_url)
                raise

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def update_server(
        self,
        info: Info[GraphQLContext, None],
        input: UpdateServerInput,
        file: Optional[Upload] = None,
    ) -> Server:
        data = validate_input(ServerUpdate, input)
        context = info.context
        image_url = await _store_image(context, file)
        async with context.session() as db:
            try:
                return await ServerService(db).update_server(
                    data.server_id, data.name, image_url, context.identity.email,
                )
            except Exception:
                await context.image_storage.discard(image_url)
                raise

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def regenerate_invite_code(
        self, info: Info[GraphQLContext, None], server_id: int,
    ) -> Server:
        async with info.context.session() as db:
            return await ServerService(db).regenerate_invite_code(
                server_id, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def create_channel(
        self, info: Info[GraphQLContext, None], input: CreateChannelInput,
    ) -> Server:
        data = validate_input(ChannelCreate, input)
        async with info.context.session() as db:
            return await ChannelService(db).create_channel(
                data.server_id, data.name, data.type, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def leave_server(
        self, info: Info[GraphQLContext, None], server_id: int,
    ) -> str:
        async with info.context.session() as db:
            return await ServerService(db).leave_server(
                server_id, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def delete_server(
        self, info: Info[GraphQLContext, None], server_id: int,
    ) -> str:
        async with info.context.session() as db:
            return await ServerService(db).delete_server(
                server_id, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def delete_channel(
        self, info: Info[GraphQLContext, None], channel_id: int,
    ) -> str:
        async with info.context.session() as db:
            return await ChannelService(db).delete_channel(
                channel_id, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def add_member(
        self, info: Info[GraphQLContext, None], invite_code: str,
    ) -> Server:
        """Redeem an invite code for the caller."""
        async with info.context.session() as db:
            return await ServerService(db).add_member_to_server(
                invite_code, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def change_member_role(
        self,
        info: Info[GraphQLContext, None],
        member_id: int,
        role: MemberRoleEnum,
    ) -> Server:
        async with info.context.session() as db:
            return await MemberService(db).change_member_role(
                member_id, role, info.context.identity.email,
            )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def delete_member(
        self, info: Info[GraphQLContext, None], member_id: int,
    ) -> Server:
        async with info.context.session() as db:
            return await MemberService(db).delete_member(
                member_id, info.context.identity.email,
            )
