"""GraphQL Queries: read operations on servers and profiles."""

import strawberry
from strawberry.types import Info

from guildhall.api.graphql.context import GraphQLContext
from guildhall.api.graphql.permissions import IsAuthenticated
from guildhall.api.graphql.types import Profile, Server
from guildhall.services.profile_service import ProfileService
from guildhall.services.server_service import ServerService


@strawberry.type
class Query:

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def get_servers(self, info: Info[GraphQLContext, None]) -> list[Server]:
        """Servers the caller is a member of."""
        async with info.context.session() as db:
            return await ServerService(db).list_servers_for_caller(
                info.context.identity.email,
            )

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def get_server(self, info: Info[GraphQLContext, None], id: int) -> Server:
        """One server with channels and members, visible to members only."""
        async with info.context.session() as db:
            return await ServerService(db).get_server(
                id, info.context.identity.email,
            )

    @strawberry.field
    async def get_profile_by_id(
        self, info: Info[GraphQLContext, None], profile_id: int,
    ) -> Profile:
        async with info.context.session() as db:
            return await ProfileService(db).get_profile_by_id(profile_id)
