"""GraphQL Object Types: wire shape of profiles, servers, channels and members.

Invariants:
    - Field names mirror ORM attributes: resolvers return ORM rows as-is and
      Strawberry's default resolver reads them with getattr
    - Nested collections (channels, members, member.profile) are eagerly loaded
      by the models, so no field triggers IO
"""

from datetime import datetime

import strawberry

from guildhall.core.domain_types import ChannelType, MemberRole

MemberRoleEnum = strawberry.enum(MemberRole, name="MemberRole")
ChannelTypeEnum = strawberry.enum(ChannelType, name="ChannelType")


@strawberry.type
class Profile:
    id: int
    user_id: str | None
    name: str
    email: str
    image_url: str | None
    created_at: datetime
    updated_at: datetime


@strawberry.type
class Channel:
    id: int
    name: str
    type: ChannelTypeEnum
    server_id: int
    profile_id: int
    created_at: datetime
    updated_at: datetime


@strawberry.type
class Member:
    id: int
    role: MemberRoleEnum
    server_id: int
    profile_id: int
    profile: Profile
    created_at: datetime
    updated_at: datetime


@strawberry.type
class Server:
    id: int
    name: str
    image_url: str
    invite_code: str
    profile_id: int
    channels: list[Channel]
    members: list[Member]
    created_at: datetime
    updated_at: datetime
