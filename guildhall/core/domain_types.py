"""Domain Types: identity aliases, roles and channel kinds shared by all layers.

Invariants:
    - ProfileId, ServerId, ChannelId, MemberId wrap ints; never mix them in domain logic
    - MemberRole privilege grows GUEST < MODERATOR < ADMIN
    - DEFAULT_CHANNEL_NAME is the one channel every server is created with

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: values are the GraphQL enum names and the stored column values
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProfileId = NewType("ProfileId", int)
ServerId = NewType("ServerId", int)
ChannelId = NewType("ChannelId", int)
MemberId = NewType("MemberId", int)


# ─── Enums ───────────────────────────────────────────────────────

class MemberRole(str, Enum):
    """Role of a profile inside one server."""
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    GUEST = "GUEST"


class ChannelType(str, Enum):
    """Medium of a channel."""
    TEXT = "TEXT"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"


DEFAULT_ROLE = MemberRole.GUEST
DEFAULT_CHANNEL_NAME = "general"

# Roles allowed to add channels to a server
CHANNEL_MANAGER_ROLES = frozenset({MemberRole.ADMIN, MemberRole.MODERATOR})
SERVER_ADMIN_ROLES = frozenset({MemberRole.ADMIN})
