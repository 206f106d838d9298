"""Membership Rule Enforcement: role and protection checks for server mutations.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Raise a GuildhallError subclass on violation, return normally on success
    - Only an ADMIN of the target's own server may change roles or remove members
    - A server never loses its last ADMIN through role change or removal, nor
      through leave while other members remain
    - The default channel is never deletable and never re-creatable

Design Decisions:
    - Admin counts passed in by the caller: the shell reads them inside the same
      transaction as the mutation, the rules stay testable without a database
    - Channel deletion by a non-creator reports NOT_FOUND, matching getServer's
      visibility semantics
"""

from guildhall.core.domain_types import (
    DEFAULT_CHANNEL_NAME, SERVER_ADMIN_ROLES, MemberRole,
)
from guildhall.core.errors import (
    ForbiddenError, InvalidInputError, LastAdminError,
    ProtectedChannelError, ResourceNotFoundError,
)
from guildhall.core.repository_protocols import ChannelLike, MemberLike


def check_role(
    member: MemberLike | None, allowed_roles: frozenset[MemberRole],
) -> MemberLike:
    """Return the member if its role is allowed, else raise ForbiddenError."""
    if member is None:
        raise ForbiddenError("Caller is not a member of this server")
    if MemberRole(member.role) not in allowed_roles:
        allowed = ", ".join(sorted(r.value for r in allowed_roles))
        raise ForbiddenError(f"Requires role: {allowed}")
    return member


def _check_admin_of_same_server(caller: MemberLike | None, target: MemberLike) -> None:
    check_role(caller, SERVER_ADMIN_ROLES)
    if caller.server_id != target.server_id:
        raise ForbiddenError("Caller is not an admin of the member's server")


def is_last_admin(member: MemberLike, admin_count: int) -> bool:
    return MemberRole(member.role) == MemberRole.ADMIN and admin_count <= 1


def validate_role_change(
    caller: MemberLike | None,
    target: MemberLike,
    new_role: MemberRole,
    admin_count: int,
) -> None:
    """Caller must be an ADMIN of the target's server; last ADMIN keeps its role."""
    _check_admin_of_same_server(caller, target)
    if new_role != MemberRole.ADMIN and is_last_admin(target, admin_count):
        raise LastAdminError()


def validate_member_removal(
    caller: MemberLike | None, target: MemberLike, admin_count: int,
) -> None:
    """Caller must be an ADMIN of the target's server; last ADMIN stays."""
    _check_admin_of_same_server(caller, target)
    if is_last_admin(target, admin_count):
        raise LastAdminError()


def validate_leave(
    member: MemberLike | None, admin_count: int, member_count: int,
) -> None:
    """The sole ADMIN cannot leave others behind; it must hand over or delete the server."""
    if member is None or member_count <= 1:
        return
    if is_last_admin(member, admin_count):
        raise LastAdminError()


def validate_channel_deletion(channel: ChannelLike, profile_id: int) -> None:
    """Only the creator may delete a channel, and never the default one."""
    if channel.name == DEFAULT_CHANNEL_NAME:
        raise ProtectedChannelError(channel.name)
    if channel.profile_id != profile_id:
        raise ResourceNotFoundError("Channel", channel.id)


def validate_channel_name(name: str) -> str:
    """Reject names that would shadow the default channel."""
    if name.strip().lower() == DEFAULT_CHANNEL_NAME:
        raise InvalidInputError(
            f"Channel name '{DEFAULT_CHANNEL_NAME}' is reserved", "name",
        )
    return name
