"""Authorization Helpers: caller resolution, membership lookup and role gates.

Invariants:
    - require_role is the single entry point for role-guarded operations
    - A server is visible only to its members; invisible reads as SERVER_NOT_FOUND
    - Lookups take the caller's AsyncSession, so checks and the mutation that
      follows share one transaction
    - for_update=True locks the membership rows read (no-op on SQLite)

Design Decisions:
    - Async shell around the pure rules in core/enforce_roles.py: this module
      does the IO, the rules decide
    - load_server always re-reads with populate_existing: after a commit the
      identity map may hold collections that no longer match the database
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guildhall.core.domain_types import MemberRole, ProfileId, ServerId
from guildhall.core.enforce_roles import check_role
from guildhall.core.errors import ForbiddenError, ResourceNotFoundError
from guildhall.models.member import Member
from guildhall.models.profile import Profile
from guildhall.models.server import Server

logger = logging.getLogger(__name__)


async def resolve_caller(db: AsyncSession, email: str) -> Profile:
    """Map a verified email to its profile or raise PROFILE_NOT_FOUND."""
    result = await db.execute(select(Profile).where(Profile.email == email))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise ResourceNotFoundError("Profile", email)
    return profile


async def find_membership(
    db: AsyncSession,
    server_id: ServerId,
    profile_id: ProfileId,
    for_update: bool = False,
) -> Member | None:
    query = (
        select(Member)
        .where(Member.server_id == server_id)
        .where(Member.profile_id == profile_id)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def require_role(
    db: AsyncSession,
    server_id: ServerId,
    profile_id: ProfileId,
    allowed_roles: frozenset[MemberRole],
    for_update: bool = False,
) -> Member:
    """Return the caller's membership if its role is allowed, else raise FORBIDDEN."""
    member = await find_membership(db, server_id, profile_id, for_update)
    try:
        return check_role(member, allowed_roles)
    except ForbiddenError:
        logger.info(
            "Role check failed",
            extra={"server_id": server_id, "profile_id": profile_id},
        )
        raise


async def count_admins(db: AsyncSession, server_id: ServerId) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Member)
        .where(Member.server_id == server_id)
        .where(Member.role == MemberRole.ADMIN)
    )
    return result.scalar_one()


async def count_members(db: AsyncSession, server_id: ServerId) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Member)
        .where(Member.server_id == server_id)
    )
    return result.scalar_one()


async def load_server(db: AsyncSession, server_id: ServerId) -> Server | None:
    """Fetch a server with fresh channels and members."""
    result = await db.execute(
        select(Server)
        .where(Server.id == server_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_visible_server(
    db: AsyncSession, server_id: ServerId, profile_id: ProfileId,
) -> Server:
    """Return the server if the profile is one of its members."""
    result = await db.execute(
        select(Server)
        .join(Member, Member.server_id == Server.id)
        .where(Server.id == server_id)
        .where(Member.profile_id == profile_id)
        .execution_options(populate_existing=True)
    )
    server = result.scalar_one_or_none()
    if server is None:
        raise ResourceNotFoundError("Server", server_id)
    return server
