"""Member Service: role changes and removal of server members.

Invariants:
    - The caller must be an ADMIN member of the target member's server
    - The last ADMIN of a server can be neither demoted nor removed
    - Caller and target membership rows are read FOR UPDATE, in the same
      transaction as the write, so two admins cannot demote each other at once
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guildhall.core.domain_types import MemberId, MemberRole
from guildhall.core.enforce_roles import validate_member_removal, validate_role_change
from guildhall.core.errors import ResourceNotFoundError
from guildhall.models.member import Member
from guildhall.models.server import Server
from guildhall.services.authorization import (
    count_admins, find_membership, load_server, resolve_caller,
)

logger = logging.getLogger(__name__)


class MemberService:
    """Membership mutations guarded by ADMIN role."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_member_for_update(self, member_id: MemberId) -> Member:
        result = await self.db.execute(
            select(Member).where(Member.id == member_id).with_for_update(),
        )
        member = result.scalar_one_or_none()
        if member is None:
            raise ResourceNotFoundError("Member", member_id)
        return member

    async def change_member_role(
        self, member_id: MemberId, role: MemberRole, caller_email: str,
    ) -> Server:
        profile = await resolve_caller(self.db, caller_email)
        target = await self._get_member_for_update(member_id)
        caller = await find_membership(
            self.db, target.server_id, profile.id, for_update=True,
        )
        validate_role_change(
            caller, target, role, await count_admins(self.db, target.server_id),
        )

        target.role = role
        await self.db.commit()

        logger.info(
            f"Member role changed to {role.value}",
            extra={
                "member_id": target.id, "server_id": target.server_id,
                "profile_id": profile.id,
            },
        )
        return await load_server(self.db, target.server_id)

    async def delete_member(self, member_id: MemberId, caller_email: str) -> Server:
        profile = await resolve_caller(self.db, caller_email)
        target = await self._get_member_for_update(member_id)
        caller = await find_membership(
            self.db, target.server_id, profile.id, for_update=True,
        )
        validate_member_removal(
            caller, target, await count_admins(self.db, target.server_id),
        )

        server_id = target.server_id
        await self.db.delete(target)
        await self.db.commit()

        logger.info(
            "Member removed",
            extra={
                "member_id": member_id, "server_id": server_id,
                "profile_id": profile.id,
            },
        )
        return await load_server(self.db, server_id)
