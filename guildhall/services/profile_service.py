"""Profile Service: create and fetch profiles.

Invariants:
    - One profile per email; creating an existing one returns it unchanged
    - No authorization beyond "caller is authenticated" (enforced by the API layer)
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildhall.core.domain_types import ProfileId
from guildhall.core.errors import ResourceNotFoundError
from guildhall.models.profile import Profile

logger = logging.getLogger(__name__)


class ProfileService:
    """Profile persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Profile | None:
        result = await self.db.execute(
            select(Profile).where(Profile.email == email),
        )
        return result.scalar_one_or_none()

    async def get_profile_by_email(self, email: str) -> Profile:
        profile = await self.find_by_email(email)
        if profile is None:
            raise ResourceNotFoundError("Profile", email)
        return profile

    async def get_profile_by_id(self, profile_id: ProfileId) -> Profile:
        profile = await self.db.get(Profile, profile_id)
        if profile is None:
            raise ResourceNotFoundError("Profile", profile_id)
        return profile

    async def create_profile(
        self,
        name: str,
        email: str,
        image_url: str | None = None,
        user_id: str | None = None,
    ) -> Profile:
        """Create the profile for a verified identity, or return the existing one."""
        existing = await self.find_by_email(email)
        if existing is not None:
            return existing

        profile = Profile(
            name=name, email=email, image_url=image_url, user_id=user_id,
        )
        self.db.add(profile)
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent first login for the same email won the insert
            await self.db.rollback()
            existing = await self.find_by_email(email)
            if existing is None:
                raise
            return existing

        logger.info("Profile created", extra={"profile_id": profile.id})
        return profile
