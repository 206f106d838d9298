"""GraphQL Context: per-request database session, identity and collaborators.

Invariants:
    - One AsyncSession per request, released by the get_db dependency
    - Resolvers use the session only through session(): root query fields run
      concurrently and an AsyncSession must not be shared across tasks
    - The bearer token is verified at most once per request
    - SQLAlchemy errors raised inside session() roll back and surface as
      DATABASE_ERROR instead of being masked as INTERNAL_ERROR
    - Multipart limits are checked before the database session is opened

Design Decisions:
    - Collaborators arrive as FastAPI dependencies: tests swap the verifier and
      storage with app.dependency_overrides, exactly like get_db
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from guildhall.api.graphql.uploads import enforce_upload_limits
from guildhall.config import get_settings
from guildhall.core.errors import UnauthenticatedError
from guildhall.core.repository_protocols import (
    IdentityClaims, IdentityVerifier, ImageStorage,
)
from guildhall.infrastructure.database import get_db, map_database_error
from guildhall.infrastructure.identity import JwtIdentityVerifier, extract_bearer_token
from guildhall.infrastructure.image_storage import LocalImageStorage


def get_identity_verifier() -> IdentityVerifier:
    settings = get_settings()
    return JwtIdentityVerifier(
        settings.jwt_public_key,
        settings.jwt_algorithms,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )


def get_image_storage() -> ImageStorage:
    settings = get_settings()
    return LocalImageStorage(
        settings.image_dir, settings.image_base_url, settings.max_upload_bytes,
    )


class GraphQLContext(BaseContext):
    """Request-scoped state handed to every resolver."""

    def __init__(
        self,
        db: AsyncSession,
        verifier: IdentityVerifier,
        image_storage: ImageStorage,
    ):
        super().__init__()
        self.db = db
        self.verifier = verifier
        self.image_storage = image_storage
        self._identity: IdentityClaims | None = None
        self._db_lock = asyncio.Lock()

    def authenticate(self) -> IdentityClaims:
        """Verify the request's bearer token, caching the claims."""
        if self._identity is None:
            header = self.request.headers.get("authorization") if self.request else None
            token = extract_bearer_token(header)
            if token is None:
                raise UnauthenticatedError()
            self._identity = self.verifier.verify(token)
        return self._identity

    @property
    def identity(self) -> IdentityClaims:
        return self.authenticate()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._db_lock:
            try:
                yield self.db
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise map_database_error(e) from e


async def get_context(
    _uploads_checked: None = Depends(enforce_upload_limits),
    db: AsyncSession = Depends(get_db),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    image_storage: ImageStorage = Depends(get_image_storage),
) -> GraphQLContext:
    return GraphQLContext(db, verifier, image_storage)
