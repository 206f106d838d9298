"""Boundary Protocols: contracts between core rules and the IO shell.

Invariants:
    - Core NEVER imports from services/, api/ or infrastructure/
    - Token verification and file storage are reached only through these Protocols
    - Implementations provided by the shell via FastAPI dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - MemberLike/ChannelLike let the pure rules run on ORM rows or test doubles
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from guildhall.core.domain_types import MemberRole


class MemberLike(Protocol):
    """Structural contract for a membership row."""
    id: int
    profile_id: int
    server_id: int
    role: MemberRole


class ChannelLike(Protocol):
    """Structural contract for a channel row."""
    id: int
    name: str
    profile_id: int
    server_id: int


@dataclass(frozen=True)
class IdentityClaims:
    """Verified token payload."""
    subject: str
    email: str
    claims: dict[str, Any] = field(default_factory=dict)


class IdentityVerifier(Protocol):
    """Contract for bearer token verification."""
    def verify(self, token: str) -> IdentityClaims: ...


class UploadLike(Protocol):
    """What storage needs from an uploaded file (Starlette UploadFile fits)."""
    filename: str | None
    async def read(self, size: int = -1) -> bytes: ...


class ImageStorage(Protocol):
    """Contract for image persistence."""
    async def store(self, upload: UploadLike, filename: str | None = None) -> str: ...
    async def discard(self, url: str) -> None: ...
