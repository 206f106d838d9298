"""Identity Provider: verifies bearer tokens and yields the caller's claims.

Invariants:
    - Any verification failure raises UnauthenticatedError (never returns partial claims)
    - A token without an email claim is rejected: email is how profiles are resolved
    - Audience is only checked when one is configured

Design Decisions:
    - PyJWT with a public key (RS256 by default): tokens are minted by the auth
      provider, this service never holds a signing secret in production
    - Verifier is a plain object satisfying core IdentityVerifier: tests swap in
      an HS256 verifier through the FastAPI dependency
"""

import logging

import jwt

from guildhall.core.errors import UnauthenticatedError
from guildhall.core.repository_protocols import IdentityClaims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token part of an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    if authorization[:len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class JwtIdentityVerifier:
    """Verify JWTs against a configured key."""

    def __init__(
        self,
        key: str,
        algorithms: list[str],
        audience: str | None = None,
        issuer: str | None = None,
        leeway: int = 0,
    ):
        self._key = key
        self._algorithms = list(algorithms)
        self._audience = audience
        self._issuer = issuer
        self._leeway = leeway

    def verify(self, token: str) -> IdentityClaims:
        if not self._key:
            logger.error("JWT verification key is not configured")
            raise UnauthenticatedError()
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=self._algorithms,
                audience=self._audience,
                issuer=self._issuer,
                leeway=self._leeway,
                options={"verify_aud": self._audience is not None},
            )
        except jwt.PyJWTError as e:
            logger.info(f"Rejected bearer token: {e}")
            raise UnauthenticatedError()

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise UnauthenticatedError("Token carries no email claim")
        subject = str(payload.get("sub") or email)
        return IdentityClaims(subject=subject, email=email, claims=payload)
