"""Security: JWT verification."""

from app.infrastructure.security.jwt import TokenClaims, create_access_token, verify_token

__all__ = [
    "TokenClaims",
    "create_access_token",
    "verify_token",
]
