"""JWT verification (and minting, for tests and service-to-service calls).

Tokens are issued by the identity provider. Every token this service
accepts carries sub (actor id), role (actor role) and tenant_id.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings

REQUIRED_CLAIMS = ("sub", "role", "tenant_id")


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified token."""

    actor_id: str
    role: str
    tenant_id: str


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT with the given claims.

    Args:
        data: Claims to encode (sub, role, tenant_id).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = datetime.now(UTC) + expires_delta
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> TokenClaims:
    """Verify a JWT and return its identity claims.

    Raises:
        ValueError: If the token is invalid, expired, or lacks sub/role/tenant_id.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    missing = [c for c in REQUIRED_CLAIMS if not payload.get(c)]
    if missing:
        raise ValueError(f"Token missing required claim(s): {', '.join(missing)}")
    return TokenClaims(
        actor_id=str(payload["sub"]),
        role=str(payload["role"]),
        tenant_id=str(payload["tenant_id"]),
    )
