"""
Password hashing and JWT handling.

Access tokens carry the user id (`sub`), the tenant the user belongs to and
the user's role codes at issue time. Refresh tokens carry only `sub` and the
tenant; roles are re-read when a refresh is exchanged.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence

from jose import JWTError, jwt
from passlib.context import CryptContext

from mes_api.core.settings import get_app_settings

ACCESS = "access"
REFRESH = "refresh"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def _sign(claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    settings = get_app_settings()
    issued_at = datetime.now(tz=timezone.utc)
    body = {**claims, "type": token_type, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(body, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(
    subject: str,
    tenant_id: str,
    roles: Optional[Sequence[str]] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Signed access token for `subject` (a user id) within `tenant_id`."""
    minutes = expires_minutes or get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    claims = {"sub": subject, "tenant_id": tenant_id, "roles": list(roles or [])}
    return _sign(claims, ACCESS, timedelta(minutes=minutes))


# PUBLIC_INTERFACE
def create_refresh_token(subject: str, tenant_id: str, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes or get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _sign({"sub": subject, "tenant_id": tenant_id}, REFRESH, timedelta(minutes=minutes))


# PUBLIC_INTERFACE
def issue_token_pair(subject: str, tenant_id: str, roles: Sequence[str]) -> Dict[str, str]:
    """Access and refresh token for one login or refresh exchange."""
    return {
        "token_type": "bearer",
        "access_token": create_access_token(subject, tenant_id, roles),
        "refresh_token": create_refresh_token(subject, tenant_id),
    }


# PUBLIC_INTERFACE
def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Decode and validate a JWT.

    Raises:
        JWTError: bad signature, expired, or not of `expected_type` when given.
    """
    settings = get_app_settings()
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if expected_type is not None and claims.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return claims
