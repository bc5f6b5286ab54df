# shopledger/core/jwt.py
#
# Bearer tokens carry the user id as `sub` plus username and role for the
# client. The role claim is informational; access checks reload the user row.

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from shopledger.core.config import settings

TOKEN_TYPE = "access"


def create_access_token(user, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "exp": expire,
        "type": TOKEN_TYPE,
    }

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Return the claims of a valid, unexpired access token, else None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE or not payload.get("sub"):
        return None

    return payload
