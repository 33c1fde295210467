from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quizbank.core.config import settings
from quizbank.core.errors import Unauthorized

bearer = HTTPBearer(auto_error=False)

def create_token(subject: str, ttl_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = ttl_minutes if ttl_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {"sub": subject, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=ttl)).timestamp())}
    return jwt.encode(payload, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)

def verify_token(token: str) -> str:
    """Return the principal id carried by `token`, or raise Unauthorized."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY.get_secret_value(),
            algorithms=[settings.ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise Unauthorized("Invalid token")
    return sub

def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> str:
    if creds is None or not creds.credentials:
        raise Unauthorized("No token provided")
    return verify_token(creds.credentials)
