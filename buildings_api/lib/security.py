"""
Access token verification.

Tokens are issued by the identity service that shares ``SECRET_KEY`` with
this API; nothing here issues or refreshes them.
"""
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from buildings_api.lib.config import settings
from buildings_api.schemas.auth import CurrentUser


def decode_access_token(token: str) -> Optional[CurrentUser]:
    """Return the token's user, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None

    # Refresh tokens signed with the same key must not unlock the API
    if payload.get("type", "access") != "access":
        return None

    try:
        return CurrentUser.model_validate(payload)
    except ValidationError:
        return None
