"""
Shared FastAPI dependencies.

Authentication runs here, before any protected handler: requests without a
valid bearer access token are rejected with 401.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from buildings_api.lib.security import decode_access_token
from buildings_api.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None:
        raise _unauthorized("No token, authorization denied")

    user = decode_access_token(credentials.credentials)
    if user is None:
        logger.info("Rejected bearer token")
        raise _unauthorized("Token is not valid")

    return user
