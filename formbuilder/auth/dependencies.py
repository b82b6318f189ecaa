from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .models import User
from .security import decode_access_token
from ..exceptions import UnauthorizedException
from ..storage import Storage, get_storage

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    storage: Storage = Depends(get_storage),
) -> User:
    """
    Resolves the bearer token to a stored user. Any failure (no header,
    bad signature, expired token, deleted user) is a plain 401.
    """
    if credentials is None:
        raise UnauthorizedException()

    user_id = decode_access_token(credentials.credentials, request.app.state.settings)
    if user_id is None:
        raise UnauthorizedException()

    user = await storage.get_user(user_id)
    if user is None:
        raise UnauthorizedException()

    return user
