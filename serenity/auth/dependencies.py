from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from serenity.auth.tokens import decode_access_token
from serenity.core.errors import AuthenticationError

security = HTTPBearer(auto_error=False)


async def require_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Mutations: no identity -> 401."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return decode_access_token(credentials.credentials)


async def optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Queries: no identity -> None, and the route answers with an empty result."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except AuthenticationError:
        return None
