from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status

from cartapi.services.auth import AccessKeyNotFound, AuthClient, key_from_header


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.auth_client


async def get_current_user_id(
    authorisation: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
    auth_client: AuthClient = Depends(get_auth_client),
) -> int:
    """Resolve the caller's user id from the Authorisation header"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="incorrect access_key",
        headers={"WWW-Authenticate": "Key"},
    )
    parsed = key_from_header(authorisation or authorization)
    if parsed is None:
        raise credentials_exception

    scheme, credential = parsed
    try:
        if scheme == "Bearer":
            access_key = auth_client.verify_token(credential)
        else:
            access_key = auth_client.verify_key(credential)
    except AccessKeyNotFound:
        raise credentials_exception

    return access_key.user_id
