from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from jose import jwt, JWTError

from cartapi.core.config import DEFAULT_SECRET_KEY, settings


class AccessKeyNotFound(Exception):
    pass


@dataclass(frozen=True)
class AccessKey:
    key: str
    user_id: int


def key_from_header(value: Optional[str]) -> Optional[tuple]:
    """Split an 'Authorisation: <Scheme> <credential>' header, None when malformed."""
    parts = (value or "").split()
    if len(parts) != 2 or parts[0] not in ("Key", "Bearer"):
        return None
    return parts[0], parts[1]


class AuthClient:
    """Verifies the credentials a caller presents and resolves them to a user.

    Access keys stand in for the auth service, which hands them out; the table
    comes from settings. Bearer tokens are JWTs signed with SECRET_KEY whose
    `sub` claim is the user id; they are refused until SECRET_KEY is set.
    """

    def __init__(self, access_keys: Dict[str, int] = None, secret_key: str = None, algorithm: str = None):
        keys = settings.ACCESS_KEYS if access_keys is None else access_keys
        self._access_keys = {key: AccessKey(key=key, user_id=user_id) for key, user_id in keys.items()}
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM

    def verify_key(self, key: str) -> AccessKey:
        access_key = self._access_keys.get(key)
        if access_key is None or not access_key.user_id:
            raise AccessKeyNotFound(key)
        return access_key

    def verify_token(self, token: str) -> AccessKey:
        # Tokens are only trusted once SECRET_KEY is configured
        if self.secret_key == DEFAULT_SECRET_KEY:
            raise AccessKeyNotFound(token)
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            user_id = int(payload.get("sub") or 0)
        except (JWTError, TypeError, ValueError) as exc:
            raise AccessKeyNotFound(token) from exc
        if not user_id:
            raise AccessKeyNotFound(token)
        return AccessKey(key=token, user_id=user_id)

    def create_access_token(self, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=7))
        to_encode = {"sub": str(user_id), "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
