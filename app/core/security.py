from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import TokenExpired, Unauthenticated

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """Sign `data` into a JWT that expires `expires_delta` after `issued_at` (default 24h from now)."""
    to_encode = data.copy()
    issued_at = issued_at or datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"iat": issued_at, "exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    if not token:
        raise Unauthenticated("Authentication token is required")
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise Unauthenticated()


def issue_token(user_id: str, issued_at: Optional[datetime] = None) -> str:
    return create_access_token(data={"sub": user_id}, issued_at=issued_at)


def verify_token(token: str) -> str:
    """Return the user id embedded in `token`."""
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid authentication token")
    return user_id
