import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.config import settings
from content_shield.database import get_db
from content_shield.exceptions import InvalidTokenError, PermissionDeniedError
from content_shield.models.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_COOKIE_NAME = "access_token"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a JWT carrying *data*; a 'sub' claim holding the user's email is required."""
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (email) in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the email in the token's 'sub' claim."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise InvalidTokenError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {e}")
        raise InvalidTokenError()

    email = payload.get("sub")
    if email is None:
        logger.warning("Token is missing 'sub' claim")
        raise InvalidTokenError()
    return email


def extract_token(request: Request) -> str | None:
    """Bearer header first, then the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return request.cookies.get(TOKEN_COOKIE_NAME)


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    token = extract_token(request)
    if not token:
        raise InvalidTokenError("Not authenticated")

    email = decode_access_token(token)
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user is None:
        logger.warning(f"Token subject {email!r} does not match any user")
        raise InvalidTokenError()

    request.state.user = user
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise PermissionDeniedError("Admin privileges required", action="admin")
    return current_user
