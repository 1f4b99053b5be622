# planner/core/auth/security.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from planner.config import settings
from planner.core.users.models import User
from planner.db.base import get_async_db_session

from .schemas import TokenData

log = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# --- Passwords ---

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


# --- JWT ---

def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Creates a signed JWT access token.

    Args:
        data (dict): Claims to encode. The ``user_id`` key is moved to ``sub``.
        expires_delta (timedelta | None, optional): Token lifetime.
            Defaults to ``settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES``.

    Returns:
        str: Encoded JWT.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    if "user_id" in to_encode:
        to_encode["sub"] = str(to_encode.pop("user_id"))
    elif "sub" not in to_encode:
        raise ValueError("Missing 'user_id' or 'sub' in data for JWT")

    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    log.debug("Created JWT token for sub: %s", to_encode["sub"])
    return encoded_jwt


def verify_token(token: str, credentials_exception: HTTPException) -> TokenData:
    """
    Verifies a JWT and returns the data it carries.

    Raises:
        HTTPException: ``credentials_exception`` if the token is invalid or expired.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        subject: str | None = payload.get("sub")
        if subject is None:
            log.warning("Token verification failed: 'sub' claim missing.")
            raise credentials_exception
        token_data = TokenData(user_id=int(subject))
    except JWTError as e:
        log.warning("Token verification failed: JWTError - %s", e)
        raise credentials_exception from e
    except (ValidationError, ValueError) as e:
        log.warning("Token verification failed: bad subject - %s", e)
        raise credentials_exception from e

    log.debug("Token verified successfully for user_id: %s", token_data.user_id)
    return token_data


# --- FastAPI dependencies ---

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_db_session),
) -> User:
    """
    Resolves the authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is invalid or the user is unknown or inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = verify_token(token, credentials_exception)

    user = await db.get(User, token_data.user_id)
    if user is None or not user.is_active:
        log.warning("User %s from a valid token not found or inactive.", token_data.user_id)
        raise credentials_exception

    return user


async def get_current_user_id(current_user: User = Depends(get_current_user)) -> int:
    """FastAPI dependency returning only the current user's id."""
    return current_user.id
