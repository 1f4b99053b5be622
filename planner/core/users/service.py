# planner/core/users/service.py

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from planner.core.auth.security import hash_password, verify_password
from planner.core.users.models import User

log = logging.getLogger(__name__)


class UserAlreadyExistsError(Exception):
    """Raised when registering an email or username that is already taken."""


class InvalidCredentialsError(Exception):
    """Raised when a login does not match any active user."""


class UsersService:
    """
    Async service for registering and authenticating calendar owners.
    """
    model = User

    def __init__(self, db_session: AsyncSession):
        """
        Args:
            db_session (AsyncSession): Active SQLAlchemy session.
        """
        self.db: AsyncSession = db_session

    async def register(
        self,
        email: str,
        username: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """
        Creates a new user with a bcrypt password hash.

        Raises:
            UserAlreadyExistsError: if the email or the username is already used.
        """
        email = email.strip().lower()
        stmt = select(User).where(or_(User.email == email, User.username == username))
        existing = (await self.db.scalars(stmt)).first()
        if existing is not None:
            field = "Email" if existing.email == email else "Username"
            log.info("Registration rejected: %s already exists (%s)", field, username)
            raise UserAlreadyExistsError(f"{field} already exists")

        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        log.info("Registered new user: %r", user)
        return user

    async def authenticate(self, username_or_email: str, password: str) -> User:
        """
        Finds a user by username or email and verifies the password.

        Raises:
            InvalidCredentialsError: on unknown login, wrong password or inactive user.
        """
        login = username_or_email.strip()
        stmt = select(User).where(or_(User.username == login, User.email == login.lower()))
        user = (await self.db.scalars(stmt)).first()
        if user is None or not verify_password(password, user.password_hash):
            log.info("Failed login attempt for '%s'", login)
            raise InvalidCredentialsError("Invalid credentials")
        if not user.is_active:
            log.warning("Login attempt by inactive user %s", user.id)
            raise InvalidCredentialsError("Invalid credentials")
        log.debug("User %s authenticated", user.id)
        return user

    async def get_user(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)
