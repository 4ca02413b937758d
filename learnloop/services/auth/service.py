"""
Account Service

Registration and credential checks. Login sessions themselves live in
Redis (see learnloop.db.redis.SessionStore).
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnloop.db.models import User, UserPreferences
from learnloop.middleware.error_handling import AuthenticationError, ValidationError
from learnloop.services.auth.passwords import (
    get_dummy_hash,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Creates accounts and verifies credentials."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def register(
        self,
        username: Optional[str],
        password: Optional[str],
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> User:
        """
        Create an account with default preferences.

        Raises:
            ValidationError: Missing fields or the username is taken.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        if await self.get_user_by_username(username) is not None:
            raise ValidationError("Username already exists")

        user = User(
            username=username,
            password_hash=hash_password(password),
            email=email or None,
            display_name=display_name or username,
            joined_at=datetime.now(timezone.utc),
        )
        user.preferences = UserPreferences(weekly_digest_enabled=True, theme="light")
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("Username already exists")

        logger.info(f"Registered user {user.id} ({username})")
        return user

    async def authenticate(self, username: Optional[str], password: Optional[str]) -> User:
        """
        Check credentials and stamp last_login_at.

        Raises:
            AuthenticationError: Unknown user or wrong password.
        """
        user = await self.get_user_by_username(username) if username else None

        if user is None:
            # Equalize timing with the known-user path
            verify_password(password or "", get_dummy_hash())
            raise AuthenticationError("Incorrect username or password")

        if not verify_password(password or "", user.password_hash):
            raise AuthenticationError("Incorrect username or password")

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.flush()
        return user

    # ===========================================
    # Preferences
    # ===========================================

    async def get_preferences(self, user_id: int) -> UserPreferences:
        """Preferences of a user, created with defaults if missing."""
        result = await self.db.execute(
            select(UserPreferences).where(UserPreferences.user_id == user_id)
        )
        preferences = result.scalar_one_or_none()
        if preferences is None:
            preferences = UserPreferences(
                user_id=user_id, weekly_digest_enabled=True, theme="light"
            )
            self.db.add(preferences)
            await self.db.flush()
        return preferences

    async def update_preferences(
        self,
        user_id: int,
        weekly_digest_enabled: Optional[bool] = None,
        theme: Optional[str] = None,
    ) -> UserPreferences:
        preferences = await self.get_preferences(user_id)
        if weekly_digest_enabled is not None:
            preferences.weekly_digest_enabled = weekly_digest_enabled
        if theme is not None:
            preferences.theme = theme
        await self.db.flush()
        return preferences
