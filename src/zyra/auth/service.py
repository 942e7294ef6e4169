"""Account service: registration, credential checks and profile changes."""

from datetime import timedelta

from zyra.common.config import ZyraSettings
from zyra.common.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from zyra.common.logging import get_logger
from zyra.common.models import utcnow
from zyra.common.security import hash_password, verify_password
from zyra.store.base import RecordStore
from zyra.store.records import User

logger = get_logger("auth")

_PROFILE_FIELDS = ("full_name", "email", "preferred_language", "image_url")


class AuthService:
    """User account operations."""

    def __init__(self, settings: ZyraSettings, store: RecordStore):
        self.settings = settings
        self.store = store

    async def register(self, email: str, password: str, full_name: str) -> User:
        """Create a trial account. Emails are unique case-insensitively."""
        if await self.store.get_user_by_email(email) is not None:
            raise ConflictError("User already exists")

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            trial_end_date=utcnow() + timedelta(days=self.settings.trial_days),
        )
        await self.store.create_user(user)
        logger.info("User registered", extra={"user_id": user.id, "operation": "register"})
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.store.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return user

    async def update_profile(self, user: User, **updates) -> User:
        changes = {
            k: v for k, v in updates.items()
            if k in _PROFILE_FIELDS and v is not None
        }
        if not changes:
            return user

        new_email = changes.get("email")
        if new_email and new_email.lower() != user.email:
            existing = await self.store.get_user_by_email(new_email)
            if existing is not None and existing.id != user.id:
                raise ConflictError("Email already in use")

        updated = await self.store.update_user(user.id, **changes)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        await self.store.update_user(user.id, password_hash=hash_password(new_password))
        logger.info("Password changed", extra={"user_id": user.id, "operation": "change_password"})
