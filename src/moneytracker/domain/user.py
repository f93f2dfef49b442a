"""User and mail configuration domain service."""

from typing import Any, Optional

from dateutil import tz

from moneytracker.config import settings
from moneytracker.database.base import Database
from moneytracker.domain.entities import MailAccount, MailConfig, User as UserEntity
from moneytracker.domain.errors import (
    ConflictError,
    NotConfiguredError,
    NotFoundError,
    ValidationError,
    mail_credentials_missing,
    mail_not_enabled,
    user_not_found,
    username_not_found,
)


class UserService:
    """Service for users and their mailbox settings."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(
        self,
        username: str,
        email: Optional[str] = None,
        timezone: Optional[str] = None,
        email_notifications_enabled: bool = True,
    ) -> int:
        """Create a user.

        Args:
            username: Unique username
            email: Optional address for notification emails
            timezone: IANA zone name (defaults to settings.default_timezone)
            email_notifications_enabled: Whether notifications are also emailed

        Returns:
            User ID

        Raises:
            ValidationError: If username is blank or timezone is unknown
            ConflictError: If username already exists
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username cannot be empty")

        timezone = timezone or settings.default_timezone
        if tz.gettz(timezone) is None:
            raise ValidationError(f"Unknown timezone '{timezone}'")

        if self.db.get_user_by_username(username) is not None:
            raise ConflictError(f"User '{username}' already exists")

        return self.db.create_user(
            username=username,
            email=email,
            timezone=timezone,
            email_notifications_enabled=email_notifications_enabled,
        )

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def require_user(self, user_id: int) -> UserEntity:
        """Get user by ID or raise NotFoundError."""
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def get_user_by_username(self, username: str) -> Optional[UserEntity]:
        """Get user by username."""
        return self.db.get_user_by_username(username)

    def require_user_by_username(self, username: str) -> UserEntity:
        """Get user by username or raise NotFoundError."""
        user = self.db.get_user_by_username(username)
        if user is None:
            raise NotFoundError(username_not_found(username))
        return user

    def list_users(self) -> list[UserEntity]:
        """List all users."""
        return self.db.list_users()

    def list_mail_enabled_users(self) -> list[UserEntity]:
        """List users with mail ingestion switched on."""
        return self.db.list_users(mail_enabled_only=True)

    def get_mail_config(self, user_id: int) -> MailConfig:
        """Read a user's mail configuration. The secret is never returned.

        Raises:
            NotFoundError: If user doesn't exist
        """
        account = self.require_user(user_id).mail_account
        return MailConfig(
            enabled=account.enabled,
            host=account.host,
            username=account.username,
            port=account.port,
            has_secret=bool(account.secret),
        )

    def update_mail_config(
        self,
        user_id: int,
        enabled: Optional[bool] = None,
        host: Optional[str] = None,
        username: Optional[str] = None,
        secret: Optional[str] = None,
        port: Optional[int] = None,
    ) -> MailConfig:
        """Update a user's mail configuration. Fields left as None are unchanged.

        Returns:
            The updated configuration (without the secret)

        Raises:
            NotFoundError: If user doesn't exist
            ValidationError: If port is out of range or a text field is blank
        """
        self.require_user(user_id)

        if port is not None and not 1 <= port <= 65535:
            raise ValidationError(f"Invalid IMAP port {port}")
        for field, value in (("host", host), ("username", username), ("secret", secret)):
            if value is not None and not value.strip():
                raise ValidationError(f"IMAP {field} cannot be empty")

        self.db.update_mail_account(
            user_id=user_id,
            enabled=enabled,
            host=host.strip() if host else host,
            username=username.strip() if username else username,
            secret=secret,
            port=port,
        )
        return self.get_mail_config(user_id)

    def disable_mail(self, user_id: int) -> MailConfig:
        """Switch mail ingestion off, keeping the stored credentials."""
        return self.update_mail_config(user_id, enabled=False)

    def mail_status(self, user_id: int) -> dict[str, Any]:
        """Summarize whether mail ingestion is enabled and fully configured."""
        account = self.require_user(user_id).mail_account
        return {
            "enabled": account.enabled,
            "configured": bool(account.host and account.username and account.secret),
            "host": account.host,
            "username": account.username,
        }

    def require_mail_configured(self, user_id: int) -> MailAccount:
        """Return the user's mail account if ingestion can run for it.

        Raises:
            NotFoundError: If user doesn't exist
            NotConfiguredError: If ingestion is disabled or credentials are incomplete
        """
        account = self.require_user(user_id).mail_account
        if not account.enabled:
            raise NotConfiguredError(mail_not_enabled())
        if not account.is_configured:
            raise NotConfiguredError(mail_credentials_missing())
        return account
