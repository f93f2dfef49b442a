"""Notification domain service and delivery channels.

A notification is always persisted first; delivery channels run afterwards
and a failing channel is logged, never raised. Callers such as the ingestion
service can therefore notify without risking the write they just made.
"""

import smtplib
from abc import ABC, abstractmethod
from datetime import datetime, UTC
from email.message import EmailMessage
from typing import Iterable, Optional

import structlog

from moneytracker.config import Settings, settings as default_settings
from moneytracker.database.base import Database
from moneytracker.domain.entities import (
    Notification as NotificationEntity,
    NotificationType,
    User,
)
from moneytracker.domain.errors import NotFoundError, user_not_found

logger = structlog.get_logger()


class NotificationChannel(ABC):
    """One way of delivering a stored notification to its user."""

    name = "channel"

    @abstractmethod
    def deliver(self, user: User, notification: NotificationEntity) -> None:
        """Deliver a notification. May raise; the service contains failures."""
        pass


class LogChannel(NotificationChannel):
    """Emits the in-app push event to the application log."""

    name = "push"

    def deliver(self, user: User, notification: NotificationEntity) -> None:
        logger.info(
            "notification_pushed",
            user_id=user.id,
            notification_id=notification.id,
            type=notification.type.value,
            title=notification.title,
        )


class SmtpEmailChannel(NotificationChannel):
    """Sends notifications by email to users who opted in."""

    name = "email"

    def __init__(self, config: Optional[Settings] = None):
        """Initialize the channel.

        Args:
            config: Settings holding the SMTP connection details
        """
        self.config = config or default_settings

    @property
    def enabled(self) -> bool:
        return bool(self.config.smtp_host)

    def deliver(self, user: User, notification: NotificationEntity) -> None:
        if not self.enabled or not user.email_notifications_enabled or not user.email:
            return

        msg = EmailMessage()
        msg["From"] = self.config.smtp_sender
        msg["To"] = user.email
        msg["Subject"] = notification.title
        msg.set_content(notification.message)

        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout_seconds,
        ) as smtp:
            if self.config.smtp_use_tls:
                smtp.starttls()
            if self.config.smtp_username:
                smtp.login(self.config.smtp_username, self.config.smtp_password)
            smtp.send_message(msg)


def default_channels() -> list[NotificationChannel]:
    """Channels used when none are given: push log plus optional email."""
    return [LogChannel(), SmtpEmailChannel()]


class NotificationService:
    """Service for creating, delivering and reading notifications."""

    def __init__(self, db: Database, channels: Optional[Iterable[NotificationChannel]] = None):
        """Initialize notification service.

        Args:
            db: Database instance
            channels: Delivery channels (defaults to default_channels())
        """
        self.db = db
        self.channels = list(channels) if channels is not None else default_channels()

    def create_notification(
        self, user_id: int, type: NotificationType, title: str, message: str
    ) -> NotificationEntity:
        """Store a notification and deliver it through every channel.

        Args:
            user_id: Recipient user ID
            type: Notification type
            title: Short title
            message: Body text

        Returns:
            The stored notification

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        notification_id = self.db.create_notification(
            user_id=user_id, type=type, title=title, message=message
        )
        notification = self.db.get_notification(notification_id)

        for channel in self.channels:
            try:
                channel.deliver(user, notification)
            except Exception as e:
                logger.warning(
                    "notification_delivery_failed",
                    channel=channel.name,
                    user_id=user_id,
                    notification_id=notification_id,
                    error=str(e),
                )

        return notification

    def list_notifications(self, user_id: int, unread_only: bool = False) -> list[NotificationEntity]:
        """List a user's notifications, newest first."""
        return self.db.list_notifications(user_id, unread_only=unread_only)

    def unread_count(self, user_id: int) -> int:
        """Number of unread notifications for a user."""
        return len(self.db.list_notifications(user_id, unread_only=True))

    def mark_read(self, user_id: int, notification_id: int) -> None:
        """Mark one of a user's notifications read.

        Raises:
            NotFoundError: If the notification doesn't exist or belongs to someone else
        """
        notification = self.db.get_notification(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError(f"Notification {notification_id} not found")
        self.db.mark_notifications_read(
            user_id, read_at=datetime.now(UTC), notification_id=notification_id
        )

    def mark_all_read(self, user_id: int) -> int:
        """Mark all of a user's notifications read. Returns how many changed."""
        return self.db.mark_notifications_read(user_id, read_at=datetime.now(UTC))
