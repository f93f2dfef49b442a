"""CLI helpers for resolving users and building services from the context."""

from __future__ import annotations

import click
from moneytracker.domain.email_ingestion import EmailIngestionService
from moneytracker.domain.entities import User
from moneytracker.domain.errors import NotFoundError
from moneytracker.domain.notification import NotificationService
from moneytracker.domain.user import UserService


def resolve_user_or_exit(ctx: click.Context, user_service: UserService, user: str) -> User:
    """Resolve a username or numeric user ID, or exit with a CLI error.

    A username wins over an ID when both would match.
    """
    try:
        return user_service.require_user_by_username(user)
    except NotFoundError as exc:
        if user.isdigit():
            found = user_service.get_user(int(user))
            if found is not None:
                return found
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def notification_service(ctx: click.Context) -> NotificationService:
    """Notification service over the context's database.

    ``ctx.obj["notification_channels"]`` overrides the default channels.
    """
    return NotificationService(ctx.obj["db"], channels=ctx.obj.get("notification_channels"))


def ingestion_service(ctx: click.Context) -> EmailIngestionService:
    """Email ingestion service over the context's database.

    ``ctx.obj["mailbox_opener"]`` overrides the IMAP connection.
    """
    return EmailIngestionService(
        ctx.obj["db"],
        mailbox_opener=ctx.obj.get("mailbox_opener"),
        notifications=notification_service(ctx),
    )
