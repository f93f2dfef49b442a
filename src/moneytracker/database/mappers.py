"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal

from moneytracker.domain import entities as domain
from moneytracker.database.models import (
    User as ORMUser,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    Notification as ORMNotification,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        username=orm_user.username,
        email=orm_user.email,
        timezone=orm_user.timezone,
        email_notifications_enabled=orm_user.email_notifications_enabled,
        mail_account=domain.MailAccount(
            host=orm_user.email_imap_host,
            username=orm_user.email_imap_username,
            secret=orm_user.email_imap_password,
            port=orm_user.email_imap_port,
            enabled=orm_user.email_parsing_enabled,
        ),
        created_at=orm_user.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        description=orm_category.description,
        icon_name=orm_category.icon_name,
        color_code=orm_category.color_code,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        description=orm_transaction.description,
        amount=Decimal(orm_transaction.amount).quantize(Decimal("0.01")),
        date=orm_transaction.date,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        category_id=orm_transaction.category_id,
        source=domain.TransactionSource(orm_transaction.source),
        source_reference=orm_transaction.source_reference,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def notification_to_domain(orm_notification: ORMNotification) -> domain.Notification:
    """Convert SQLAlchemy Notification model to domain Notification entity."""
    return domain.Notification(
        id=orm_notification.id,
        user_id=orm_notification.user_id,
        type=domain.NotificationType(orm_notification.type),
        title=orm_notification.title,
        message=orm_notification.message,
        is_read=orm_notification.is_read,
        created_at=orm_notification.created_at,
        read_at=orm_notification.read_at,
    )
