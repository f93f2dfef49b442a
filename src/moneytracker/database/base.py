"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from moneytracker.domain.entities import (
    User,
    Category,
    Transaction,
    Notification,
    NotificationType,
    PaymentMethod,
    TransactionSource,
)


class Database(ABC):
    """Abstract database interface for moneytracker.

    Implementations must enforce two uniqueness constraints and report a
    violation as ``ConflictError``: category names per user, and source
    references of email-parsed transactions per user
    (``DuplicateTransactionError``).
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the calling thread's session."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(
        self,
        username: str,
        email: Optional[str],
        timezone: str,
        email_notifications_enabled: bool = True,
    ) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        pass

    @abstractmethod
    def list_users(self, mail_enabled_only: bool = False) -> list[User]:
        """List users, optionally only those with mail ingestion enabled."""
        pass

    @abstractmethod
    def update_mail_account(
        self,
        user_id: int,
        enabled: Optional[bool] = None,
        host: Optional[str] = None,
        username: Optional[str] = None,
        secret: Optional[str] = None,
        port: Optional[int] = None,
    ) -> None:
        """Update the user's mail account. None leaves a field unchanged."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        icon_name: Optional[str] = None,
        color_code: Optional[str] = None,
    ) -> int:
        """Create a category. Returns category ID.

        Raises:
            ConflictError: If the user already has a category with this name
        """
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, user_id: int, name: str) -> Optional[Category]:
        """Get a user's category by exact name."""
        pass

    @abstractmethod
    def list_categories(self, user_id: int) -> list[Category]:
        """List a user's categories ordered by name."""
        pass

    @abstractmethod
    def get_category_transaction_count(self, category_id: int) -> int:
        """Count transactions referencing a category."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: int,
        description: str,
        amount: Decimal,
        date: date,
        payment_method: PaymentMethod,
        category_id: int,
        source: TransactionSource,
        source_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID.

        Raises:
            DuplicateTransactionError: If an email-parsed transaction with the
                same source reference already exists for the user
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def source_reference_exists(
        self, user_id: int, source: TransactionSource, source_reference: str
    ) -> bool:
        """Check if the user already has a transaction from this source reference."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        source: Optional[TransactionSource] = None,
    ) -> list[Transaction]:
        """List a user's transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Notification operations
    @abstractmethod
    def create_notification(
        self, user_id: int, type: NotificationType, title: str, message: str
    ) -> int:
        """Create an unread notification. Returns notification ID."""
        pass

    @abstractmethod
    def get_notification(self, notification_id: int) -> Optional[Notification]:
        """Get notification by ID."""
        pass

    @abstractmethod
    def list_notifications(self, user_id: int, unread_only: bool = False) -> list[Notification]:
        """List a user's notifications, newest first."""
        pass

    @abstractmethod
    def mark_notifications_read(
        self, user_id: int, read_at: datetime, notification_id: Optional[int] = None
    ) -> int:
        """Mark one (or, with no ID, all) of a user's notifications read. Returns count updated."""
        pass
