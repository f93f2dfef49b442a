"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal

from moneytracker.database.base import Database
from moneytracker.domain.entities import (
    PaymentMethod,
    Transaction as TransactionEntity,
    TransactionSource,
)
from moneytracker.domain.errors import (
    DuplicateTransactionError,
    NotFoundError,
    ValidationError,
    category_not_found,
    category_not_owned,
    duplicate_source_reference,
    user_not_found,
)
from moneytracker.utils.amount_parser import TWO_PLACES


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        user_id: int,
        description: str,
        amount: Decimal,
        date: date,
        payment_method: PaymentMethod,
        category_id: int,
        source: TransactionSource = TransactionSource.MANUAL,
        source_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            user_id: Owning user ID
            description: Description
            amount: Positive amount, stored with 2 fractional digits
            date: Transaction date
            payment_method: Payment method
            category_id: Category ID, must belong to the same user
            source: Where the record came from
            source_reference: Message ID or filename
            notes: Optional notes

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If user or category doesn't exist
            ValidationError: If amount is not positive or category is another user's
            DuplicateTransactionError: If this email was already ingested for the user
        """
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        if amount is None or amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")

        # Ownership is checked here, never assumed from the caller
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        if category.user_id != user_id:
            raise ValidationError(category_not_owned(category_id, user_id))

        # Check for duplicate
        if source == TransactionSource.EMAIL_PARSED:
            if not source_reference:
                raise ValidationError("Email-parsed transactions need a source reference")
            if self.db.source_reference_exists(user_id, source, source_reference):
                raise DuplicateTransactionError(
                    duplicate_source_reference(source_reference, user_id)
                )

        return self.db.create_transaction(
            user_id=user_id,
            description=description,
            amount=Decimal(amount).quantize(TWO_PLACES),
            date=date,
            payment_method=payment_method,
            category_id=category_id,
            source=source,
            source_reference=source_reference,
            notes=notes,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        source: Optional[TransactionSource] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions with filters.

        Args:
            user_id: Owning user ID
            start_date: Optional start date filter
            end_date: Optional end date filter
            category_id: Optional category ID filter
            source: Optional source filter

        Returns:
            List of transaction entities, newest first
        """
        return self.db.list_transactions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            source=source,
        )

    def delete_transaction(self, user_id: int, transaction_id: int) -> None:
        """Delete one of a user's transactions.

        Raises:
            NotFoundError: If the transaction doesn't exist or belongs to someone else
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.user_id != user_id:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        self.db.delete_transaction(transaction_id)
