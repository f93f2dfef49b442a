"""CSV import domain service."""

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from moneytracker.database.base import Database
from moneytracker.domain.category import CategoryService, CSV_ORIGIN
from moneytracker.domain.entities import NotificationType, PaymentMethod, TransactionSource
from moneytracker.domain.errors import NotFoundError, ValidationError, user_not_found
from moneytracker.domain.notification import NotificationService
from moneytracker.domain.transaction import TransactionService
from moneytracker.utils.amount_parser import parse_amount
from moneytracker.utils.date_parser import parse_date

logger = structlog.get_logger()

CSV_COLUMNS = ("Date", "Description", "Amount", "Category", "PaymentMethod", "Notes")
REQUIRED_COLUMNS = {"Date", "Description", "Amount", "Category"}
UNCATEGORIZED = "Uncategorized"


@dataclass
class ImportResult:
    """Statistics of one CSV import."""

    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    transaction_ids: list[int] = field(default_factory=list)


def parse_payment_method(value: Optional[str]) -> PaymentMethod:
    """Map a CSV payment method cell to a PaymentMethod, defaulting to CASH.

    Matching ignores case and treats spaces and hyphens as underscores, so
    "Credit Card" and "credit-card" both give CREDIT_CARD.
    """
    if not value:
        return PaymentMethod.CASH
    key = value.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return PaymentMethod(key)
    except ValueError:
        return PaymentMethod.CASH


def generate_csv_template() -> str:
    """Return a CSV template: the header and one sample row."""
    return (
        ",".join(CSV_COLUMNS)
        + "\n"
        + "2026-01-31,Sample Transaction,1000.00,Food & Dining,UPI,Sample notes\n"
    )


class CSVImportService:
    """Service for importing CSV files."""

    def __init__(self, db: Database, notifications: Optional[NotificationService] = None):
        """Initialize CSV import service.

        Args:
            db: Database instance
            notifications: Notification service (defaults to the standard channels)
        """
        self.db = db
        self.transaction_service = TransactionService(db)
        self.category_service = CategoryService(db)
        self.notifications = notifications or NotificationService(db)

    def import_csv(
        self, user_id: int, csv_file_path: str, filename: Optional[str] = None
    ) -> ImportResult:
        """Import transactions from a CSV file.

        Rows that can't be parsed are reported in ``errors`` as "Row N: ..."
        and counted in ``skipped`` together with blank rows. Every other row
        becomes a CSV_IMPORT transaction.

        Args:
            user_id: Owning user ID
            csv_file_path: Path to CSV file
            filename: Name recorded as the source reference (defaults to the file name)

        Returns:
            ImportResult

        Raises:
            NotFoundError: If user doesn't exist
            ValidationError: If the file has no header or lacks required columns
            FileNotFoundError: If CSV file doesn't exist
        """
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")
        filename = filename or csv_path.name

        result = ImportResult()
        categories: dict[str, int] = {}

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)

            csv_columns = reader.fieldnames
            if csv_columns is None:
                raise ValidationError("CSV file has no columns")

            missing_columns = REQUIRED_COLUMNS - {c.strip() for c in csv_columns}
            if missing_columns:
                raise ValidationError(
                    f"CSV file missing required columns: {', '.join(sorted(missing_columns))}"
                )

            for row_num, row in enumerate(reader, start=2):  # Header is row 1
                values = {
                    (key or "").strip(): (value or "").strip()
                    for key, value in row.items()
                    if isinstance(value, str)
                }
                if not any(values.values()):
                    result.skipped += 1
                    continue

                try:
                    description = values.get("Description")
                    if not description:
                        raise ValidationError("Missing description")

                    txn_date = parse_date(values.get("Date", ""))
                    amount = parse_amount(values.get("Amount", ""))

                    category_name = values.get("Category") or UNCATEGORIZED
                    if category_name not in categories:
                        categories[category_name] = self.category_service.resolve_category(
                            user_id, category_name, origin=CSV_ORIGIN
                        ).id

                    transaction_id = self.transaction_service.create_transaction(
                        user_id=user_id,
                        description=description,
                        amount=amount,
                        date=txn_date,
                        payment_method=parse_payment_method(values.get("PaymentMethod")),
                        category_id=categories[category_name],
                        source=TransactionSource.CSV_IMPORT,
                        source_reference=filename,
                        notes=values.get("Notes") or None,
                    )
                except Exception as e:
                    logger.warning("csv_row_skipped", row=row_num, error=str(e))
                    result.errors.append(f"Row {row_num}: {str(e)}")
                    result.skipped += 1
                    continue

                result.imported += 1
                result.transaction_ids.append(transaction_id)

        logger.info(
            "csv_import_finished",
            user_id=user_id,
            filename=filename,
            imported=result.imported,
            skipped=result.skipped,
            errors=len(result.errors),
        )

        try:
            self.notifications.create_notification(
                user_id=user_id,
                type=NotificationType.SYSTEM,
                title="CSV Import Complete",
                message=f"Successfully imported {result.imported} transactions from {filename}",
            )
        except Exception as e:
            logger.warning("csv_import_notification_failed", user_id=user_id, error=str(e))

        return result
