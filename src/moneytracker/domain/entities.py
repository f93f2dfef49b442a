"""Domain model entities for moneytracker.

These are pure data classes representing business concepts, independent of
the database schema. Transient pipeline types (inbound messages, extracted
transactions, pattern rules) live here too so the classifier never touches
the store.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentMethod(str, Enum):
    """How a transaction was paid."""

    UPI = "UPI"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    WALLET = "WALLET"
    CASH = "CASH"
    NET_BANKING = "NET_BANKING"
    SUBSCRIPTION = "SUBSCRIPTION"


class TransactionSource(str, Enum):
    """Where a transaction record came from."""

    MANUAL = "MANUAL"
    EMAIL_PARSED = "EMAIL_PARSED"
    SMS_PARSED = "SMS_PARSED"
    CSV_IMPORT = "CSV_IMPORT"


class NotificationType(str, Enum):
    """Kinds of in-app notifications."""

    BUDGET_ALERT = "BUDGET_ALERT"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    TRANSACTION_ADDED = "TRANSACTION_ADDED"
    MONTHLY_SUMMARY = "MONTHLY_SUMMARY"
    EMAIL_PARSED = "EMAIL_PARSED"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class MailAccount:
    """Mailbox credentials owned by a user."""

    host: Optional[str]
    username: Optional[str]
    secret: Optional[str]
    port: int
    enabled: bool

    @property
    def is_configured(self) -> bool:
        """True when the account is enabled and has complete credentials."""
        return bool(self.enabled and self.host and self.username and self.secret)


@dataclass(frozen=True)
class MailConfig:
    """Read view of a user's mail configuration. Never carries the secret."""

    enabled: bool
    host: Optional[str]
    username: Optional[str]
    port: int
    has_secret: bool
    secret: None = None


@dataclass(frozen=True)
class User:
    """User domain entity."""

    id: int
    username: str
    email: Optional[str]
    timezone: str
    email_notifications_enabled: bool
    mail_account: MailAccount
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity, scoped to one user."""

    id: int
    user_id: int
    name: str
    description: Optional[str]
    icon_name: Optional[str]
    color_code: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: int
    description: str
    amount: Decimal
    date: date
    payment_method: PaymentMethod
    category_id: int
    source: TransactionSource
    source_reference: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Notification:
    """Notification domain entity."""

    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime]


@dataclass(frozen=True)
class PatternRule:
    """Extraction rule for one kind of transactional email.

    sender_match is a ``|``-separated list of case-insensitive substrings.
    subject_match and amount_pattern are regular expressions; amount_pattern
    has exactly one capturing group holding the amount.
    """

    id: str
    sender_match: str
    subject_match: str
    amount_pattern: str
    default_category_name: str


@dataclass(frozen=True)
class InboundMessage:
    """A message read from a mailbox during one scan. Not persisted."""

    sender: str
    subject: str
    body_text: str
    sent_at: datetime
    message_id: str


@dataclass(frozen=True)
class ExtractedTransaction:
    """Candidate transaction produced by the classifier."""

    amount: Decimal
    description: str
    date: date
    payment_method: PaymentMethod
    category_name: str
    source_reference: str
    notes: str
