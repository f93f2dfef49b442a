"""Email ingestion service.

One run scans one user's mailbox:

    NOT_CONFIGURED | CONNECTING -> SCANNING -> per message
    (extract, categorize, persist, notify, mark read) -> CLOSED

Connection and scan failures end the run in FAILED. Failures while handling a
single message are logged and the message is left unread; the run goes on.
Marking a message read is the commit point, but the store also rejects a
second transaction with the same message id, so a message that was persisted
and not marked read is recognised as already ingested on the next run.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Optional

import structlog

from moneytracker.config import settings
from moneytracker.database.base import Database
from moneytracker.domain.category import CategoryService, EMAIL_ORIGIN
from moneytracker.domain.classifier import MessageClassifier
from moneytracker.domain.entities import (
    ExtractedTransaction,
    InboundMessage,
    NotificationType,
    TransactionSource,
    User,
)
from moneytracker.domain.errors import DuplicateTransactionError, NotFoundError, user_not_found
from moneytracker.domain.notification import NotificationService
from moneytracker.domain.patterns import default_registry
from moneytracker.domain.transaction import TransactionService
from moneytracker.mailbox.errors import MailboxError
from moneytracker.mailbox.imap import MailboxOpener, MailboxSession, open_mailbox
from moneytracker.utils.date_parser import resolve_timezone

logger = structlog.get_logger()


class RunState(str, Enum):
    """States of one ingestion run."""

    NOT_CONFIGURED = "not_configured"
    CONNECTING = "connecting"
    SCANNING = "scanning"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class IngestionResult:
    """Outcome of one run for one user."""

    user_id: int
    state: RunState
    scanned: int = 0
    extracted: int = 0
    persisted: int = 0
    skipped: int = 0
    duplicates: int = 0
    failed_in: Optional[RunState] = None
    error: Optional[str] = None
    transaction_ids: list[int] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.CLOSED


class EmailIngestionService:
    """Turns a user's unread transactional emails into transactions."""

    def __init__(
        self,
        db: Database,
        classifier: Optional[MessageClassifier] = None,
        mailbox_opener: Optional[MailboxOpener] = None,
        notifications: Optional[NotificationService] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize email ingestion service.

        Args:
            db: Database instance
            classifier: Message classifier (defaults to the built-in pattern registry)
            mailbox_opener: Callable returning a context manager that yields a
                MailboxSession for an account (defaults to IMAP over TLS)
            notifications: Notification service (defaults to the standard channels)
            timeout: IMAP socket timeout in seconds (defaults to settings)
        """
        self.db = db
        self.classifier = classifier or MessageClassifier(default_registry())
        self.mailbox_opener = mailbox_opener or partial(
            open_mailbox,
            timeout=settings.imap_timeout_seconds if timeout is None else timeout,
        )
        self.notifications = notifications or NotificationService(db)
        self.category_service = CategoryService(db)
        self.transaction_service = TransactionService(db)

    def run_for_user(self, user_id: int) -> IngestionResult:
        """Scan one user's mailbox once.

        Args:
            user_id: User ID

        Returns:
            IngestionResult with the terminal state and per-message counts

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = self.db.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))

        log = logger.bind(user_id=user_id)
        account = user.mail_account
        if not account.is_configured:
            log.info("email_scan_not_configured", enabled=account.enabled)
            return IngestionResult(user_id=user_id, state=RunState.NOT_CONFIGURED)

        result = IngestionResult(user_id=user_id, state=RunState.CONNECTING)
        zone = resolve_timezone(user.timezone, settings.default_timezone)

        try:
            with self.mailbox_opener(account) as session:
                result.state = RunState.SCANNING
                messages = session.list_unread()
                result.scanned = len(messages)
                log.info("email_scan_started", host=account.host, unread=len(messages))

                for message in messages:
                    self._process_message(user, zone, session, message, result, log)
        except MailboxError as e:
            result.failed_in = result.state
            result.state = RunState.FAILED
            result.error = str(e)
            result.skipped = result.scanned - result.persisted
            log.error("email_scan_failed", failed_in=result.failed_in.value, error=str(e))
            return result

        result.state = RunState.CLOSED
        result.skipped = result.scanned - result.persisted
        log.info(
            "email_scan_finished",
            scanned=result.scanned,
            extracted=result.extracted,
            persisted=result.persisted,
            skipped=result.skipped,
            duplicates=result.duplicates,
        )
        return result

    def _process_message(
        self,
        user: User,
        zone,
        session: MailboxSession,
        message: InboundMessage,
        result: IngestionResult,
        log,
    ) -> None:
        log = log.bind(message_id=message.message_id)

        try:
            extracted = self.classifier.classify(message, zone)
        except Exception as e:
            log.error("email_classify_failed", error=str(e), error_type=type(e).__name__)
            return
        if extracted is None:
            log.debug("email_not_recognized", sender=message.sender, subject=message.subject)
            return
        result.extracted += 1

        try:
            transaction_id = self._persist(user, extracted)
        except DuplicateTransactionError:
            result.duplicates += 1
            log.info("email_already_ingested")
            self._mark_read(session, message, log)
            return
        except Exception as e:
            # Left unread so the next run retries it
            log.error("email_ingest_failed", error=str(e), error_type=type(e).__name__)
            return

        result.persisted += 1
        result.transaction_ids.append(transaction_id)
        log.info("email_transaction_added", transaction_id=transaction_id, amount=str(extracted.amount))

        self._notify(user, extracted, log)
        self._mark_read(session, message, log)

    def _persist(self, user: User, extracted: ExtractedTransaction) -> int:
        category = self.category_service.resolve_category(
            user.id, extracted.category_name, origin=EMAIL_ORIGIN
        )
        return self.transaction_service.create_transaction(
            user_id=user.id,
            description=extracted.description,
            amount=extracted.amount,
            date=extracted.date,
            payment_method=extracted.payment_method,
            category_id=category.id,
            source=TransactionSource.EMAIL_PARSED,
            source_reference=extracted.source_reference,
            notes=extracted.notes,
        )

    def _notify(self, user: User, extracted: ExtractedTransaction, log) -> None:
        try:
            self.notifications.create_notification(
                user_id=user.id,
                type=NotificationType.EMAIL_PARSED,
                title="Transaction Auto-Added",
                message=(
                    f"₹{extracted.amount:.2f} transaction added from email: "
                    f"{extracted.description}"
                ),
            )
        except Exception as e:
            log.warning("email_notification_failed", error=str(e))

    def _mark_read(self, session: MailboxSession, message: InboundMessage, log) -> None:
        try:
            session.mark_read(message.message_id)
        except MailboxError as e:
            log.warning("email_mark_read_failed", error=str(e))
