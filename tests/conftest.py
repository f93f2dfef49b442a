"""Shared pytest fixtures for moneytracker tests."""

import tempfile
import os
from contextlib import contextmanager
from datetime import datetime, UTC
from pathlib import Path
import pytest

from moneytracker.database.factories import create_sqlite_database
from moneytracker.domain.category import CategoryService
from moneytracker.domain.entities import InboundMessage
from moneytracker.domain.notification import NotificationChannel, NotificationService
from moneytracker.domain.transaction import TransactionService
from moneytracker.domain.user import UserService
from moneytracker.mailbox.errors import MailboxConnectError
from moneytracker.mailbox.imap import MailboxSession


class FakeMailbox(MailboxSession):
    """In-memory mailbox holding InboundMessages."""

    def __init__(self, messages=(), list_error=None, mark_read_errors=()):
        self.messages = list(messages)
        self.read: list[str] = []
        self.closed = False
        self.list_error = list_error
        self.mark_read_errors = set(mark_read_errors)

    def list_unread(self):
        if self.list_error is not None:
            raise self.list_error
        return [m for m in self.messages if m.message_id not in self.read]

    def mark_read(self, message_id):
        if message_id in self.mark_read_errors:
            raise MailboxConnectError(f"STORE failed for {message_id}")
        self.read.append(message_id)

    def close(self):
        self.closed = True


class FakeMailboxOpener:
    """Mailbox opener returning a FakeMailbox, or raising ``error`` on open."""

    def __init__(self, mailbox=None, error=None):
        self.mailbox = mailbox if mailbox is not None else FakeMailbox()
        self.error = error
        self.accounts = []

    @contextmanager
    def __call__(self, account):
        self.accounts.append(account)
        if self.error is not None:
            raise self.error
        try:
            yield self.mailbox
        finally:
            self.mailbox.close()


class RecordingChannel(NotificationChannel):
    """Channel that remembers what it delivered."""

    name = "recording"

    def __init__(self):
        self.delivered = []

    def deliver(self, user, notification):
        self.delivered.append((user, notification))


class FailingChannel(NotificationChannel):
    """Channel that always raises."""

    name = "failing"

    def deliver(self, user, notification):
        raise RuntimeError("channel down")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def channel():
    """A recording notification channel."""
    return RecordingChannel()


@pytest.fixture
def notification_service(temp_db, channel):
    """Create a NotificationService delivering only to the recording channel."""
    return NotificationService(temp_db, channels=[channel])


@pytest.fixture
def sample_user(user_service):
    """Create a user without mail settings."""
    user_id = user_service.create_user(
        username="alice", email="alice@example.com", timezone="Asia/Kolkata"
    )
    return user_service.get_user(user_id)


@pytest.fixture
def mail_user(user_service, sample_user):
    """The sample user with a complete, enabled mailbox configuration."""
    user_service.update_mail_config(
        sample_user.id,
        enabled=True,
        host="imap.example.com",
        username="alice@example.com",
        secret="app-password",
        port=993,
    )
    return user_service.get_user(sample_user.id)


@pytest.fixture
def sample_category(category_service, sample_user):
    """Create a sample category for the sample user."""
    category_id = category_service.create_category(user_id=sample_user.id, name="Groceries")
    return category_service.get_category(category_id)


@pytest.fixture
def make_message():
    """Factory for InboundMessages with sensible defaults."""

    def _make(
        sender="auto-confirm@amazon.in",
        subject="Your Amazon.in order #404-1234567",
        body="Thanks for shopping. Total: Rs. 499.00",
        sent_at=None,
        message_id="<order-1@amazon.in>",
    ):
        return InboundMessage(
            sender=sender,
            subject=subject,
            body_text=body,
            sent_at=sent_at or datetime(2026, 1, 15, 10, 30, tzinfo=UTC),
            message_id=message_id,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
