"""Mailbox access for email ingestion."""

from moneytracker.mailbox.errors import MailboxAuthError, MailboxConnectError, MailboxError
from moneytracker.mailbox.imap import ImapMailboxSession, open_mailbox

__all__ = [
    "ImapMailboxSession",
    "MailboxAuthError",
    "MailboxConnectError",
    "MailboxError",
    "open_mailbox",
]
