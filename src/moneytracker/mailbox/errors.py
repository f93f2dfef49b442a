"""Mailbox error types."""


class MailboxError(Exception):
    """Base class for mailbox failures."""


class MailboxAuthError(MailboxError):
    """The mail server rejected the credentials."""


class MailboxConnectError(MailboxError):
    """The mail server could not be reached, timed out or refused the request."""
