"""IMAP mailbox session.

A session is opened for one user's scan, lists the messages the server
reports as unseen at that moment, and flags messages as seen once they have
been ingested. Messages are fetched with ``BODY.PEEK[]`` so reading them does
not mark them seen; only ``mark_read`` does.
"""

import email
import email.policy
import imaplib
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, UTC
from email.message import EmailMessage
from typing import Callable, ContextManager, Iterator, Optional

import structlog
from bs4 import BeautifulSoup

from moneytracker.config import settings
from moneytracker.domain.entities import InboundMessage, MailAccount
from moneytracker.mailbox.errors import MailboxAuthError, MailboxConnectError, MailboxError

logger = structlog.get_logger()

INBOX = "INBOX"


class MailboxSession(ABC):
    """Scoped access to one mailbox. Not safe for concurrent callers."""

    @abstractmethod
    def list_unread(self) -> list[InboundMessage]:
        """Return the messages currently unseen, in server order."""
        pass

    @abstractmethod
    def mark_read(self, message_id: str) -> None:
        """Flag a message returned by list_unread() as seen."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass


MailboxOpener = Callable[[MailAccount], ContextManager[MailboxSession]]


class ImapMailboxSession(MailboxSession):
    """MailboxSession over an authenticated ``imaplib`` connection."""

    def __init__(self, connection: imaplib.IMAP4, host: str):
        """Wrap a logged-in connection with INBOX selected.

        Args:
            connection: imaplib connection
            host: Server host, used for surrogate message ids
        """
        self._conn: Optional[imaplib.IMAP4] = connection
        self._host = host
        # Copies of a message share its Message-ID, so one id can map to several UIDs
        self._uids: dict[str, list[bytes]] = {}

    @classmethod
    def connect(
        cls,
        account: MailAccount,
        timeout: Optional[float] = None,
        imap_factory: Optional[Callable[..., imaplib.IMAP4]] = None,
    ) -> "ImapMailboxSession":
        """Open a TLS connection, log in and select INBOX.

        Args:
            account: Mailbox credentials
            timeout: Socket timeout in seconds for connect and every read
            imap_factory: Connection class (defaults to imaplib.IMAP4_SSL)

        Raises:
            MailboxConnectError: If the server can't be reached or refuses INBOX
            MailboxAuthError: If login is rejected
        """
        factory = imap_factory or imaplib.IMAP4_SSL
        timeout = settings.imap_timeout_seconds if timeout is None else timeout

        try:
            conn = factory(account.host, account.port, timeout=timeout)
        except (OSError, imaplib.IMAP4.error) as e:
            raise MailboxConnectError(
                f"Cannot connect to {account.host}:{account.port}: {e}"
            ) from e

        try:
            conn.login(account.username, account.secret)
        except imaplib.IMAP4.abort as e:
            _logout(conn)
            raise MailboxConnectError(f"Connection lost during login: {e}") from e
        except imaplib.IMAP4.error as e:
            _logout(conn)
            raise MailboxAuthError(f"Login rejected for {account.username}: {e}") from e
        except OSError as e:
            _logout(conn)
            raise MailboxConnectError(f"Connection lost during login: {e}") from e

        try:
            status, _ = conn.select(INBOX)
        except (OSError, imaplib.IMAP4.error) as e:
            _logout(conn)
            raise MailboxConnectError(f"Cannot open {INBOX}: {e}") from e
        if status != "OK":
            _logout(conn)
            raise MailboxConnectError(f"Cannot open {INBOX}: server replied {status}")

        return cls(conn, account.host)

    def list_unread(self) -> list[InboundMessage]:
        """Return the unseen messages, in server order.

        Messages that can't be decoded are logged and left out.

        Raises:
            MailboxConnectError: If the search or a fetch fails at the protocol level
        """
        conn = self._require_connection()
        try:
            status, data = conn.uid("SEARCH", None, "UNSEEN")
            if status != "OK":
                raise MailboxConnectError(f"UNSEEN search failed: {status}")
            uids = data[0].split() if data and data[0] else []

            messages = []
            for uid in uids:
                status, msg_data = conn.uid("FETCH", uid, "(BODY.PEEK[])")
                raw = _raw_message(msg_data) if status == "OK" else None
                if raw is None:
                    logger.warning("mailbox_fetch_empty", uid=uid.decode(), status=status)
                    continue
                try:
                    message = parse_message(raw, uid.decode(), self._host)
                except (ValueError, LookupError, TypeError) as e:
                    logger.warning("mailbox_message_undecodable", uid=uid.decode(), error=str(e))
                    continue
                self._uids.setdefault(message.message_id, []).append(uid)
                messages.append(message)
        except (OSError, imaplib.IMAP4.error) as e:
            raise MailboxConnectError(f"Reading mailbox failed: {e}") from e

        return messages

    def mark_read(self, message_id: str) -> None:
        """Flag a message, and every unread copy with the same Message-ID, as seen.

        Raises:
            MailboxError: If the message was not returned by list_unread()
            MailboxConnectError: If the server rejects the flag change
        """
        conn = self._require_connection()
        uids = self._uids.get(message_id)
        if not uids:
            raise MailboxError(f"Unknown message {message_id}")
        for uid in uids:
            try:
                status, _ = conn.uid("STORE", uid, "+FLAGS", "(\\Seen)")
            except (OSError, imaplib.IMAP4.error) as e:
                raise MailboxConnectError(f"Could not mark {message_id} read: {e}") from e
            if status != "OK":
                raise MailboxConnectError(f"Could not mark {message_id} read: {status}")

    def close(self) -> None:
        """Close INBOX and log out."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        try:
            conn.close()
        except (OSError, imaplib.IMAP4.error) as e:
            logger.debug("mailbox_close_failed", host=self._host, error=str(e))
        _logout(conn)

    def _require_connection(self) -> imaplib.IMAP4:
        if self._conn is None:
            raise MailboxError("Mailbox session is closed")
        return self._conn


@contextmanager
def open_mailbox(
    account: MailAccount,
    timeout: Optional[float] = None,
    imap_factory: Optional[Callable[..., imaplib.IMAP4]] = None,
) -> Iterator[ImapMailboxSession]:
    """Open an IMAP session for the duration of a ``with`` block.

    The session is closed on every exit path.
    """
    session = ImapMailboxSession.connect(account, timeout=timeout, imap_factory=imap_factory)
    try:
        yield session
    finally:
        session.close()


def parse_message(raw: bytes, uid: str, host: str) -> InboundMessage:
    """Decode an RFC 822 message into an InboundMessage.

    Args:
        raw: Full message bytes
        uid: IMAP UID, used when the message has no Message-ID
        host: Server host, used when the message has no Message-ID

    Returns:
        InboundMessage
    """
    msg = email.message_from_bytes(raw, policy=email.policy.default)

    date_header = msg["Date"]
    sent_at = getattr(date_header, "datetime", None) or datetime.now(UTC)

    message_id = str(msg["Message-ID"] or "").strip()
    if not message_id:
        message_id = f"<uid-{uid}@{host}>"

    return InboundMessage(
        sender=str(msg["From"] or "").strip(),
        subject=str(msg["Subject"] or "").strip(),
        body_text=_body_text(msg),
        sent_at=sent_at,
        message_id=message_id,
    )


def _body_text(msg: EmailMessage) -> str:
    """Plain text parts joined; HTML parts converted to text only when there is no plain part."""
    plain, html = [], []
    for part in msg.walk():
        if part.is_multipart() or part.get_content_disposition() == "attachment":
            continue
        content_type = part.get_content_type()
        if content_type == "text/plain":
            plain.append(_part_text(part))
        elif content_type == "text/html":
            html.append(_part_text(part))

    if plain:
        return "\n".join(plain)
    return "\n".join(
        BeautifulSoup(h, "html.parser").get_text(" ", strip=True) for h in html
    )


def _part_text(part: EmailMessage) -> str:
    try:
        return part.get_content()
    except (LookupError, UnicodeDecodeError):
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", errors="replace")


def _raw_message(msg_data) -> Optional[bytes]:
    """Pull the message bytes out of an imaplib FETCH response."""
    for item in msg_data or []:
        if isinstance(item, tuple) and len(item) >= 2 and isinstance(item[1], bytes):
            return item[1]
    return None


def _logout(conn: imaplib.IMAP4) -> None:
    try:
        conn.logout()
    except (OSError, imaplib.IMAP4.error) as e:
        logger.debug("mailbox_logout_failed", error=str(e))
