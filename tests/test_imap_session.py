"""Tests for the IMAP mailbox session, using an in-memory IMAP server."""

import imaplib
from email.message import EmailMessage
from email.utils import format_datetime
from datetime import datetime, UTC

import pytest

from moneytracker.domain.entities import MailAccount
from moneytracker.mailbox.errors import MailboxAuthError, MailboxConnectError, MailboxError
from moneytracker.mailbox.imap import ImapMailboxSession, open_mailbox, parse_message

ACCOUNT = MailAccount(
    host="imap.example.com", username="alice", secret="pw", port=993, enabled=True
)


def build_email(
    sender="auto-confirm@amazon.in",
    subject="Your Amazon.in order #1",
    text="Total: Rs. 499.00",
    html=None,
    message_id="<order-1@amazon.in>",
    sent_at=datetime(2026, 1, 15, 10, 30, tzinfo=UTC),
) -> bytes:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = "alice@example.com"
    msg["Subject"] = subject
    if sent_at is not None:
        msg["Date"] = format_datetime(sent_at)
    if message_id is not None:
        msg["Message-ID"] = message_id
    if text is not None:
        msg.set_content(text)
        if html is not None:
            msg.add_alternative(html, subtype="html")
    else:
        msg.set_content(html, subtype="html")
    return msg.as_bytes()


class FakeImapServer:
    """Just enough of imaplib.IMAP4 for a mailbox session."""

    def __init__(self, messages=None, login_error=None, select_status="OK", search_error=None):
        self.messages = dict(messages or {})
        self.seen: set[bytes] = set()
        self.login_error = login_error
        self.select_status = select_status
        self.search_error = search_error
        self.connected_with = None
        self.closed = False
        self.logged_out = False

    def factory(self, host, port, timeout=None):
        self.connected_with = (host, port, timeout)
        return self

    def login(self, username, password):
        if self.login_error is not None:
            raise self.login_error
        return "OK", [b"Logged in"]

    def select(self, mailbox):
        return self.select_status, [b"2"]

    def uid(self, command, *args):
        if command == "SEARCH":
            if self.search_error is not None:
                raise self.search_error
            unseen = [uid for uid in sorted(self.messages) if uid not in self.seen]
            return "OK", [b" ".join(unseen)]
        if command == "FETCH":
            uid = args[0]
            raw = self.messages[uid]
            return "OK", [(b"%s (UID %s BODY[] {%d}" % (uid, uid, len(raw)), raw), b")"]
        if command == "STORE":
            self.seen.add(args[0])
            return "OK", [b""]
        raise AssertionError(f"unexpected command {command}")

    def close(self):
        self.closed = True

    def logout(self):
        self.logged_out = True


def test_list_unread_and_mark_read():
    server = FakeImapServer({b"1": build_email(), b"2": build_email(message_id="<order-2@amazon.in>")})

    with open_mailbox(ACCOUNT, timeout=5, imap_factory=server.factory) as session:
        messages = session.list_unread()
        assert [m.message_id for m in messages] == ["<order-1@amazon.in>", "<order-2@amazon.in>"]
        first = messages[0]
        assert first.sender == "auto-confirm@amazon.in"
        assert first.subject == "Your Amazon.in order #1"
        assert "Total: Rs. 499.00" in first.body_text
        assert first.sent_at == datetime(2026, 1, 15, 10, 30, tzinfo=UTC)

        session.mark_read("<order-1@amazon.in>")

    assert server.connected_with == ("imap.example.com", 993, 5)
    assert server.seen == {b"1"}
    assert server.closed and server.logged_out


def test_mark_read_flags_every_copy():
    server = FakeImapServer(
        {
            b"1": build_email(),
            b"2": build_email(message_id="<order-2@amazon.in>"),
            b"3": build_email(),
        }
    )

    with open_mailbox(ACCOUNT, imap_factory=server.factory) as session:
        messages = session.list_unread()
        assert len(messages) == 3
        session.mark_read("<order-1@amazon.in>")

    assert server.seen == {b"1", b"3"}


def test_fetch_does_not_mark_seen():
    server = FakeImapServer({b"1": build_email()})

    with open_mailbox(ACCOUNT, imap_factory=server.factory) as session:
        session.list_unread()

    assert server.seen == set()


def test_html_only_body_is_converted():
    raw = build_email(text=None, html="<html><body><p>Order <b>Total:</b> Rs. 1,299.00</p></body></html>")
    message = parse_message(raw, "7", "imap.example.com")

    assert "<b>" not in message.body_text
    assert "Total: Rs. 1,299.00" in message.body_text


def test_plain_part_preferred_over_html():
    raw = build_email(text="plain Total: Rs. 10.00", html="<p>html Total: Rs. 99.00</p>")
    message = parse_message(raw, "7", "imap.example.com")

    assert "plain" in message.body_text
    assert "html" not in message.body_text


def test_missing_message_id_uses_uid():
    raw = build_email(message_id=None)
    message = parse_message(raw, "42", "imap.example.com")
    assert message.message_id == "<uid-42@imap.example.com>"


def test_missing_date_uses_now():
    raw = build_email(sent_at=None)
    before = datetime.now(UTC)
    message = parse_message(raw, "1", "imap.example.com")
    assert message.sent_at >= before


def test_login_rejected():
    server = FakeImapServer(login_error=imaplib.IMAP4.error("AUTHENTICATIONFAILED"))

    with pytest.raises(MailboxAuthError):
        ImapMailboxSession.connect(ACCOUNT, imap_factory=server.factory)
    assert server.logged_out


def test_connect_refused():
    def refuse(host, port, timeout=None):
        raise ConnectionRefusedError("refused")

    with pytest.raises(MailboxConnectError):
        ImapMailboxSession.connect(ACCOUNT, imap_factory=refuse)


def test_select_failure():
    server = FakeImapServer(select_status="NO")

    with pytest.raises(MailboxConnectError):
        ImapMailboxSession.connect(ACCOUNT, imap_factory=server.factory)


def test_search_failure_is_connect_error():
    server = FakeImapServer(search_error=imaplib.IMAP4.abort("socket error"))

    with open_mailbox(ACCOUNT, imap_factory=server.factory) as session:
        with pytest.raises(MailboxConnectError):
            session.list_unread()


def test_mark_read_unknown_message():
    server = FakeImapServer({b"1": build_email()})

    with open_mailbox(ACCOUNT, imap_factory=server.factory) as session:
        with pytest.raises(MailboxError):
            session.mark_read("<never-listed@example.com>")


def test_close_is_idempotent():
    server = FakeImapServer()
    session = ImapMailboxSession.connect(ACCOUNT, imap_factory=server.factory)

    session.close()
    session.close()

    assert server.logged_out
    with pytest.raises(MailboxError):
        session.list_unread()
