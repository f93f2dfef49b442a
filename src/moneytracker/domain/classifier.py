"""Turns inbound messages into candidate transactions.

Classification is pure: it reads only the message and the registry it was
built with. Category lookup and persistence belong to the ingestion service.
"""

from datetime import tzinfo
from typing import Optional

from dateutil import tz

from moneytracker.domain.entities import ExtractedTransaction, InboundMessage, PaymentMethod
from moneytracker.domain.patterns import PatternRegistry
from moneytracker.utils.amount_parser import parse_amount
from moneytracker.utils.date_parser import local_date

NOTES_PREFIX = "auto-parsed from email: "

# (method, body keywords, sender keywords); first hit wins
PAYMENT_METHOD_KEYWORDS: tuple[tuple[PaymentMethod, tuple[str, ...], tuple[str, ...]], ...] = (
    (PaymentMethod.UPI, ("upi",), ("upi",)),
    (PaymentMethod.CREDIT_CARD, ("credit card",), ("credit",)),
    (PaymentMethod.DEBIT_CARD, ("debit card",), ("debit",)),
    (PaymentMethod.WALLET, ("wallet",), ("paytm", "amazonpay")),
    (PaymentMethod.SUBSCRIPTION, (), ("netflix", "spotify", "subscription")),
)


def detect_payment_method(body_text: str, sender: str) -> PaymentMethod:
    """Infer the payment method from message body and sender keywords.

    Args:
        body_text: Message body
        sender: Sender address

    Returns:
        First matching method, NET_BANKING when nothing matches
    """
    body = (body_text or "").lower()
    sender = (sender or "").lower()
    for method, body_keywords, sender_keywords in PAYMENT_METHOD_KEYWORDS:
        if any(k in body for k in body_keywords) or any(k in sender for k in sender_keywords):
            return method
    return PaymentMethod.NET_BANKING


class MessageClassifier:
    """Matches messages against a pattern registry and extracts transactions."""

    def __init__(self, registry: PatternRegistry):
        """Initialize classifier.

        Args:
            registry: Pattern registry consulted for every message
        """
        self.registry = registry

    def classify(
        self, message: InboundMessage, zone: Optional[tzinfo] = None
    ) -> Optional[ExtractedTransaction]:
        """Extract a candidate transaction from a message.

        Args:
            message: Message to classify
            zone: Owner's timezone, used for the transaction date (UTC if None)

        Returns:
            ExtractedTransaction, or None if no rule matches or the amount
            cannot be extracted
        """
        rule = self.registry.match(message.sender, message.subject)
        if rule is None:
            return None

        found = self.registry.amount_regex(rule).search(message.body_text or "")
        if found is None:
            return None

        try:
            amount = parse_amount(found.group(1))
        except ValueError:
            return None

        description = (message.subject or "").strip() or message.sender
        return ExtractedTransaction(
            amount=amount,
            description=description,
            date=local_date(message.sent_at, zone or tz.UTC),
            payment_method=detect_payment_method(message.body_text, message.sender),
            category_name=rule.default_category_name,
            source_reference=message.message_id,
            notes=NOTES_PREFIX + message.sender,
        )
