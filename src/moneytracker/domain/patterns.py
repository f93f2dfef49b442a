"""Registry of email extraction rules."""

import re
from typing import Iterable, Optional

from moneytracker.domain.entities import PatternRule
from moneytracker.domain.errors import ValidationError

# Currency prefix and amount group shared by the built-in rules
_CURRENCY = r"(?:Rs\.?|INR|₹)"
_AMOUNT = r"(\d[\d,]*(?:\.\d{1,2})?)"

# Specific merchants first, generic bank/card alerts last
DEFAULT_PATTERN_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        id="netflix",
        sender_match="netflix.com",
        subject_match=r"Your Netflix bill",
        amount_pattern=_CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Entertainment",
    ),
    PatternRule(
        id="amazon",
        sender_match="amazon.in",
        subject_match=r"Your Amazon.*order",
        amount_pattern=r"(?:Order Total:|Total:)\s*" + _CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Shopping",
    ),
    PatternRule(
        id="swiggy",
        sender_match="swiggy.in",
        subject_match=r"Your Swiggy order",
        amount_pattern=r"(?:Total bill|Bill total):?\s*" + _CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Food & Dining",
    ),
    PatternRule(
        id="zomato",
        sender_match="zomato.com",
        subject_match=r"Your Zomato order",
        amount_pattern=r"(?:Total|Bill Amount):?\s*" + _CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Food & Dining",
    ),
    PatternRule(
        id="uber",
        sender_match="uber.com",
        subject_match=r"Your.*trip with Uber",
        amount_pattern=r"(?:Trip Fare|Total):?\s*" + _CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Transportation",
    ),
    PatternRule(
        id="creditcard",
        sender_match="statement|credit card",
        subject_match=r"Transaction Alert|Purchase",
        amount_pattern=r"(?:Amount|Transaction):?\s*" + _CURRENCY + r"\s*" + _AMOUNT,
        default_category_name="Other",
    ),
    PatternRule(
        id="bank",
        sender_match="bank|hdfc|icici|sbi|axis",
        subject_match=r"Debit Alert|Debited",
        amount_pattern=(
            r"(?:debited|withdrawn)\s*(?:with|by|for)?\s*" + _CURRENCY + r"?\s*" + _AMOUNT
        ),
        default_category_name="Other",
    ),
)


class PatternRegistry:
    """Immutable, ordered set of extraction rules.

    Rules are tried in registration order and the first match wins, so
    specific merchants must be registered before generic bank alerts.
    """

    def __init__(self, rules: Iterable[PatternRule]):
        """Initialize the registry.

        Args:
            rules: Rules in priority order

        Raises:
            ValidationError: If rule ids repeat or a pattern does not compile
        """
        self._rules = tuple(rules)
        seen: set[str] = set()
        compiled = []
        for rule in self._rules:
            if rule.id in seen:
                raise ValidationError(f"Duplicate pattern rule id '{rule.id}'")
            seen.add(rule.id)
            try:
                subject_re = re.compile(rule.subject_match, re.IGNORECASE)
                amount_re = re.compile(rule.amount_pattern, re.IGNORECASE)
            except re.error as e:
                raise ValidationError(f"Invalid pattern in rule '{rule.id}': {e}") from e
            if amount_re.groups < 1:
                raise ValidationError(f"Amount pattern of rule '{rule.id}' has no capturing group")
            senders = tuple(
                part.strip().lower() for part in rule.sender_match.split("|") if part.strip()
            )
            compiled.append((rule, senders, subject_re, amount_re))
        self._compiled = tuple(compiled)

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        """Rules in priority order."""
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def match(self, sender: str, subject: str) -> Optional[PatternRule]:
        """Return the first rule whose sender or subject condition holds."""
        found = self._match_compiled(sender, subject)
        return found[0] if found else None

    def amount_regex(self, rule: PatternRule) -> re.Pattern:
        """Compiled, case-insensitive amount pattern for a registered rule."""
        for candidate, _, _, amount_re in self._compiled:
            if candidate.id == rule.id:
                return amount_re
        raise ValidationError(f"Pattern rule '{rule.id}' is not registered")

    def _match_compiled(self, sender: str, subject: str):
        sender_lower = (sender or "").lower()
        subject = subject or ""
        for entry in self._compiled:
            rule, senders, subject_re, _ = entry
            if any(s in sender_lower for s in senders):
                return entry
            if subject_re.search(subject):
                return entry
        return None


def default_registry() -> PatternRegistry:
    """Registry built from the built-in merchant and bank rules."""
    return PatternRegistry(DEFAULT_PATTERN_RULES)
