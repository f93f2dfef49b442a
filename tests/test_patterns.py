"""Tests for the pattern registry."""

import pytest

from moneytracker.domain.entities import PatternRule
from moneytracker.domain.errors import ValidationError
from moneytracker.domain.patterns import DEFAULT_PATTERN_RULES, PatternRegistry, default_registry


def test_default_registry_order():
    """Merchants come before the generic card and bank rules."""
    ids = [rule.id for rule in default_registry().rules]
    assert ids == ["netflix", "amazon", "swiggy", "zomato", "uber", "creditcard", "bank"]


def test_match_by_sender():
    registry = default_registry()
    rule = registry.match("Swiggy <noreply@swiggy.in>", "Your receipt")
    assert rule.id == "swiggy"
    assert rule.default_category_name == "Food & Dining"


def test_match_by_subject():
    registry = default_registry()
    rule = registry.match("someone@example.com", "Debit Alert: account XX1234")
    assert rule.id == "bank"


def test_subject_match_is_case_insensitive():
    registry = default_registry()
    assert registry.match("x@example.com", "your netflix BILL").id == "netflix"


def test_sender_alternatives():
    """Each '|' alternative of the sender condition matches on its own."""
    registry = default_registry()
    assert registry.match("alerts@hdfcbank.net", "Hello").id == "bank"
    assert registry.match("info@icici.example", "Hello").id == "bank"
    assert registry.match("bank|hdfc", "Hello").id == "bank"


def test_first_match_wins():
    """A merchant email that also looks like a card alert goes to the merchant rule."""
    registry = default_registry()
    rule = registry.match("orders@amazon.in", "Transaction Alert for your purchase")
    assert rule.id == "amazon"


def test_no_match():
    registry = default_registry()
    assert registry.match("friend@example.com", "Lunch tomorrow?") is None


def test_amount_regex_extracts_group():
    registry = default_registry()
    rule = registry.match("orders@amazon.in", "")
    found = registry.amount_regex(rule).search("Order Total: ₹1,299.50")
    assert found.group(1) == "1,299.50"


def test_duplicate_rule_ids_rejected():
    rule = DEFAULT_PATTERN_RULES[0]
    with pytest.raises(ValidationError, match="Duplicate"):
        PatternRegistry([rule, rule])


def test_invalid_regex_rejected():
    rule = PatternRule(
        id="broken",
        sender_match="example.com",
        subject_match="(unclosed",
        amount_pattern=r"(\d+)",
        default_category_name="Other",
    )
    with pytest.raises(ValidationError, match="Invalid pattern"):
        PatternRegistry([rule])


def test_amount_pattern_needs_group():
    rule = PatternRule(
        id="nogroup",
        sender_match="example.com",
        subject_match="Receipt",
        amount_pattern=r"\d+",
        default_category_name="Other",
    )
    with pytest.raises(ValidationError, match="capturing group"):
        PatternRegistry([rule])


def test_amount_regex_unknown_rule():
    registry = PatternRegistry(DEFAULT_PATTERN_RULES[:1])
    with pytest.raises(ValidationError):
        registry.amount_regex(DEFAULT_PATTERN_RULES[1])
