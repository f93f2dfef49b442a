"""Amount parsing utilities."""

from decimal import Decimal, DecimalException
import re

TWO_PLACES = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a positive Decimal with 2 fractional digits.

    Handles various formats:
    - "123.45"
    - "1,234.50" (thousands separators)
    - "Rs. 1,234.50", "INR 499", "₹499.00", "$12.00"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount quantized to 2 places

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip()

    # Remove currency markers
    cleaned = re.sub(r"^(?:rs\.?|inr)\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"[₹$€£¥]", "", cleaned)

    # Remove thousands separators
    cleaned = cleaned.replace(",", "").strip()

    try:
        amount = Decimal(cleaned)
    except DecimalException as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e

    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be a positive number, got '{amount_str}'")

    # Fails when the amount has more digits than the decimal context precision
    try:
        return amount.quantize(TWO_PLACES)
    except DecimalException as e:
        raise ValueError(f"Amount out of range: '{amount_str}'") from e
