"""Number parsing utilities."""

import math
import re


def parse_amount(amount_str: str) -> float:
    """Parse a quantity or price string into a float.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "0.00012345"
    - "1e-6"

    Args:
        amount_str: Amount string

    Returns:
        Float amount

    Raises:
        ValueError: If amount string cannot be parsed or is not finite
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency symbols, commas and whitespace
    cleaned = re.sub(r"[$€£¥]", "", amount_str.strip())
    cleaned = cleaned.replace(",", "").strip()

    try:
        amount = float(cleaned)
    except ValueError:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not math.isfinite(amount):
        raise ValueError(f"Amount must be a finite number, got '{amount_str}'")
    return amount
