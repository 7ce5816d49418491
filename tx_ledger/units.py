"""
Exact decimal scaling of raw on-chain integers.

Raw values can exceed any float's precision, so scaling is done by moving
the decimal point in the digit string.
"""


def format_units(value: int, decimals: int) -> str:
    """
    Render ``value / 10**decimals`` as an exact decimal string.

    The fractional part is stripped of trailing zeros but always keeps at
    least one digit: ``format_units(1500000, 6) == "1.5"``,
    ``format_units(10**18, 18) == "1.0"``.

    Raises:
        ValueError: If decimals is negative
    """
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")

    sign = "-" if value < 0 else ""
    digits = str(abs(value))

    if decimals == 0:
        return f"{sign}{digits}.0"

    # Left-pad so there is at least one whole digit
    digits = digits.rjust(decimals + 1, "0")
    whole = digits[:-decimals]
    fraction = digits[-decimals:].rstrip("0") or "0"
    return f"{sign}{whole}.{fraction}"
