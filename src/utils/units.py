"""
Mass unit conversions.

Weights arrive in grams, kilograms or pounds. The carrier API is rated in
kilograms while the lettermail tariff is banded in grams.
"""

GRAMS_PER_KILOGRAM = 1000.0
KILOGRAMS_PER_POUND = 0.453592
GRAMS_PER_POUND = 453.592


def to_kilograms(value: float, unit: str | None = "kg") -> float:
    """
    Convert a weight to kilograms.

    Unknown units are treated as kilograms.

    Args:
        value: Weight value (>= 0).
        unit: One of "g", "kg", "lb".

    Returns:
        float: Weight in kilograms.
    """
    if unit == "g":
        return value / GRAMS_PER_KILOGRAM
    if unit == "lb":
        return value * KILOGRAMS_PER_POUND
    return value


def to_grams(value: float, unit: str | None = "g") -> float:
    """
    Convert a weight to grams.

    Unknown units are treated as grams.

    Args:
        value: Weight value (>= 0).
        unit: One of "g", "kg", "lb".

    Returns:
        float: Weight in grams.
    """
    if unit == "kg":
        return value * GRAMS_PER_KILOGRAM
    if unit == "lb":
        return value * GRAMS_PER_POUND
    return value
