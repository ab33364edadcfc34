"""
Lettermail tariff evaluation.

Flat-rate, non-tracked small-mail options priced from the published
lettermail tariff rather than the carrier's live rating service.

Two independent tiers are evaluated, so a package may qualify for none,
one or both:

- Standard lettermail: 140x90mm minimum, 245x156x5mm maximum, 2-30g.
- Oversize ("bubble packet"): up to 380x270x20mm, 5-500g, priced in
  weight steps.
"""

import logging

from src.pricing.destination import Destination, DestinationKind
from src.pricing.quotes import PriceBreakdown, NormalizedQuote

logger = logging.getLogger(__name__)

MM_PER_CM = 10

# Standard tier
STANDARD_MIN_LENGTH_MM = 140
STANDARD_MIN_WIDTH_MM = 90
STANDARD_MAX_LENGTH_MM = 245
STANDARD_MAX_WIDTH_MM = 156
STANDARD_MAX_HEIGHT_MM = 5
STANDARD_MIN_WEIGHT_G = 2
STANDARD_MAX_WEIGHT_G = 30

STANDARD_PRICES = {
    DestinationKind.DOMESTIC: 1.75,
    DestinationKind.TRADING_PARTNER: 2.00,
    DestinationKind.INTERNATIONAL: 3.50,
}
STANDARD_TRANSIT = {
    DestinationKind.DOMESTIC: "2-4",
    DestinationKind.TRADING_PARTNER: "4-7",
    DestinationKind.INTERNATIONAL: "7-14",
}

# Oversize tier
OVERSIZE_MAX_LENGTH_MM = 380
OVERSIZE_MAX_WIDTH_MM = 270
OVERSIZE_MAX_HEIGHT_MM = 20
OVERSIZE_MIN_WEIGHT_G = 5
OVERSIZE_MAX_WEIGHT_G = 500

# (max weight in grams, price); the last step has no upper bound within the tier
OVERSIZE_PRICE_STEPS = {
    DestinationKind.DOMESTIC: [(100, 3.11), (200, 4.51), (300, 5.91), (400, 6.62), (None, 7.05)],
    DestinationKind.TRADING_PARTNER: [(100, 4.51), (200, 7.16), (None, 13.38)],
    DestinationKind.INTERNATIONAL: [(100, 8.08), (200, 13.38), (None, 25.80)],
}
OVERSIZE_TRANSIT = {
    DestinationKind.DOMESTIC: "2-5",
    DestinationKind.TRADING_PARTNER: "5-10",
    DestinationKind.INTERNATIONAL: "10-21",
}

STANDARD_SERVICE_CODE = "LETTERMAIL.STD"
OVERSIZE_SERVICE_CODE = "BUBBLE.PACKET"


def cm_to_mm(value_cm: float) -> float:
    # Rounded so inputs like 15.6cm land exactly on the 156mm limit
    return round(value_cm * MM_PER_CM, 6)


def is_standard_eligible(
    weight_grams: float, length_mm: float, width_mm: float, height_mm: float
) -> bool:
    """Check standard lettermail size and weight limits."""
    meets_minimum = length_mm >= STANDARD_MIN_LENGTH_MM and width_mm >= STANDARD_MIN_WIDTH_MM
    within_maximum = (
        length_mm <= STANDARD_MAX_LENGTH_MM
        and width_mm <= STANDARD_MAX_WIDTH_MM
        and height_mm <= STANDARD_MAX_HEIGHT_MM
    )
    return (
        meets_minimum
        and within_maximum
        and STANDARD_MIN_WEIGHT_G <= weight_grams <= STANDARD_MAX_WEIGHT_G
    )


def is_oversize_eligible(
    weight_grams: float, length_mm: float, width_mm: float, height_mm: float
) -> bool:
    """Check oversize lettermail size and weight limits."""
    within_maximum = (
        length_mm <= OVERSIZE_MAX_LENGTH_MM
        and width_mm <= OVERSIZE_MAX_WIDTH_MM
        and height_mm <= OVERSIZE_MAX_HEIGHT_MM
    )
    return within_maximum and OVERSIZE_MIN_WEIGHT_G <= weight_grams <= OVERSIZE_MAX_WEIGHT_G


def oversize_price(weight_grams: float, kind: DestinationKind) -> float:
    """
    Look up the oversize price step for a weight.

    Args:
        weight_grams: Weight in grams (within the oversize tier).
        kind: Destination kind.

    Returns:
        float: Flat price.
    """
    for max_weight, price in OVERSIZE_PRICE_STEPS[kind]:
        if max_weight is None or weight_grams <= max_weight:
            return price
    # Steps always end with an open bound
    raise ValueError(f"No oversize price step for {weight_grams}g")


def get_lettermail_options(
    weight_grams: float,
    length_cm: float,
    width_cm: float,
    height_cm: float,
    destination: Destination,
    currency: str = "CAD",
) -> list[NormalizedQuote]:
    """
    Compute the lettermail options a package qualifies for.

    Pure and deterministic: no I/O and no state.

    Args:
        weight_grams: Package weight in grams.
        length_cm: Length in centimetres.
        width_cm: Width in centimetres.
        height_cm: Height in centimetres.
        destination: Classified destination.
        currency: Currency the tariff is published in.

    Returns:
        List of zero, one or two flat-rate quotes (standard first).
    """
    length_mm = cm_to_mm(length_cm)
    width_mm = cm_to_mm(width_cm)
    height_mm = cm_to_mm(height_cm)
    kind = destination.kind

    options: list[NormalizedQuote] = []

    if is_standard_eligible(weight_grams, length_mm, width_mm, height_mm):
        options.append(
            NormalizedQuote(
                service_name=f"Lettermail {destination.label} (up to {STANDARD_MAX_WEIGHT_G}g)",
                service_code=STANDARD_SERVICE_CODE,
                price_details=PriceBreakdown.flat(STANDARD_PRICES[kind]),
                transit_days=STANDARD_TRANSIT[kind],
                currency=currency,
                is_lettermail=True,
                note=(
                    f"Max: {STANDARD_MAX_LENGTH_MM}mm x {STANDARD_MAX_WIDTH_MM}mm"
                    f" x {STANDARD_MAX_HEIGHT_MM}mm"
                ),
            )
        )

    if is_oversize_eligible(weight_grams, length_mm, width_mm, height_mm):
        options.append(
            NormalizedQuote(
                service_name=f"Bubble Packet {destination.label} (up to {OVERSIZE_MAX_WEIGHT_G}g)",
                service_code=OVERSIZE_SERVICE_CODE,
                price_details=PriceBreakdown.flat(oversize_price(weight_grams, kind)),
                transit_days=OVERSIZE_TRANSIT[kind],
                currency=currency,
                is_lettermail=True,
                note=(
                    f"Max: {OVERSIZE_MAX_LENGTH_MM}mm x {OVERSIZE_MAX_WIDTH_MM}mm"
                    f" x {OVERSIZE_MAX_HEIGHT_MM}mm"
                ),
            )
        )

    logger.debug(
        f"Lettermail options for {weight_grams}g {length_mm}x{width_mm}x{height_mm}mm "
        f"to {destination.country_code}: {[o.service_code for o in options]}"
    )
    return options
