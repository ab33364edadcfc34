"""
Uniform quote shape shared by lettermail tariffs and carrier rates.
"""

from dataclasses import dataclass
from typing import Any

NOT_AVAILABLE = "N/A"


@dataclass
class PriceBreakdown:
    """
    Price components in the quote currency, rounded to cents.

    Attributes:
        base: Base postage.
        gst: Goods and services tax.
        pst: Provincial sales tax.
        hst: Harmonized sales tax.
        total: Amount charged to the customer.
    """

    base: float
    gst: float = 0.0
    pst: float = 0.0
    hst: float = 0.0
    total: float = 0.0

    @classmethod
    def flat(cls, price: float) -> "PriceBreakdown":
        """Breakdown for a flat, untaxed price (total == base)."""
        return cls(base=price, gst=0.0, pst=0.0, hst=0.0, total=price)

    def to_dict(self) -> dict[str, float]:
        return {
            "base": self.base,
            "gst": self.gst,
            "pst": self.pst,
            "hst": self.hst,
            "total": self.total,
        }


@dataclass
class NormalizedQuote:
    """
    A single shipping option.

    Attributes:
        service_name: Human-readable service name.
        service_code: Stable service identifier.
        price_details: Price breakdown.
        delivery_date: Expected delivery date, or "N/A".
        transit_days: Transit time (days or a "2-4" style range), or "N/A".
        currency: ISO currency code of the prices.
        is_lettermail: True for flat-rate lettermail tiers.
        note: Size-limit note for lettermail tiers.
    """

    service_name: str
    service_code: str
    price_details: PriceBreakdown
    delivery_date: str = NOT_AVAILABLE
    transit_days: str = NOT_AVAILABLE
    currency: str = "USD"
    is_lettermail: bool = False
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase shape returned by the API."""
        result: dict[str, Any] = {
            "serviceName": self.service_name,
            "serviceCode": self.service_code,
            "priceDetails": self.price_details.to_dict(),
            "deliveryDate": self.delivery_date,
            "transitDays": self.transit_days,
            "currency": self.currency,
        }
        if self.is_lettermail:
            result["isLettermail"] = True
        if self.note:
            result["note"] = self.note
        return result
