"""
Destination classification.

Every component that branches on the destination country (lettermail
tariff, carrier request builder) consumes a ``Destination`` instead of
comparing country codes itself.
"""

from dataclasses import dataclass
from enum import Enum


class DestinationKind(str, Enum):
    """Where a parcel is going relative to the origin market."""

    DOMESTIC = "domestic"
    TRADING_PARTNER = "trading_partner"
    INTERNATIONAL = "international"


# Labels used in lettermail service names
DESTINATION_LABELS = {
    DestinationKind.DOMESTIC: "Domestic",
    DestinationKind.TRADING_PARTNER: "USA",
    DestinationKind.INTERNATIONAL: "International",
}


@dataclass(frozen=True)
class Destination:
    """
    Classified destination.

    Attributes:
        kind: Domestic, trading partner or international.
        country_code: ISO-2 country code as supplied (upper-cased).
    """

    kind: DestinationKind
    country_code: str

    @property
    def is_domestic(self) -> bool:
        return self.kind is DestinationKind.DOMESTIC

    @property
    def is_trading_partner(self) -> bool:
        return self.kind is DestinationKind.TRADING_PARTNER

    @property
    def requires_postal_code(self) -> bool:
        """International destinations may omit the postal code."""
        return self.kind is not DestinationKind.INTERNATIONAL

    @property
    def label(self) -> str:
        return DESTINATION_LABELS[self.kind]


def classify_destination(
    country: str,
    origin_country: str = "CA",
    trading_partner: str = "US",
) -> Destination:
    """
    Classify a destination country against the origin market.

    Args:
        country: Destination ISO-2 country code.
        origin_country: Origin market country code (domestic).
        trading_partner: Country code of the origin's primary trading partner.

    Returns:
        Destination: The classified destination.
    """
    code = (country or "").strip().upper()
    if code == origin_country.upper():
        kind = DestinationKind.DOMESTIC
    elif code == trading_partner.upper():
        kind = DestinationKind.TRADING_PARTNER
    else:
        kind = DestinationKind.INTERNATIONAL
    return Destination(kind=kind, country_code=code)
