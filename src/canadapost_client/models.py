"""
Data models for Canada Post rating API responses.

Responses are parsed with xmltodict, so repeated elements arrive as lists,
single elements as dicts, and elements carrying attributes as dicts with
``@attr`` keys and a ``#text`` value.
"""

from dataclasses import dataclass, field
from typing import Any, Union


# ============================================================================
# Tax amounts
# ============================================================================

@dataclass(frozen=True)
class ScalarTax:
    """Tax given as a bare amount, e.g. ``<gst>0.50</gst>``."""

    value: float


@dataclass(frozen=True)
class WrappedTax:
    """Tax given with attributes, e.g. ``<gst percent="5.0">0.50</gst>``."""

    value: float
    attributes: dict[str, str] = field(default_factory=dict)


TaxAmount = Union[ScalarTax, WrappedTax]

TAX_FIELDS = ("gst", "pst", "hst")


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def parse_tax_field(node: Any) -> TaxAmount | None:
    """
    Parse a tax element from the xmltodict tree.

    Args:
        node: None, a scalar string/number, or a dict with ``#text``.

    Returns:
        The tax variant, or None when the element is absent or empty.
    """
    if node is None:
        return None
    if isinstance(node, dict):
        attributes = {k[1:]: v for k, v in node.items() if k.startswith("@")}
        return WrappedTax(value=_to_float(node.get("#text")), attributes=attributes)
    return ScalarTax(value=_to_float(node))


def tax_value(tax: TaxAmount | None) -> float:
    """Amount of a tax field, 0 when absent."""
    if tax is None:
        return 0.0
    return tax.value


def as_list(node: Any) -> list[Any]:
    """Flatten xmltodict's single-element form into a list."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


# ============================================================================
# Price quotes
# ============================================================================

@dataclass
class PriceQuote:
    """
    One service's quote from the rating API.

    Attributes:
        service_code: Canada Post service code (e.g. DOM.EP).
        service_name: Service display name.
        base: Base price in CAD.
        due: Amount due in CAD (base + options + adjustments + taxes).
        taxes: Tax fields keyed gst/pst/hst.
        expected_delivery_date: Expected delivery date, if given.
        expected_transit_time: Expected transit days, if given.
    """

    service_code: str
    service_name: str
    base: float = 0.0
    due: float = 0.0
    taxes: dict[str, TaxAmount | None] = field(default_factory=dict)
    expected_delivery_date: str | None = None
    expected_transit_time: str | None = None

    @classmethod
    def from_xml_dict(cls, data: dict[str, Any]) -> "PriceQuote":
        """
        Create a PriceQuote from a parsed ``price-quote`` element.

        Args:
            data: xmltodict representation of the element.

        Returns:
            PriceQuote: Parsed quote.

        Raises:
            ValueError: If the quote carries no ``price-details``.
        """
        price_details = data.get("price-details")
        if not isinstance(price_details, dict):
            raise ValueError(
                f"Quote {data.get('service-code') or '?'} has no price-details"
            )
        raw_taxes = price_details.get("taxes") or {}
        service_standard = data.get("service-standard") or {}

        taxes = {name: parse_tax_field(raw_taxes.get(name)) for name in TAX_FIELDS}

        transit = service_standard.get("expected-transit-time")
        delivery = service_standard.get("expected-delivery-date")

        return cls(
            service_code=str(data.get("service-code") or ""),
            service_name=str(data.get("service-name") or ""),
            base=_to_float(price_details.get("base")),
            due=_to_float(price_details.get("due")),
            taxes=taxes,
            expected_delivery_date=str(delivery) if delivery else None,
            expected_transit_time=str(transit) if transit else None,
        )

    def tax(self, name: str) -> float:
        return tax_value(self.taxes.get(name))


@dataclass
class CarrierRawQuote:
    """
    Parsed ``price-quotes`` response.

    Attributes:
        price_quotes: One entry per available service.
    """

    price_quotes: list[PriceQuote] = field(default_factory=list)

    @classmethod
    def from_xml_dict(cls, data: dict[str, Any] | None) -> "CarrierRawQuote":
        """
        Create a CarrierRawQuote from the parsed response document.

        A missing ``price-quotes`` root or no ``price-quote`` children yields
        an empty quote list.
        """
        root = (data or {}).get("price-quotes") or {}
        if not isinstance(root, dict):
            return cls()
        return cls(
            price_quotes=[PriceQuote.from_xml_dict(q) for q in as_list(root.get("price-quote"))]
        )

    @property
    def is_empty(self) -> bool:
        return not self.price_quotes


# ============================================================================
# Errors
# ============================================================================

def parse_error_messages(data: dict[str, Any] | None) -> list[dict[str, str]]:
    """
    Extract ``<messages><message>`` entries from an error response.

    Returns:
        List of {"code", "description"} dicts (may be empty).
    """
    root = (data or {}).get("messages") or {}
    if not isinstance(root, dict):
        return []
    messages = []
    for message in as_list(root.get("message")):
        if not isinstance(message, dict):
            continue
        messages.append(
            {
                "code": str(message.get("code") or ""),
                "description": str(message.get("description") or ""),
            }
        )
    return messages


# ============================================================================
# Call results
# ============================================================================

@dataclass
class QuoteOk:
    """Successful rating call."""

    quote: CarrierRawQuote


@dataclass
class QuoteErr:
    """Failed rating call."""

    reason: str
    status_code: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


QuoteResult = Union[QuoteOk, QuoteErr]
