"""
Rate normalizer module.

Maps Canada Post price quotes into the uniform quote shape, converting
CAD amounts into the output currency.

Formula for the quoted total: P_total = round((P_due + handling_fee) × R)
Where:
- P_due = amount due from the carrier in CAD (base + options + taxes)
- handling_fee = flat CAD surcharge (default 2.00)
- R = CAD to USD exchange rate

base/gst/pst/hst are each converted and rounded on their own, so they are
not expected to add up to the total.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from src.canadapost_client.models import CarrierRawQuote, PriceQuote
from src.pricing.quotes import NOT_AVAILABLE, NormalizedQuote, PriceBreakdown
from src.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)


def round_money(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a money amount half-up.

    Args:
        amount: Amount to round.
        decimal_places: Number of decimal places.

    Returns:
        Decimal: Rounded amount.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)


def convert_amount(amount: float, fx_rate: float, decimal_places: int = 2) -> float:
    """
    Convert an amount with an exchange rate and round it.

    Args:
        amount: Amount in the source currency.
        fx_rate: Exchange rate multiplier.
        decimal_places: Decimal places for rounding.

    Returns:
        float: Converted, rounded amount.
    """
    converted = Decimal(str(amount)) * Decimal(str(fx_rate))
    return float(round_money(converted, decimal_places))


class RateNormalizer:
    """
    Converts carrier quotes into NormalizedQuote objects.

    Attributes:
        handling_fee: Flat CAD fee added to each carrier quote's total.
        currency: Output currency code.
        decimal_places: Rounding precision.
    """

    def __init__(self, config: AppConfig) -> None:
        """
        Initialize the normalizer.

        Args:
            config: Application configuration with pricing settings.
        """
        self.config = config
        self.handling_fee = float(config.pricing.handling_fee)
        self.currency = config.pricing.output_currency
        self.decimal_places = config.pricing.decimal_places

    def normalize_quote(self, quote: PriceQuote, fx_rate: float) -> NormalizedQuote:
        """
        Normalize a single carrier quote.

        Args:
            quote: Parsed carrier quote (CAD).
            fx_rate: CAD to output currency rate.

        Returns:
            NormalizedQuote: Quote in the output currency.
        """
        places = self.decimal_places
        total_cad = Decimal(str(quote.due)) + Decimal(str(self.handling_fee))
        total = float(round_money(total_cad * Decimal(str(fx_rate)), places))

        return NormalizedQuote(
            service_name=quote.service_name,
            service_code=quote.service_code,
            price_details=PriceBreakdown(
                base=convert_amount(quote.base, fx_rate, places),
                gst=convert_amount(quote.tax("gst"), fx_rate, places),
                pst=convert_amount(quote.tax("pst"), fx_rate, places),
                hst=convert_amount(quote.tax("hst"), fx_rate, places),
                total=total,
            ),
            delivery_date=quote.expected_delivery_date or NOT_AVAILABLE,
            transit_days=quote.expected_transit_time or NOT_AVAILABLE,
            currency=self.currency,
        )

    def normalize(self, raw_quote: CarrierRawQuote | None, fx_rate: float) -> list[NormalizedQuote]:
        """
        Normalize every quote in a carrier response.

        Args:
            raw_quote: Parsed carrier response.
            fx_rate: CAD to output currency rate.

        Returns:
            List of normalized quotes, empty if the response has none.
        """
        if raw_quote is None or raw_quote.is_empty:
            return []

        quotes = [self.normalize_quote(q, fx_rate) for q in raw_quote.price_quotes]
        logger.debug(f"Normalized {len(quotes)} carrier quotes at FX rate {fx_rate}")
        return quotes
