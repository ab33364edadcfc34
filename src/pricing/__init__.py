"""
Pricing module.

Destination classification, lettermail tariffs, CAD→USD FX rates and
normalization of carrier quotes into one quote shape.
"""

from src.pricing.destination import Destination, DestinationKind, classify_destination
from src.pricing.fx_provider import CurrencyRateProvider, RateCache, get_fx_provider
from src.pricing.lettermail import get_lettermail_options
from src.pricing.quotes import NormalizedQuote, PriceBreakdown
from src.pricing.rate_normalizer import RateNormalizer, convert_amount, round_money

__all__ = [
    "Destination",
    "DestinationKind",
    "classify_destination",
    "CurrencyRateProvider",
    "RateCache",
    "get_fx_provider",
    "get_lettermail_options",
    "NormalizedQuote",
    "PriceBreakdown",
    "RateNormalizer",
    "convert_amount",
    "round_money",
]
