"""
Canada Post API client module.

Provides a client for the Canada Post rating API to fetch parcel
quotes for a destination.
"""

from src.canadapost_client.api_client import (
    CanadaPostClient,
    CanadaPostClientError,
    CarrierApiError,
    CarrierCredentials,
    CarrierCredentialsError,
)
from src.canadapost_client.models import (
    CarrierRawQuote,
    PriceQuote,
    QuoteErr,
    QuoteOk,
    QuoteResult,
    ScalarTax,
    WrappedTax,
)

__all__ = [
    "CanadaPostClient",
    "CanadaPostClientError",
    "CarrierApiError",
    "CarrierCredentials",
    "CarrierCredentialsError",
    "CarrierRawQuote",
    "PriceQuote",
    "QuoteOk",
    "QuoteErr",
    "QuoteResult",
    "ScalarTax",
    "WrappedTax",
]
