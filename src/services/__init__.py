"""
Services layer for shipping rate quotes.

Contains business logic extracted from routes for better testability.
"""

from src.services.rate_service import RateQuoteResult, RateService, ShippingRequest

__all__ = ["RateService", "RateQuoteResult", "ShippingRequest"]
