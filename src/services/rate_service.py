"""
Rate Service for shipping quotes.

Combines the three price sources for a destination:
- Lettermail tariff options (local rules, always available)
- Canada Post parcel rates (live API, may fail)
- CAD→USD FX rate applied to the parcel rates

A failed carrier call degrades the response to lettermail options only.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.canadapost_client.api_client import CanadaPostClient
from src.canadapost_client.models import QuoteErr, QuoteOk
from src.pricing.destination import Destination, classify_destination
from src.pricing.fx_provider import CurrencyRateProvider, get_fx_provider
from src.pricing.lettermail import get_lettermail_options
from src.pricing.quotes import NormalizedQuote
from src.pricing.rate_normalizer import RateNormalizer
from src.utils.config_loader import AppConfig, get_origin_postal_code
from src.utils.units import to_grams, to_kilograms
from src.webapp.exceptions import AppException, ConfigurationError, RateLookupError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION_CM = 10.0
DEFAULT_WEIGHT_UNIT = "kg"


@dataclass
class ShippingRequest:
    """A rate request for one parcel or letter."""

    country: str | None = None
    street: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    weight: float | None = None
    weight_unit: str | None = DEFAULT_WEIGHT_UNIT
    length: float | None = None
    width: float | None = None
    height: float | None = None


@dataclass
class RateQuoteResult:
    """Result of a rate lookup."""

    rates: list[NormalizedQuote]
    origin: str
    fx_rate: float | None = None
    carrier_error: str | None = None
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def is_degraded(self) -> bool:
        """True when parcel rates are missing because the carrier call failed."""
        return self.carrier_error is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rates": [rate.to_dict() for rate in self.rates],
            "origin": self.origin,
        }


class RateService:
    """
    Service for quoting shipping rates.

    Handles:
    - Request validation
    - Unit conversion and dimension defaults
    - Lettermail tariff evaluation
    - FX rate lookup and Canada Post rating
    - Merging lettermail and parcel quotes
    """

    def __init__(
        self,
        app_config: AppConfig,
        fx_provider: CurrencyRateProvider | None = None,
        carrier_client: CanadaPostClient | None = None,
        normalizer: RateNormalizer | None = None,
    ):
        """
        Initialize rate service.

        Args:
            app_config: Application configuration.
            fx_provider: FX provider (the shared provider if omitted).
            carrier_client: Canada Post client (built from config if omitted).
            normalizer: Rate normalizer (built from config if omitted).
        """
        self.app_config = app_config
        self.fx_provider = fx_provider or get_fx_provider(app_config)
        self.carrier_client = carrier_client or CanadaPostClient(app_config)
        self.normalizer = normalizer or RateNormalizer(app_config)
        self.logger = logging.getLogger(f"{__name__}.RateService")

    def validate(self, request: ShippingRequest) -> Destination:
        """
        Validate a request and classify its destination.

        Checks run in order and the first failure is reported.

        Returns:
            Destination: The classified destination.

        Raises:
            ValidationError: If a required field is missing.
        """
        if not request.country or not request.weight:
            raise ValidationError("Country and weight are required", field="country/weight")

        if not request.street or not request.city or not request.province:
            raise ValidationError(
                "Full shipping info (street, city, province) is required",
                field="street/city/province",
            )

        origin = self.app_config.origin
        destination = classify_destination(request.country, origin.country, origin.trading_partner)

        if destination.is_domestic and not request.postal_code:
            raise ValidationError(
                f"Postal code is required for {destination.country_code} destinations",
                field="postalCode",
            )

        if destination.is_trading_partner and not request.postal_code:
            raise ValidationError(
                f"ZIP code is required for {destination.country_code} destinations",
                field="postalCode",
            )

        if request.weight < 0:
            raise ValidationError("Weight must be a positive number", field="weight")

        for name in ("length", "width", "height"):
            value = getattr(request, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name.capitalize()} must not be negative", field=name)

        return destination

    def get_rates(self, request: ShippingRequest) -> RateQuoteResult:
        """
        Quote all available shipping options for a request.

        Args:
            request: The shipping request.

        Returns:
            RateQuoteResult with lettermail options followed by parcel rates.

        Raises:
            ValidationError: If the request is incomplete.
            ConfigurationError: If the origin postal code is not configured.
            RateLookupError: On any unexpected failure.
        """
        try:
            return self._get_rates(request)
        except AppException:
            raise
        except Exception as e:
            self.logger.exception(f"Rate lookup error: {e}")
            raise RateLookupError(str(e)) from e

    def _get_rates(self, request: ShippingRequest) -> RateQuoteResult:
        # Step 1: Validate
        try:
            destination = self.validate(request)
        except ValidationError as e:
            self.logger.info(f"Rejected rate request: {e.message}")
            raise

        # Step 2: Origin
        origin_postal = get_origin_postal_code(self.app_config)
        if not origin_postal:
            raise ConfigurationError(
                "Origin postal code not configured",
                details={"env": self.app_config.origin.postal_code_env},
            )

        # Step 3: Units
        weight_unit = request.weight_unit or DEFAULT_WEIGHT_UNIT
        weight_kg = to_kilograms(request.weight, weight_unit)
        weight_g = to_grams(request.weight, weight_unit)
        length = request.length or DEFAULT_DIMENSION_CM
        width = request.width or DEFAULT_DIMENSION_CM
        height = request.height or DEFAULT_DIMENSION_CM

        self.logger.info(
            f"Quoting {weight_g:.1f}g {length}x{width}x{height}cm "
            f"from {origin_postal} to {destination.country_code}"
        )

        # Step 4: Lettermail tariff (no network)
        lettermail_options = get_lettermail_options(
            weight_g,
            length,
            width,
            height,
            destination,
            currency=self.app_config.pricing.tariff_currency,
        )

        # Step 5: FX rate + Canada Post rates
        parcel_rates, fx_rate, carrier_error = self._fetch_parcel_rates(
            origin_postal, destination, request.postal_code, weight_kg, length, width, height
        )

        rates = [*lettermail_options, *parcel_rates]
        stats = {
            "lettermail": len(lettermail_options),
            "parcel": len(parcel_rates),
            "total": len(rates),
        }

        self.logger.info(
            f"Rate lookup complete: {stats['total']} rates "
            f"({stats['lettermail']} lettermail, {stats['parcel']} parcel)"
            + (" [degraded]" if carrier_error else "")
        )

        return RateQuoteResult(
            rates=rates,
            origin=origin_postal,
            fx_rate=fx_rate,
            carrier_error=carrier_error,
            stats=stats,
        )

    def _fetch_parcel_rates(
        self,
        origin_postal: str,
        destination: Destination,
        postal_code: str | None,
        weight_kg: float,
        length: float,
        width: float,
        height: float,
    ) -> tuple[list[NormalizedQuote], float | None, str | None]:
        """
        Fetch and normalize Canada Post rates.

        Returns:
            Tuple of (quotes, fx_rate_used, carrier_error). Quotes are empty
            and carrier_error is set when the carrier path fails.
        """
        try:
            fx_rate = self.fx_provider.get_rate()
            result = self.carrier_client.fetch_quotes(
                origin_postal, destination, postal_code, weight_kg, length, width, height
            )

            if isinstance(result, QuoteErr):
                self.logger.warning(f"Parcel rate lookup failed: {result.reason}")
                return [], fx_rate, result.reason

            if isinstance(result, QuoteOk):
                return self.normalizer.normalize(result.quote, fx_rate), fx_rate, None

            raise TypeError(f"Unexpected carrier result: {type(result).__name__}")
        except Exception as e:
            self.logger.warning(f"Parcel rate lookup failed: {type(e).__name__}: {e}")
            return [], None, str(e)
