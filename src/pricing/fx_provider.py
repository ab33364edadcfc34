"""
FX rate provider module.

Retrieves CAD→USD exchange rates from the Visa FX rates endpoint, with an
in-memory cache and a fallback default.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

import requests

from src.utils.config_loader import AppConfig


logger = logging.getLogger(__name__)


class FXProviderError(Exception):
    """Exception raised for FX rate retrieval errors."""
    pass


@dataclass
class ExchangeRate:
    """
    A fetched exchange rate.

    Attributes:
        rate: Positive multiplier from the source to the target currency.
        fetched_at: Unix timestamp (seconds) of acquisition.
    """

    rate: float
    fetched_at: float


class RateCache:
    """
    Holds the most recent exchange rate.

    Writes are last-write-wins replacements; concurrent refreshes may each
    fetch, but the cache never holds a partial value.
    """

    def __init__(self, ttl_seconds: float = 3600) -> None:
        self.ttl_seconds = ttl_seconds
        self._entry: Optional[ExchangeRate] = None

    @property
    def entry(self) -> Optional[ExchangeRate]:
        return self._entry

    def get(self, now: float) -> Optional[float]:
        """
        Get the cached rate if it is still fresh.

        Args:
            now: Current Unix timestamp.

        Returns:
            The rate, or None if empty or expired.
        """
        entry = self._entry
        if entry is None:
            return None
        if now - entry.fetched_at >= self.ttl_seconds:
            return None
        return entry.rate

    def last_rate(self) -> Optional[float]:
        """Get the last stored rate regardless of age."""
        return self._entry.rate if self._entry else None

    def refresh(self, rate: float, now: float) -> ExchangeRate:
        """Store a new rate acquired at ``now``."""
        self._entry = ExchangeRate(rate=rate, fetched_at=now)
        return self._entry

    def expire(self) -> None:
        """Force the next lookup to refetch, keeping the value for fallback."""
        if self._entry is not None:
            self._entry = ExchangeRate(rate=self._entry.rate, fetched_at=float("-inf"))

    def clear(self) -> None:
        self._entry = None


def format_query_date(day: date) -> str:
    """Format a date as MM/DD/YYYY for the FX query."""
    return day.strftime("%m/%d/%Y")


def parse_rate(payload: Any) -> float:
    """
    Extract the rate from an FX response body.

    ``originalValues.fxRateVisa`` is preferred, ``fxRateWithAdditionalFee``
    is used when the first is missing.

    Raises:
        FXProviderError: If no usable positive rate is present.
    """
    if not isinstance(payload, dict):
        raise FXProviderError("FX response is not a JSON object")

    original_values = payload.get("originalValues") or {}
    candidate = None
    if isinstance(original_values, dict):
        candidate = original_values.get("fxRateVisa")
    if candidate in (None, ""):
        candidate = payload.get("fxRateWithAdditionalFee")
    if candidate in (None, ""):
        raise FXProviderError("FX response has no rate field")

    try:
        rate = float(candidate)
    except (TypeError, ValueError):
        raise FXProviderError(f"FX rate is not numeric: {candidate!r}")

    # NaN fails this comparison too
    if not rate > 0:
        raise FXProviderError(f"FX rate must be positive, got {rate}")
    return rate


class CurrencyRateProvider:
    """
    Provider for CAD to USD exchange rates.

    Serves a cached rate while it is younger than the configured TTL,
    otherwise fetches a fresh one. Every failure path resolves to a number:
    the last cached rate if there is one, else the configured fallback.

    Attributes:
        config: Application configuration.
        cache: Rate cache owned by this provider.
        source: Source of the last returned rate (live/cached/fallback).
    """

    def __init__(
        self,
        config: AppConfig,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today,
        cache: Optional[RateCache] = None,
    ) -> None:
        """
        Initialize the FX provider.

        Args:
            config: Application configuration with FX settings.
            session: HTTP session (a plain session is created if omitted).
            clock: Returns the current Unix timestamp.
            today: Returns the local calendar date used in the query.
            cache: Rate cache (a new one with the configured TTL if omitted).
        """
        self.config = config
        self.session = session or requests.Session()
        self.clock = clock
        self.today = today
        self.cache = cache or RateCache(ttl_seconds=config.fx.cache_ttl_seconds)
        self.source: str = "fallback"

    def get_fallback_rate(self) -> float:
        """Get the hardcoded fallback rate from configuration."""
        return float(self.config.fx.fallback_rate)

    def get_rate(self) -> float:
        """
        Get the current CAD to USD rate.

        Never raises.

        Returns:
            float: Exchange rate.
        """
        now = self.clock()
        cached = self.cache.get(now)
        if cached is not None:
            logger.debug(f"Using cached FX rate: {cached}")
            self.source = "cached"
            return cached

        try:
            rate = self.fetch_rate()
        except FXProviderError as e:
            return self._recover(str(e))
        except Exception as e:
            # get_rate must always resolve to a number
            return self._recover(f"Unexpected error fetching FX rate: {type(e).__name__}: {e}")

        self.cache.refresh(rate, self.clock())
        self.source = "live"
        logger.info(
            f"FX rate {self.config.fx.from_currency}->{self.config.fx.to_currency}: {rate}"
        )
        return rate

    def fetch_rate(self) -> float:
        """
        Fetch the current rate from the FX endpoint.

        Returns:
            float: Live exchange rate.

        Raises:
            FXProviderError: If the request or response parsing fails.
        """
        fx_config = self.config.fx
        query_date = format_query_date(self.today())
        params = {
            "amount": 1,
            "fee": 0,
            "utcConvertedDate": query_date,
            "exchangedate": query_date,
            "fromCurr": fx_config.from_currency,
            "toCurr": fx_config.to_currency,
        }

        logger.info(f"Fetching FX rate from {fx_config.base_url} for {query_date}")

        try:
            response = self.session.get(
                fx_config.base_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=fx_config.timeout_seconds,
            )
        except requests.exceptions.Timeout:
            raise FXProviderError(f"FX request timed out after {fx_config.timeout_seconds}s")
        except requests.exceptions.RequestException as e:
            raise FXProviderError(f"FX request failed: {e}")

        if not response.ok:
            raise FXProviderError(f"FX API error: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FXProviderError(f"FX response is not valid JSON: {e}")

        return parse_rate(payload)

    def _recover(self, reason: str) -> float:
        last = self.cache.last_rate()
        if last is not None:
            logger.warning(f"{reason}. Using last cached FX rate: {last}")
            self.source = "cached"
            return last

        fallback = self.get_fallback_rate()
        logger.warning(f"{reason}. Using fallback FX rate: {fallback}")
        self.source = "fallback"
        return fallback

    def get_rate_info(self) -> dict:
        """
        Get information about the current rate.

        Returns:
            dict: Rate value, source and cache timestamp.
        """
        rate = self.get_rate()
        entry = self.cache.entry
        return {
            "rate": rate,
            "source": self.source,
            "currency_pair": f"{self.config.fx.from_currency}/{self.config.fx.to_currency}",
            "fetched_at": entry.fetched_at if entry and entry.fetched_at > 0 else None,
        }


# Process-wide provider shared by all requests
_fx_provider: Optional[CurrencyRateProvider] = None


def get_fx_provider(config: AppConfig) -> CurrencyRateProvider:
    """Get or create the shared FX provider."""
    global _fx_provider
    if _fx_provider is None:
        _fx_provider = CurrencyRateProvider(config)
    return _fx_provider


def reset_fx_provider() -> None:
    """Drop the shared FX provider (used when configuration changes)."""
    global _fx_provider
    _fx_provider = None
