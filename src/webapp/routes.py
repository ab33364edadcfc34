"""
FastAPI routes for the shipping rate web application.

Handles:
- Rate lookup (lettermail + Canada Post parcel rates)
- Current FX rate
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends

from src.canadapost_client.api_client import CanadaPostClient
from src.pricing.fx_provider import CurrencyRateProvider, get_fx_provider
from src.services.health_service import HealthService
from src.services.rate_service import RateService
from src.utils.config_loader import AppConfig, load_config, load_env
from src.webapp.schemas import FXRateResponse, RateRequest


logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Dependency Injection
# ============================================================================

@lru_cache()
def get_app_config() -> AppConfig:
    """
    Get application config (cached).

    Use as a FastAPI dependency to avoid repeated config loading.
    Clear cache with get_app_config.cache_clear() if config changes.
    """
    load_env()
    return load_config()


def get_currency_provider(config: AppConfig = Depends(get_app_config)) -> CurrencyRateProvider:
    """Shared FX provider, so the rate cache spans requests."""
    return get_fx_provider(config)


@lru_cache()
def get_carrier_client() -> CanadaPostClient:
    """
    Canada Post client shared across requests (cached).

    Reuses one HTTP session. Closed on app shutdown via close_carrier_client().
    """
    return CanadaPostClient(get_app_config())


def close_carrier_client() -> None:
    if get_carrier_client.cache_info().currsize:
        get_carrier_client().close()
        get_carrier_client.cache_clear()


def get_rate_service(
    config: AppConfig = Depends(get_app_config),
    fx_provider: CurrencyRateProvider = Depends(get_currency_provider),
    carrier_client: CanadaPostClient = Depends(get_carrier_client),
) -> RateService:
    return RateService(config, fx_provider=fx_provider, carrier_client=carrier_client)


def get_health_service(
    config: AppConfig = Depends(get_app_config),
    fx_provider: CurrencyRateProvider = Depends(get_currency_provider),
) -> HealthService:
    return HealthService(config, fx_provider=fx_provider)


# ============================================================================
# Routes
# ============================================================================

@router.post("/api/rates")
def get_rates(
    payload: RateRequest,
    service: RateService = Depends(get_rate_service),
) -> Dict[str, Any]:
    """
    Quote shipping options for a destination.

    Returns lettermail options followed by Canada Post parcel rates. If the
    carrier call fails the lettermail options are still returned.

    Currencies are mixed: lettermail entries are flat CAD tariff prices,
    parcel entries are converted to USD. Each entry carries its own
    ``currency``.
    """
    result = service.get_rates(payload.to_shipping_request())
    if result.is_degraded:
        logger.info(f"Returning degraded rates: {result.carrier_error}")
    return result.to_dict()


@router.get("/api/fx-rate", response_model=FXRateResponse)
def get_fx_rate(
    fx_provider: CurrencyRateProvider = Depends(get_currency_provider),
) -> FXRateResponse:
    """Current CAD→USD rate and where it came from."""
    info = fx_provider.get_rate_info()
    return FXRateResponse(**info)


@router.get("/health")
def health_check(service: HealthService = Depends(get_health_service)) -> Dict[str, Any]:
    """Detailed health check endpoint for monitoring."""
    return service.get_full_health().to_dict()
