"""
Configuration loader module.

Loads application configuration from YAML files and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class OriginConfig:
    """Origin market configuration."""

    country: str = "CA"
    trading_partner: str = "US"
    postal_code: str | None = None
    postal_code_env: str = "ORIGIN_POSTAL_CODE"


@dataclass
class CarrierConfig:
    """Canada Post rating API configuration."""

    environment: str = "development"  # "development" or "production"
    environment_env: str = "CP_ENVIRONMENT"
    sandbox_url: str = "https://ct.soa-gw.canadapost.ca/rs/ship/price"
    production_url: str = "https://soa-gw.canadapost.ca/rs/ship/price"
    username_env: str = "CP_API_USERNAME"
    password_env: str = "CP_API_PASSWORD"
    customer_number_env: str = "CP_CUSTOMER_NUMBER"
    contract_id_env: str = "CP_CONTRACT_ID"
    accept_language: str = "en-CA"
    timeout_seconds: float | None = 30


@dataclass
class FXConfig:
    """Currency conversion configuration."""

    base_url: str = "https://www.visa.ca/cmsapi/fx/rates"
    from_currency: str = "CAD"
    to_currency: str = "USD"
    fallback_rate: float = 0.73
    cache_ttl_seconds: int = 3600
    timeout_seconds: float | None = 10


@dataclass
class PricingConfig:
    """Quote presentation configuration."""

    handling_fee: float = 2.00
    output_currency: str = "USD"
    tariff_currency: str = "CAD"
    decimal_places: int = 2


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    file: str | None = None


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    port_env: str = "PORT"
    reload: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """
    Main application configuration.

    Aggregates all configuration sections into a single object.
    """

    origin: OriginConfig = field(default_factory=OriginConfig)
    carrier: CarrierConfig = field(default_factory=CarrierConfig)
    fx: FXConfig = field(default_factory=FXConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_env(env_file: Path = Path(".env")) -> None:
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to .env file.
    """
    if env_file.exists():
        load_dotenv(env_file)
        logger.debug(f"Loaded environment from: {env_file}")
    else:
        logger.debug(f"No .env file found at: {env_file}")


def load_config(config_file: Path = Path("config/config.yaml")) -> AppConfig:
    """
    Load application configuration from YAML file.

    Args:
        config_file: Path to configuration YAML file.

    Returns:
        AppConfig: Loaded configuration object.

    Raises:
        yaml.YAMLError: If config file is invalid.
    """
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}. Using defaults.")
        return AppConfig()

    with open(config_file, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return AppConfig()

    config = _parse_config(raw_config)
    logger.info(f"Loaded configuration from: {config_file}")
    return config


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    """
    Parse raw YAML dict into AppConfig dataclass.

    Args:
        raw: Raw dictionary from YAML file.

    Returns:
        AppConfig: Parsed configuration object.
    """
    defaults = AppConfig()

    origin_raw = raw.get("origin") or {}
    origin = OriginConfig(
        country=str(origin_raw.get("country", defaults.origin.country)).upper(),
        trading_partner=str(
            origin_raw.get("trading_partner", defaults.origin.trading_partner)
        ).upper(),
        postal_code=origin_raw.get("postal_code"),
        postal_code_env=origin_raw.get("postal_code_env", defaults.origin.postal_code_env),
    )

    carrier_raw = raw.get("carrier") or {}
    carrier = CarrierConfig(
        environment=carrier_raw.get("environment", defaults.carrier.environment),
        environment_env=carrier_raw.get("environment_env", defaults.carrier.environment_env),
        sandbox_url=carrier_raw.get("sandbox_url", defaults.carrier.sandbox_url),
        production_url=carrier_raw.get("production_url", defaults.carrier.production_url),
        username_env=carrier_raw.get("username_env", defaults.carrier.username_env),
        password_env=carrier_raw.get("password_env", defaults.carrier.password_env),
        customer_number_env=carrier_raw.get(
            "customer_number_env", defaults.carrier.customer_number_env
        ),
        contract_id_env=carrier_raw.get("contract_id_env", defaults.carrier.contract_id_env),
        accept_language=carrier_raw.get("accept_language", defaults.carrier.accept_language),
        timeout_seconds=carrier_raw.get("timeout_seconds", defaults.carrier.timeout_seconds),
    )

    fx_raw = raw.get("fx") or {}
    fx = FXConfig(
        base_url=fx_raw.get("base_url", defaults.fx.base_url),
        from_currency=fx_raw.get("from_currency", defaults.fx.from_currency),
        to_currency=fx_raw.get("to_currency", defaults.fx.to_currency),
        fallback_rate=float(fx_raw.get("fallback_rate", defaults.fx.fallback_rate)),
        cache_ttl_seconds=int(fx_raw.get("cache_ttl_seconds", defaults.fx.cache_ttl_seconds)),
        timeout_seconds=fx_raw.get("timeout_seconds", defaults.fx.timeout_seconds),
    )

    pricing_raw = raw.get("pricing") or {}
    pricing = PricingConfig(
        handling_fee=float(pricing_raw.get("handling_fee", defaults.pricing.handling_fee)),
        output_currency=pricing_raw.get("output_currency", defaults.pricing.output_currency),
        tariff_currency=pricing_raw.get("tariff_currency", defaults.pricing.tariff_currency),
        decimal_places=int(pricing_raw.get("decimal_places", defaults.pricing.decimal_places)),
    )

    logging_raw = raw.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_raw.get("level", defaults.logging.level),
        format=logging_raw.get("format", defaults.logging.format),
        file=logging_raw.get("file"),
    )

    server_raw = raw.get("server") or {}
    server = ServerConfig(
        host=str(server_raw.get("host", defaults.server.host)),
        port=int(server_raw.get("port", defaults.server.port)),
        port_env=server_raw.get("port_env", defaults.server.port_env),
        reload=bool(server_raw.get("reload", defaults.server.reload)),
        cors_origins=list(server_raw.get("cors_origins", defaults.server.cors_origins)),
    )

    return AppConfig(
        origin=origin,
        carrier=carrier,
        fx=fx,
        pricing=pricing,
        logging=logging_config,
        server=server,
    )


def get_env_var(key: str, default: str | None = None) -> str | None:
    """
    Get an environment variable with optional default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(key, default)


def get_origin_postal_code(config: AppConfig) -> str | None:
    """
    Resolve the origin postal code.

    The environment variable named by ``origin.postal_code_env`` takes
    precedence over a literal ``origin.postal_code`` in the YAML file.

    Returns:
        The postal code, or None if neither source provides one.
    """
    value = get_env_var(config.origin.postal_code_env) or config.origin.postal_code
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def get_carrier_environment(config: AppConfig) -> str:
    """Get the carrier environment, letting the environment variable override YAML."""
    return (get_env_var(config.carrier.environment_env) or config.carrier.environment).lower()


def get_server_port(config: AppConfig) -> int:
    """Get the listen port; the environment variable named by ``server.port_env`` wins."""
    value = get_env_var(config.server.port_env)
    if value and value.strip():
        return int(value)
    return config.server.port
