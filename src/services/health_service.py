"""
Health checks for the rate service.

Each check inspects one thing a rate request depends on: the configured
origin, the carrier credentials and the FX rate source.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from src.canadapost_client.api_client import CarrierCredentials
from src.pricing.fx_provider import CurrencyRateProvider, get_fx_provider
from src.utils.config_loader import AppConfig, get_carrier_environment, get_origin_postal_code

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    ERROR = "error"


@dataclass
class CheckResult:
    """Outcome of one health check."""

    status: CheckStatus
    message: str
    latency_ms: Optional[float] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value, "message": self.message}
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        result.update(self.details)
        return result


def overall_status(checks: dict[str, CheckResult]) -> str:
    """
    Roll individual checks up into one status.

    Any error makes the service unhealthy (rate requests will fail);
    degraded checks only reduce what a response contains.
    """
    statuses = {check.status for check in checks.values()}
    if CheckStatus.ERROR in statuses:
        return "unhealthy"
    if CheckStatus.DEGRADED in statuses:
        return "degraded"
    return "healthy"


@dataclass
class HealthReport:
    status: str
    timestamp: str
    version: str
    checks: dict[str, CheckResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "version": self.version,
            "components": {name: check.to_dict() for name, check in self.checks.items()},
        }


class HealthService:
    """Runs the health checks against the current configuration."""

    VERSION = "1.0.0"

    def __init__(self, config: AppConfig, fx_provider: Optional[CurrencyRateProvider] = None):
        self.config = config
        self.fx_provider = fx_provider or get_fx_provider(config)

    def get_full_health(self) -> HealthReport:
        """
        Run every check.

        Returns:
            HealthReport: Overall status plus one entry per check.
        """
        checks = {
            "origin": self.check_origin(),
            "carrier": self.check_carrier(),
            "fx_rate": self.check_fx_rate(),
        }
        report = HealthReport(
            status=overall_status(checks),
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            version=self.VERSION,
            checks=checks,
        )
        if report.status != "healthy":
            logger.info(f"Health check: {report.status}")
        return report

    def check_origin(self) -> CheckResult:
        origin_postal = get_origin_postal_code(self.config)
        if not origin_postal:
            return CheckResult(
                CheckStatus.ERROR,
                f"Origin postal code not configured ({self.config.origin.postal_code_env})",
            )
        return CheckResult(
            CheckStatus.OK,
            f"Origin {origin_postal}",
            details={"country": self.config.origin.country},
        )

    def check_carrier(self) -> CheckResult:
        """Credentials only; no rating call is made."""
        credentials = CarrierCredentials.from_env(self.config)
        details: dict[str, Any] = {"environment": get_carrier_environment(self.config)}
        if not credentials.is_complete():
            return CheckResult(
                CheckStatus.DEGRADED,
                "No Canada Post credentials - lettermail rates only",
                details=details,
            )
        details["contract"] = bool(credentials.contract_id)
        return CheckResult(CheckStatus.OK, "Canada Post credentials configured", details=details)

    def check_fx_rate(self) -> CheckResult:
        """Resolve the FX rate the same way a rate request would."""
        start = time.perf_counter()
        info = self.fx_provider.get_rate_info()
        latency_ms = (time.perf_counter() - start) * 1000

        details = {"rate": info["rate"], "source": info["source"]}
        if info["source"] == "fallback":
            return CheckResult(
                CheckStatus.DEGRADED,
                f"Using fallback rate {info['rate']:.4f}",
                latency_ms=latency_ms,
                details=details,
            )
        return CheckResult(
            CheckStatus.OK,
            f"{info['currency_pair']} {info['rate']:.4f} ({info['source']})",
            latency_ms=latency_ms,
            details=details,
        )
