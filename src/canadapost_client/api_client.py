"""
Canada Post rating API client implementation.

Wrapper for the "Get Rates" (rate-v4) call including:
- Basic authentication from environment credentials
- XML request building for domestic, US and international destinations
- XML response parsing into typed quotes
- Error body parsing
"""

import base64
import logging
import os
from dataclasses import dataclass
from typing import Any
from xml.parsers.expat import ExpatError

import requests
import xmltodict

from src.canadapost_client.models import (
    CarrierRawQuote,
    QuoteErr,
    QuoteOk,
    QuoteResult,
    parse_error_messages,
)
from src.pricing.destination import Destination
from src.utils.config_loader import AppConfig, get_carrier_environment

logger = logging.getLogger(__name__)

RATE_NAMESPACE = "http://www.canadapost.ca/ws/ship/rate-v4"
RATE_MEDIA_TYPE = "application/vnd.cpc.ship.rate-v4+xml"


class CanadaPostClientError(Exception):
    """Base exception for Canada Post API errors."""

    pass


class CarrierApiError(CanadaPostClientError):
    """
    The rating call failed or its response could not be parsed.

    Attributes:
        status_code: HTTP status, if a response was received.
        details: Parsed error body.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class CarrierCredentialsError(CanadaPostClientError):
    """API credentials are missing."""

    pass


@dataclass
class CarrierCredentials:
    """Canada Post API credentials."""

    username: str
    password: str
    customer_number: str
    contract_id: str | None = None

    @classmethod
    def from_env(cls, config: AppConfig) -> "CarrierCredentials":
        """Read credentials from the environment variables named in config."""
        carrier = config.carrier
        return cls(
            username=os.environ.get(carrier.username_env, ""),
            password=os.environ.get(carrier.password_env, ""),
            customer_number=os.environ.get(carrier.customer_number_env, ""),
            contract_id=os.environ.get(carrier.contract_id_env) or None,
        )

    def is_complete(self) -> bool:
        return bool(self.username and self.password and self.customer_number)

    def basic_auth_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8"))
        return f"Basic {token.decode('ascii')}"


def _strip_spaces(value: str) -> str:
    return "".join(str(value).split())


def _format_number(value: float, places: int) -> str:
    """Format a number for the request, dropping trailing zeros."""
    text = f"{round(float(value), places):.{places}f}".rstrip("0").rstrip(".")
    return text or "0"


def build_destination(destination: Destination, postal_code: str | None) -> dict[str, Any]:
    """
    Build the ``destination`` element for a rate request.

    Args:
        destination: Classified destination.
        postal_code: Destination postal/ZIP code.

    Returns:
        Dict for xmltodict.unparse.
    """
    if destination.is_domestic:
        return {"domestic": {"postal-code": _strip_spaces(postal_code or "").upper()}}

    if destination.is_trading_partner:
        return {"united-states": {"zip-code": _strip_spaces(postal_code or "")}}

    international: dict[str, Any] = {"country-code": destination.country_code}
    if postal_code:
        international["postal-code"] = postal_code
    return {"international": international}


class CanadaPostClient:
    """
    Client for the Canada Post rating API.

    No automatic retries: a failed call is reported once and the caller
    decides how to degrade.

    Attributes:
        config: Application configuration.
        credentials: API credentials.
        endpoint: Rating endpoint for the configured environment.
        session: Requests session.
    """

    def __init__(
        self,
        config: AppConfig,
        credentials: CarrierCredentials | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the Canada Post client.

        Args:
            config: Application configuration with carrier settings.
            credentials: API credentials. If None, read from the environment.
            session: HTTP session. A plain session is created if omitted.
        """
        self.config = config
        self.credentials = credentials or CarrierCredentials.from_env(config)
        self.session = session or requests.Session()

    @property
    def environment(self) -> str:
        return get_carrier_environment(self.config)

    @property
    def endpoint(self) -> str:
        if self.environment == "production":
            return self.config.carrier.production_url
        return self.config.carrier.sandbox_url

    def close(self) -> None:
        self.session.close()

    def has_credentials(self) -> bool:
        return self.credentials.is_complete()

    def require_credentials(self) -> None:
        """
        Raise an error if credentials are incomplete.

        Raises:
            CarrierCredentialsError: If username, password or customer number is missing.
        """
        if not self.has_credentials():
            carrier = self.config.carrier
            raise CarrierCredentialsError(
                "Canada Post credentials are not configured. Set "
                f"{carrier.username_env}, {carrier.password_env} and {carrier.customer_number_env}."
            )

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": RATE_MEDIA_TYPE,
            "Accept": RATE_MEDIA_TYPE,
            "Authorization": self.credentials.basic_auth_header(),
            "Accept-language": self.config.carrier.accept_language,
        }

    def build_rate_request(
        self,
        origin_postal: str,
        destination: Destination,
        postal_code: str | None,
        weight_kg: float,
        length_cm: float,
        width_cm: float,
        height_cm: float,
    ) -> str:
        """
        Build the ``mailing-scenario`` XML document.

        Returns:
            str: XML request body.
        """
        scenario: dict[str, Any] = {
            "@xmlns": RATE_NAMESPACE,
            "customer-number": self.credentials.customer_number,
        }
        if self.credentials.contract_id:
            scenario["contract-id"] = self.credentials.contract_id
        scenario["parcel-characteristics"] = {
            "weight": _format_number(weight_kg, 3),
            "dimensions": {
                "length": _format_number(length_cm, 1),
                "width": _format_number(width_cm, 1),
                "height": _format_number(height_cm, 1),
            },
        }
        scenario["origin-postal-code"] = _strip_spaces(origin_postal).upper()
        scenario["destination"] = build_destination(destination, postal_code)

        return xmltodict.unparse({"mailing-scenario": scenario}, encoding="UTF-8", pretty=True)

    def get_rates(
        self,
        origin_postal: str,
        destination: Destination,
        postal_code: str | None,
        weight_kg: float,
        length_cm: float,
        width_cm: float,
        height_cm: float,
    ) -> CarrierRawQuote:
        """
        Request rates for a parcel.

        Returns:
            CarrierRawQuote: Parsed quotes (possibly empty).

        Raises:
            CarrierCredentialsError: If credentials are missing.
            CarrierApiError: If the call fails or the response cannot be parsed.
        """
        self.require_credentials()

        body = self.build_rate_request(
            origin_postal, destination, postal_code, weight_kg, length_cm, width_cm, height_cm
        )

        logger.info(
            f"Calling Canada Post rating API ({self.environment}) for "
            f"{destination.country_code} {weight_kg:.3f}kg"
        )

        try:
            response = self.session.post(
                self.endpoint,
                data=body.encode("utf-8"),
                headers=self._get_headers(),
                timeout=self.config.carrier.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            raise CarrierApiError(f"Canada Post request timed out: {e}")
        except requests.exceptions.RequestException as e:
            raise CarrierApiError(f"Network error calling Canada Post: {str(e)[:200]}")

        logger.info(f"Canada Post response status: {response.status_code}")

        if not response.ok:
            raise self._error_from_response(response)

        try:
            parsed = xmltodict.parse(response.text)
        except ExpatError as e:
            raise CarrierApiError(
                f"Could not parse Canada Post response: {e}", status_code=response.status_code
            )

        try:
            return CarrierRawQuote.from_xml_dict(parsed)
        except (TypeError, ValueError, AttributeError) as e:
            raise CarrierApiError(
                f"Unexpected Canada Post response structure: {e}",
                status_code=response.status_code,
            )

    def fetch_quotes(
        self,
        origin_postal: str,
        destination: Destination,
        postal_code: str | None,
        weight_kg: float,
        length_cm: float,
        width_cm: float,
        height_cm: float,
    ) -> QuoteResult:
        """
        Request rates, reporting failure as a value instead of raising.

        Returns:
            QuoteOk with the parsed quote, or QuoteErr with the reason.
        """
        try:
            quote = self.get_rates(
                origin_postal, destination, postal_code, weight_kg, length_cm, width_cm, height_cm
            )
        except CarrierApiError as e:
            return QuoteErr(reason=e.message, status_code=e.status_code, details=e.details)
        except CanadaPostClientError as e:
            return QuoteErr(reason=str(e))
        return QuoteOk(quote=quote)

    def _error_from_response(self, response: requests.Response) -> CarrierApiError:
        """Build a CarrierApiError from a non-success response."""
        details: dict[str, Any] = {}
        try:
            parsed = xmltodict.parse(response.text) if response.text else None
        except ExpatError:
            parsed = None

        if parsed is not None:
            details["response"] = parsed
            messages = parse_error_messages(parsed)
            if messages:
                details["messages"] = messages
        elif response.text:
            details["response"] = response.text[:500]

        messages = details.get("messages") or []
        summary = "; ".join(f"{m['code']}: {m['description']}" for m in messages)
        message = f"Canada Post API error (HTTP {response.status_code})"
        if summary:
            message = f"{message}: {summary}"

        logger.error(message)
        return CarrierApiError(message, status_code=response.status_code, details=details)
