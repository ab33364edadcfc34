"""
Tests for the Canada Post rating client and response models.
"""

import base64

import pytest
import requests
import xmltodict

from src.canadapost_client.api_client import (
    RATE_MEDIA_TYPE,
    RATE_NAMESPACE,
    CanadaPostClient,
    CarrierApiError,
    CarrierCredentials,
    CarrierCredentialsError,
    build_destination,
)
from src.canadapost_client.models import (
    CarrierRawQuote,
    QuoteErr,
    QuoteOk,
    ScalarTax,
    WrappedTax,
    parse_error_messages,
    parse_tax_field,
    tax_value,
)
from src.pricing.destination import classify_destination
from src.utils.config_loader import AppConfig
from tests.fixtures.canadapost_mocks import (
    EMPTY_PRICE_QUOTES_XML,
    ERROR_MESSAGES_XML,
    MULTIPLE_ERROR_MESSAGES_XML,
    NO_PRICE_DETAILS_XML,
    PRICE_QUOTES_XML,
    SINGLE_PRICE_QUOTE_XML,
)
from tests.fixtures.fx_mocks import FakeResponse, FakeSession


CA = classify_destination("CA")
US = classify_destination("US")
GB = classify_destination("GB")


@pytest.fixture
def config(monkeypatch) -> AppConfig:
    monkeypatch.delenv("CP_ENVIRONMENT", raising=False)
    return AppConfig()


@pytest.fixture
def credentials() -> CarrierCredentials:
    return CarrierCredentials(
        username="user",
        password="secret",
        customer_number="0001234567",
        contract_id="0040012345",
    )


def make_client(config, credentials, responses=None) -> CanadaPostClient:
    return CanadaPostClient(config, credentials=credentials, session=FakeSession(responses))


def quote_args(destination=CA, postal_code="m5v 3l9"):
    return ("k1a 0b1", destination, postal_code, 0.25, 20.0, 15.0, 5.0)


class TestCarrierCredentials:
    """Tests for CarrierCredentials."""

    def test_from_env(self, config: AppConfig, monkeypatch) -> None:
        monkeypatch.setenv("CP_API_USERNAME", "u")
        monkeypatch.setenv("CP_API_PASSWORD", "p")
        monkeypatch.setenv("CP_CUSTOMER_NUMBER", "123")
        monkeypatch.delenv("CP_CONTRACT_ID", raising=False)

        credentials = CarrierCredentials.from_env(config)
        assert credentials.is_complete()
        assert credentials.contract_id is None

    def test_incomplete(self) -> None:
        assert not CarrierCredentials("u", "", "123").is_complete()

    def test_basic_auth_header(self, credentials: CarrierCredentials) -> None:
        header = credentials.basic_auth_header()
        assert header.startswith("Basic ")
        assert base64.b64decode(header[len("Basic "):]).decode() == "user:secret"


class TestBuildDestination:
    """Tests for build_destination."""

    def test_domestic_upper_cased(self) -> None:
        assert build_destination(CA, "m5v 3l9") == {"domestic": {"postal-code": "M5V3L9"}}

    def test_us_zip_not_upper_cased(self) -> None:
        assert build_destination(US, " 10001 ") == {"united-states": {"zip-code": "10001"}}

    def test_international_with_postal_code(self) -> None:
        assert build_destination(GB, "SW1A 1AA") == {
            "international": {"country-code": "GB", "postal-code": "SW1A 1AA"}
        }

    def test_international_without_postal_code(self) -> None:
        assert build_destination(GB, None) == {"international": {"country-code": "GB"}}


class TestBuildRateRequest:
    """Tests for the mailing-scenario request body."""

    def test_request_document(self, config, credentials) -> None:
        client = make_client(config, credentials)
        body = client.build_rate_request(*quote_args())
        scenario = xmltodict.parse(body)["mailing-scenario"]

        assert scenario["@xmlns"] == RATE_NAMESPACE
        assert scenario["customer-number"] == "0001234567"
        assert scenario["contract-id"] == "0040012345"
        assert scenario["origin-postal-code"] == "K1A0B1"
        assert scenario["parcel-characteristics"]["weight"] == "0.25"
        assert scenario["parcel-characteristics"]["dimensions"] == {
            "length": "20",
            "width": "15",
            "height": "5",
        }
        assert scenario["destination"] == {"domestic": {"postal-code": "M5V3L9"}}

    def test_no_contract_id(self, config, credentials) -> None:
        credentials.contract_id = None
        client = make_client(config, credentials)
        scenario = xmltodict.parse(client.build_rate_request(*quote_args()))["mailing-scenario"]
        assert "contract-id" not in scenario


class TestCanadaPostClient:
    """Tests for CanadaPostClient."""

    def test_sandbox_endpoint_by_default(self, config, credentials) -> None:
        client = make_client(config, credentials)
        assert client.endpoint == config.carrier.sandbox_url

    def test_production_endpoint(self, config, credentials, monkeypatch) -> None:
        monkeypatch.setenv("CP_ENVIRONMENT", "production")
        client = make_client(config, credentials)
        assert client.endpoint == config.carrier.production_url

    def test_get_rates_request(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=PRICE_QUOTES_XML)])
        client.get_rates(*quote_args())

        call = client.session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == config.carrier.sandbox_url
        assert call["headers"]["Content-Type"] == RATE_MEDIA_TYPE
        assert call["headers"]["Accept"] == RATE_MEDIA_TYPE
        assert call["headers"]["Authorization"] == credentials.basic_auth_header()
        assert call["headers"]["Accept-language"] == "en-CA"
        assert call["timeout"] == config.carrier.timeout_seconds
        assert b"<mailing-scenario" in call["data"]

    def test_get_rates_parses_quotes(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=PRICE_QUOTES_XML)])
        raw = client.get_rates(*quote_args())

        assert [q.service_code for q in raw.price_quotes] == ["DOM.EP", "DOM.PC"]
        expedited = raw.price_quotes[0]
        assert expedited.service_name == "Expedited Parcel"
        assert expedited.base == 10.00
        assert expedited.due == 10.00
        assert expedited.tax("gst") == 0.50
        assert expedited.expected_transit_time == "2"
        assert expedited.expected_delivery_date == "2026-10-20"

    def test_wrapped_taxes(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=PRICE_QUOTES_XML)])
        priority = client.get_rates(*quote_args()).price_quotes[1]

        assert priority.taxes["gst"] == WrappedTax(value=1.00, attributes={"percent": "5.0"})
        assert priority.taxes["pst"] is None
        assert priority.tax("pst") == 0.0
        assert priority.tax("hst") == 2.60

    def test_single_quote_flattened(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=SINGLE_PRICE_QUOTE_XML)])
        raw = client.get_rates(*quote_args(US, "10001"))

        assert len(raw.price_quotes) == 1
        quote = raw.price_quotes[0]
        assert quote.service_code == "USA.SP.AIR"
        assert quote.tax("gst") == 0.0
        assert quote.expected_delivery_date is None

    def test_empty_response(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=EMPTY_PRICE_QUOTES_XML)])
        assert client.get_rates(*quote_args()).is_empty

    def test_error_status_parses_messages(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(401, text=ERROR_MESSAGES_XML)])

        with pytest.raises(CarrierApiError) as exc_info:
            client.get_rates(*quote_args())

        error = exc_info.value
        assert error.status_code == 401
        assert error.details["messages"] == [
            {
                "code": "E002",
                "description": "AA004: You cannot mail on behalf of the requested customer.",
            }
        ]
        assert "E002" in error.message

    def test_error_status_with_plain_body(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(500, text="Server Error")])

        with pytest.raises(CarrierApiError) as exc_info:
            client.get_rates(*quote_args())
        assert exc_info.value.details["response"] == "Server Error"

    def test_unparseable_body(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text="not xml <")])
        with pytest.raises(CarrierApiError):
            client.get_rates(*quote_args())

    def test_quote_without_price_details(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=NO_PRICE_DETAILS_XML)])
        with pytest.raises(CarrierApiError) as exc_info:
            client.get_rates(*quote_args())
        assert "price-details" in exc_info.value.message

    def test_network_error(self, config, credentials) -> None:
        client = make_client(config, credentials, [requests.exceptions.ConnectionError("refused")])
        with pytest.raises(CarrierApiError):
            client.get_rates(*quote_args())

    def test_missing_credentials(self, config) -> None:
        client = make_client(config, CarrierCredentials("", "", ""))
        with pytest.raises(CarrierCredentialsError):
            client.get_rates(*quote_args())
        assert client.session.calls == []


class TestFetchQuotes:
    """Tests for the result-returning fetch_quotes."""

    def test_ok(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=PRICE_QUOTES_XML)])
        result = client.fetch_quotes(*quote_args())
        assert isinstance(result, QuoteOk)
        assert len(result.quote.price_quotes) == 2

    def test_api_error(self, config, credentials) -> None:
        client = make_client(
            config, credentials, [FakeResponse(400, text=MULTIPLE_ERROR_MESSAGES_XML)]
        )
        result = client.fetch_quotes(*quote_args())
        assert isinstance(result, QuoteErr)
        assert result.status_code == 400
        assert len(result.details["messages"]) == 2

    def test_quote_without_price_details(self, config, credentials) -> None:
        client = make_client(config, credentials, [FakeResponse(200, text=NO_PRICE_DETAILS_XML)])
        result = client.fetch_quotes(*quote_args())
        assert isinstance(result, QuoteErr)
        assert "DOM.EP" in result.reason

    def test_missing_credentials(self, config) -> None:
        client = make_client(config, CarrierCredentials("", "", ""))
        result = client.fetch_quotes(*quote_args())
        assert isinstance(result, QuoteErr)
        assert "credentials" in result.reason


class TestModels:
    """Tests for response model helpers."""

    def test_parse_tax_field_variants(self) -> None:
        assert parse_tax_field(None) is None
        assert parse_tax_field("0.50") == ScalarTax(0.50)
        assert parse_tax_field({"@percent": "13.0", "#text": "2.60"}) == WrappedTax(
            2.60, {"percent": "13.0"}
        )

    def test_tax_value(self) -> None:
        assert tax_value(None) == 0.0
        assert tax_value(ScalarTax(1.25)) == 1.25
        assert tax_value(WrappedTax(0.75)) == 0.75

    def test_raw_quote_without_root(self) -> None:
        assert CarrierRawQuote.from_xml_dict({}).is_empty
        assert CarrierRawQuote.from_xml_dict(None).is_empty

    def test_price_quote_requires_price_details(self) -> None:
        with pytest.raises(ValueError):
            CarrierRawQuote.from_xml_dict(xmltodict.parse(NO_PRICE_DETAILS_XML))

    def test_parse_error_messages_none(self) -> None:
        assert parse_error_messages({"price-quotes": {}}) == []
