"""
Tests for the command line entry point.
"""

import json
from unittest.mock import Mock

import pytest

from src.canadapost_client.models import QuoteErr
from src.main import EXIT_ERROR, EXIT_INVALID, EXIT_OK, build_request, parse_args, run_cli
from src.services.rate_service import RateService
from src.utils.config_loader import AppConfig


ARGS = [
    "--country", "ca",
    "--postal-code", "K1M 1M4",
    "--street", "24 Sussex Dr",
    "--city", "Ottawa",
    "--province", "ON",
    "--weight", "15",
    "--unit", "g",
    "--length", "24.5",
    "--width", "15.6",
    "--height", "0.5",
]


@pytest.fixture
def service(monkeypatch) -> RateService:
    monkeypatch.setenv("ORIGIN_POSTAL_CODE", "K1A0B1")
    fx_provider = Mock()
    fx_provider.get_rate.return_value = 0.75
    carrier_client = Mock()
    carrier_client.fetch_quotes.return_value = QuoteErr(reason="no credentials")
    return RateService(AppConfig(), fx_provider=fx_provider, carrier_client=carrier_client)


def test_build_request() -> None:
    request = build_request(parse_args(ARGS))
    assert request.country == "CA"
    assert request.weight == 15.0
    assert request.weight_unit == "g"


def test_table_output(service, capsys) -> None:
    assert run_cli(parse_args(ARGS), service) == EXIT_OK

    out = capsys.readouterr().out
    assert "RATES FROM K1A0B1" in out
    assert "Lettermail Domestic (up to 30g)" in out
    assert "1.75 CAD" in out
    assert "Parcel rates unavailable: no credentials" in out


def test_json_output(service, capsys) -> None:
    assert run_cli(parse_args([*ARGS, "--json"]), service) == EXIT_OK

    body = json.loads(capsys.readouterr().out)
    assert body["origin"] == "K1A0B1"
    assert [r["serviceCode"] for r in body["rates"]] == ["LETTERMAIL.STD", "BUBBLE.PACKET"]


def test_invalid_request(service, capsys) -> None:
    args = parse_args(["--country", "CA", "--weight", "1"])
    assert run_cli(args, service) == EXIT_INVALID
    assert "Full shipping info" in capsys.readouterr().out


def test_configuration_error(service, monkeypatch, capsys) -> None:
    monkeypatch.delenv("ORIGIN_POSTAL_CODE")
    assert run_cli(parse_args(ARGS), service) == EXIT_ERROR
    assert "Origin postal code not configured" in capsys.readouterr().out
