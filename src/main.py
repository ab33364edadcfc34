"""
CLI entry point for the shipping rate service.

Quotes lettermail and Canada Post parcel options for a single destination
from the command line, using the same rate service as the web app.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.services.rate_service import RateService, ShippingRequest
from src.utils.config_loader import load_config, load_env
from src.utils.logging_config import setup_logging
from src.webapp.exceptions import AppException, ValidationError


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Shipping rate quotes (lettermail + Canada Post)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m src.main --country CA --postal-code K1A0B1 --street "1 Main St" \\
        --city Ottawa --province ON --weight 0.25
    python -m src.main --country US --postal-code 10001 --street "5 Ave" \\
        --city "New York" --province NY --weight 250 --unit g --json
        """,
    )

    parser.add_argument("--country", "-c", help="Destination ISO-2 country code")
    parser.add_argument("--postal-code", "-p", dest="postal_code", help="Destination postal/ZIP code")
    parser.add_argument("--street", help="Destination street")
    parser.add_argument("--city", help="Destination city")
    parser.add_argument("--province", help="Destination province/state")
    parser.add_argument("--weight", "-w", type=float, help="Package weight")
    parser.add_argument(
        "--unit", "-u",
        choices=["g", "kg", "lb"],
        default="kg",
        help="Weight unit (default: kg)",
    )
    parser.add_argument("--length", type=float, help="Length in cm (default: 10)")
    parser.add_argument("--width", type=float, help="Width in cm (default: 10)")
    parser.add_argument("--height", type=float, help="Height in cm (default: 10)")

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to config file (default: config/config.yaml)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the response body as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> ShippingRequest:
    return ShippingRequest(
        country=args.country.strip().upper() if args.country else None,
        street=args.street,
        city=args.city,
        province=args.province,
        postal_code=args.postal_code,
        weight=args.weight,
        weight_unit=args.unit,
        length=args.length,
        width=args.width,
        height=args.height,
    )


def format_rates(body: dict) -> str:
    """Render a rates response as a plain-text table."""
    lines = ["=" * 60, f"RATES FROM {body['origin']}", "=" * 60]
    if not body["rates"]:
        lines.append("  No shipping options available")
    for rate in body["rates"]:
        price = rate["priceDetails"]["total"]
        lines.append(f"  {rate['serviceName']}")
        lines.append(
            f"      {price:.2f} {rate['currency']}"
            f"  | delivery: {rate['deliveryDate']}  | transit: {rate['transitDays']}"
        )
        if rate.get("note"):
            lines.append(f"      {rate['note']}")
    lines.append("=" * 60)
    return "\n".join(lines)


def run_cli(args: argparse.Namespace, service: RateService | None = None) -> int:
    """
    Run a single rate lookup.

    Args:
        args: Parsed command line arguments.
        service: Rate service to use (built from config if omitted).

    Returns:
        int: Exit code (0 for success, 2 for invalid input, 1 for other errors).
    """
    if service is None:
        config = load_config(args.config)
        service = RateService(config)

    try:
        result = service.get_rates(build_request(args))
    except ValidationError as e:
        print(f"\n✗ Invalid request: {e.message}")
        return EXIT_INVALID
    except AppException as e:
        logger.error(f"Rate lookup failed: {e.message}")
        print(f"\n✗ Error: {e.message}")
        return EXIT_ERROR

    body = result.to_dict()
    if args.json:
        print(json.dumps(body, indent=2))
    else:
        print(format_rates(body))
        if result.is_degraded:
            print(f"\n⚠ Parcel rates unavailable: {result.carrier_error}")
        if result.fx_rate is not None:
            print(f"  FX rate used (CAD→USD): {result.fx_rate:.4f}")

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        int: Exit code.
    """
    load_env()

    args = parse_args(argv)

    # stdout is reserved for the rates output
    setup_logging(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        return run_cli(args)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        print(f"\n✗ Fatal error: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
