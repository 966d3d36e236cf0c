#!/usr/bin/env python3
"""
Customer range tool.
This script reads a customer file, measures the distance of every customer
from a reference point and lists the customers within range, sorted by id.

Requirements:
    pip install pyproj

"""

from typing import List
import argparse
import logging
import sys

from . import __version__
from .config import (
    CustomerRangeConfig,
    DEFAULT_MIN_FRACTION_DIGITS,
    DEFAULT_REFERENCE,
    DEFAULT_THRESHOLD_KM,
)
from .customer import CustomerRecord, WarningLog
from .file_utils import read_customer_file
from .geometry import DistanceMethod, Ellipsoid, GeoPoint
from .metrics import collect_metrics, log_metrics
from .parser import ParseSession

# Configure logging
logger = logging.getLogger("customer_range")

BOLD = "\x1b[1m"
RESET = "\x1b[0m"
WARNING_HEADER = "Warnung!"


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="List customers within range of a reference point",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="Customer file to process",
    )
    parser.add_argument(
        "--lat",
        type=float,
        default=DEFAULT_REFERENCE.latitude,
        help=f"Reference latitude in degrees (default: {DEFAULT_REFERENCE.latitude})",
    )
    parser.add_argument(
        "--long",
        type=float,
        default=DEFAULT_REFERENCE.longitude,
        help=f"Reference longitude in degrees (default: {DEFAULT_REFERENCE.longitude})",
    )
    parser.add_argument(
        "--distance",
        type=float,
        default=DEFAULT_THRESHOLD_KM,
        help=f"Maximum customer distance in km (default: {DEFAULT_THRESHOLD_KM:g})",
    )
    parser.add_argument(
        "--ellipsoid",
        type=str,
        default="WGS84",
        help="Reference ellipsoid name as known to pyproj (default: WGS84)",
    )
    parser.add_argument(
        "--method",
        type=str,
        default=DistanceMethod.HIGH_PRECISION.value,
        choices=[method.value for method in DistanceMethod],
        help="Distance calculation (default: high)",
    )
    parser.add_argument(
        "--min-fraction-digits",
        type=int,
        default=DEFAULT_MIN_FRACTION_DIGITS,
        help=(
            "Digits required after the decimal point of coordinates "
            f"(default: {DEFAULT_MIN_FRACTION_DIGITS})"
        ),
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Don't highlight warning headers with terminal escape codes",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"customer-range {__version__}",
    )
    return parser


def setup_logging(log_level: str) -> None:
    """Setup logging configuration."""
    level = getattr(logging, log_level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)


def build_config(args: argparse.Namespace) -> CustomerRangeConfig:
    """
    Build the processing configuration from command-line arguments.

    Raises:
        ValueError: If the ellipsoid is unknown or the digit count is negative
    """
    if args.min_fraction_digits < 0:
        raise ValueError("--min-fraction-digits must not be negative")
    return CustomerRangeConfig(
        reference=GeoPoint(latitude=args.lat, longitude=args.long),
        threshold_km=args.distance,
        ellipsoid=Ellipsoid.from_name(args.ellipsoid),
        method=DistanceMethod(args.method),
        min_fraction_digits=args.min_fraction_digits,
        log_level=args.log_level,
        metrics=args.metrics,
    )


def format_warning(message: str, color: bool = True) -> str:
    """Format a warning block with its header."""
    header = f"{BOLD}{WARNING_HEADER}{RESET}" if color else WARNING_HEADER
    return f"\n{header}\n{message}\n"


def print_result(
    customers: List[CustomerRecord], warnings: WarningLog, color: bool = True
) -> None:
    """
    Print warnings, the customers within range and a summary line.

    Args:
        customers: Customers within range, already sorted
        warnings: Warnings raised while parsing
        color: Whether to highlight warning headers
    """
    for message in warnings.messages:
        print(format_warning(message, color))

    for customer in customers:
        print(f"{customer.identifier}  {customer.distance_km:.2f} km")

    print(f"\n{len(customers)} customers found.")


def main():
    """
    Parses command-line arguments, reads the customer file
    and prints the customers within range.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if not args.filename:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level)

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    try:
        raw_text = read_customer_file(args.filename)
    except FileNotFoundError:
        logger.error(f"Customer file not found: {args.filename}")
        sys.exit(1)
    except PermissionError:
        logger.error(f"Cannot read customer file (permission denied): {args.filename}")
        sys.exit(1)
    except (IsADirectoryError, UnicodeDecodeError) as e:
        logger.error(f"Invalid customer file {args.filename}: {e}")
        sys.exit(1)

    if not config.reference.is_valid():
        logger.warning(f"Reference point {config.reference} is outside the valid range")

    session = ParseSession(config)
    result = session.process(raw_text)
    logger.info(
        f"Found {result.customer_count} of {len(session.candidates)} customers "
        f"within {config.threshold_km:g} km"
    )

    print_result(result.customers, result.warnings, color=not args.no_color)

    log_metrics(collect_metrics(session, result), config.metrics)


if __name__ == "__main__":
    main()
