"""Command line interface for the IAM server certificate expiry audit."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .config import AuditConfig, parse_regions
from .core import export_report_to_excel, export_report_to_json, print_report, run_audit
from .errors import FetchError
from .reporter import DEFAULT_WARNING_DAYS
from .services.elb import DEFAULT_MAX_REGION_WORKERS, DEFAULT_REGIONS

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EXPIRING = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(
        description=(
            "Report IAM server certificates that are expired or close to expiring, "
            "with the CloudFront distributions and classic load balancers using them."
        )
    )
    parser.add_argument("--profile", help="AWS CLI profile to use", default=None)
    parser.add_argument("--region", help="AWS region for load balancer checks", default=None)
    regions = parser.add_mutually_exclusive_group()
    regions.add_argument(
        "--regions",
        nargs="+",
        default=None,
        help="List classic load balancers in each of these regions",
    )
    regions.add_argument(
        "--all-regions",
        action="store_true",
        help=f"List classic load balancers in {', '.join(DEFAULT_REGIONS)}",
    )
    parser.add_argument(
        "--allow-partial-regions",
        action="store_true",
        help="Report the regions that succeeded when others fail instead of aborting",
    )
    parser.add_argument(
        "--max-region-workers",
        type=int,
        default=DEFAULT_MAX_REGION_WORKERS,
        help="Number of regions queried at the same time (default: %(default)s)",
    )
    parser.add_argument(
        "--warning-days",
        type=int,
        default=DEFAULT_WARNING_DAYS,
        help="Warn about certificates expiring within this many days (default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also list certificates that are not close to expiring",
    )
    parser.add_argument("--json", dest="json_path", help="Optional path to export the report as JSON")
    parser.add_argument(
        "--excel",
        dest="excel_path",
        help="Optional path to export the report as an Excel workbook (.xlsx)",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help=f"Exit with status {EXIT_EXPIRING} when an expired or expiring certificate is reported",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level written to stderr (default: %(default)s)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AuditConfig:
    """Translate parsed arguments into an :class:`AuditConfig`."""

    if args.all_regions:
        regions = DEFAULT_REGIONS
    else:
        regions = parse_regions(",".join(args.regions or ()))
    return AuditConfig(
        verbose=args.verbose,
        warning_days=args.warning_days,
        regions=regions,
        max_region_workers=args.max_region_workers,
        allow_partial_regions=args.allow_partial_regions,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m cert_expiry_audit``."""

    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        config = build_config(args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    try:
        session = boto3.Session(profile_name=args.profile, region_name=args.region)
        report = run_audit(session, config)
    except (FetchError, BotoCoreError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    print_report(report)

    if args.json_path:
        try:
            path = export_report_to_json(report, args.json_path)
        except OSError as exc:
            print(f"Failed to export JSON report: {exc}", file=sys.stderr)
        else:
            print(f"JSON report written to {path}", file=sys.stderr)

    if args.excel_path:
        try:
            path = export_report_to_excel(report, args.excel_path)
        except (RuntimeError, OSError) as exc:
            print(f"Failed to export Excel report: {exc}", file=sys.stderr)
        else:
            print(f"Excel report written to {path}", file=sys.stderr)

    if args.fail_on_warning and report.has_expiring:
        return EXIT_EXPIRING
    return EXIT_OK


__all__ = ["build_config", "main", "parse_args"]
