"""
nocwatch command line entry point.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from nocwatch import __version__
from nocwatch.config import get_settings
from nocwatch.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nocwatch",
        description="Validate discovered AWS resources against CloudWatch and generate Grafana alert rules",
    )
    parser.add_argument("--version", action="version", version=f"nocwatch {__version__}")
    parser.add_argument("--log-level", help="Log level (default: NOCWATCH_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate discovered resources against CloudWatch")
    validate_parser.add_argument("discovery_file", help="Discovery snapshot (YAML or JSON)")
    validate_parser.add_argument("--metrics-snapshot", help="Offline CloudWatch dimension snapshot (YAML)")
    validate_parser.add_argument("--customer", help="Customer name shown in the report")
    validate_parser.add_argument("--output", "-o", help="Report path (default: <output_dir>/validation-report.md)")
    validate_parser.add_argument("--format", dest="output_format", choices=["text", "json"], default="text")

    generate_parser = subparsers.add_parser("generate", help="Generate alert rules for validated resources")
    generate_parser.add_argument("discovery_file", help="Discovery snapshot (YAML or JSON)")
    generate_parser.add_argument("--customer", required=True, help="Customer name")
    generate_parser.add_argument("--templates-dir", help="Alert templates directory")
    generate_parser.add_argument("--output-dir", help="Output directory")
    generate_parser.add_argument("--metrics-snapshot", help="Offline CloudWatch dimension snapshot (YAML)")
    generate_parser.add_argument("--customizations", dest="customizations_file", help="Per-template overrides (YAML)")
    generate_parser.add_argument(
        "--default-selection",
        action="store_true",
        help="Only core templates and conditional templates whose feature was detected",
    )
    generate_parser.add_argument("--data-source", dest="data_source_type", choices=["cloudwatch", "prometheus"])
    generate_parser.add_argument("--cloudwatch-uid", help="Grafana CloudWatch data source UID")
    generate_parser.add_argument("--prometheus-uid", help="Grafana Prometheus data source UID")
    generate_parser.add_argument("--region", dest="regions", action="append", help="Customer region (repeatable)")
    generate_parser.add_argument("--dry-run", action="store_true", help="Preview without writing files")
    generate_parser.add_argument("--format", dest="output_format", choices=["text", "json"], default="text")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    if args.command == "validate":
        from nocwatch.cli.validate import validate_command

        sys.exit(
            validate_command(
                args.discovery_file,
                metrics_snapshot=args.metrics_snapshot,
                output=args.output,
                customer=args.customer,
                output_format=args.output_format,
            )
        )

    if args.command == "generate":
        from nocwatch.cli.generate import generate_command

        sys.exit(
            generate_command(
                args.discovery_file,
                args.customer,
                templates_dir=args.templates_dir,
                output_dir=args.output_dir,
                metrics_snapshot=args.metrics_snapshot,
                customizations_file=args.customizations_file,
                default_selection=args.default_selection,
                data_source_type=args.data_source_type,
                cloudwatch_uid=args.cloudwatch_uid,
                prometheus_uid=args.prometheus_uid,
                regions=args.regions,
                dry_run=args.dry_run,
                output_format=args.output_format,
            )
        )

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
