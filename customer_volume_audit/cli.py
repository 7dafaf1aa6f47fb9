"""Command line entry points for the customer volume audit."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from customer_volume_audit.pandas.sources import (
    load_delivery_costs_csv,
    load_locations_csv,
    load_profiles_csv,
    load_transactions_csv,
)
from customer_volume_audit.pipeline import (
    DEFAULT_DELIVERY_COST_APPLICABLE_TO,
    PipelineConfig,
    run_segmentation,
)
from customer_volume_audit.reporting.exports import (
    export_segmentation_csv,
    export_segmentation_json,
    export_segmentation_report,
)
from customer_volume_audit.reporting.markdown_tables import format_segmentation_report
from customer_volume_audit.segmentation.outliers import DEFAULT_OUTLIER_PERCENTILE

logger = logging.getLogger(__name__)


MAX_INPUT_BYTES = 500 * 1024 * 1024  # 500 MiB cap to avoid accidental OOM


def _check_input(path: Path) -> Path:
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise ValueError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    return resolved


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Segment distributor customers by annual delivery volume"
    )
    parser.add_argument("transactions", type=Path, help="Path to transactions CSV")
    parser.add_argument("profiles", type=Path, help="Path to customer profile CSV")
    parser.add_argument("locations", type=Path, help="Path to zip/address mapping CSV")
    parser.add_argument(
        "delivery_costs", type=Path, help="Path to delivery cost schedule CSV"
    )
    parser.add_argument(
        "--output-csv",
        type=Path,
        help="Path for the persona/growth table as CSV",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Path for the Markdown report (printed to stdout when omitted)",
    )
    parser.add_argument(
        "--json",
        dest="json_path",
        type=Path,
        help="Path for the persona/growth table and tier summaries as JSON",
    )
    parser.add_argument(
        "--percentile",
        type=float,
        default=DEFAULT_OUTLIER_PERCENTILE,
        help=f"Upper volume percentile for outlier removal (default: {DEFAULT_OUTLIER_PERCENTILE:g})",
    )
    parser.add_argument(
        "--applicable-to",
        default=DEFAULT_DELIVERY_COST_APPLICABLE_TO,
        help=(
            "Delivery cost product family to join on "
            f"(default: {DEFAULT_DELIVERY_COST_APPLICABLE_TO!r}; pass '' for all rows)"
        ),
    )
    parser.add_argument(
        "--year",
        dest="years",
        type=int,
        action="append",
        help="Restrict to a year; repeat for several (defaults to every year)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def segment_customers_cli(argv: list[str] | None = None) -> int:
    """Run the volume segmentation pipeline over four CSV exports.

    This command:
    1. Loads transactions, customer profiles, zip locations and delivery costs
    2. Aggregates delivered volume per customer and year
    3. Drops customer-years above the volume percentile
    4. Assigns volume tiers and volume range buckets
    5. Joins persona attributes and delivery costs
    6. Flags Low/Medium tier customers with positive year-over-year growth
    7. Writes the table (CSV/JSON) and a Markdown report

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig(
            outlier_percentile=args.percentile,
            delivery_cost_applicable_to=args.applicable_to or None,
            years=frozenset(args.years) if args.years else None,
        )

        transactions = load_transactions_csv(_check_input(args.transactions))
        if not transactions:
            logger.error("No transactions found in input file")
            return 1

        result = run_segmentation(
            transactions,
            load_profiles_csv(_check_input(args.profiles)),
            load_locations_csv(_check_input(args.locations)),
            load_delivery_costs_csv(_check_input(args.delivery_costs)),
            config=config,
        )
    except ValueError as exc:
        logger.error(f"Segmentation failed: {exc}")
        return 1

    if args.output_csv:
        export_segmentation_csv(result, args.output_csv)
    if args.json_path:
        export_segmentation_json(
            result,
            args.json_path,
            metadata={
                "transactions": str(args.transactions),
                "outlier_percentile": args.percentile,
                "applicable_to": config.delivery_cost_applicable_to,
            },
        )
    if args.report:
        export_segmentation_report(result, args.report)
    else:  # stdout fallback enables piping in shell usage.
        print(format_segmentation_report(result))

    logger.info(
        f"Segmented {len(result.personas)} customer-years; "
        f"{len(result.growth_ready)} growth ready"
    )
    return 0


def main() -> None:
    raise SystemExit(segment_customers_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
