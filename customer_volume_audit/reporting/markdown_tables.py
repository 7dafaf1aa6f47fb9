"""Markdown table formatters for segmentation results.

Formats tier personas, growth-ready customers and the outlier cut as
markdown tables suitable for any markdown renderer.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Sequence

from customer_volume_audit.segmentation.growth import GrowthKind

if TYPE_CHECKING:
    from customer_volume_audit.pipeline import SegmentationResult
    from customer_volume_audit.segmentation.growth import GrowthAssessment, GrowthValue
    from customer_volume_audit.segmentation.outliers import OutlierFilterResult
    from customer_volume_audit.segmentation.summary import TierSummary

# Rows shown in the growth-ready table before truncating
DEFAULT_GROWTH_READY_LIMIT = 25


def _dash(value: object) -> str:
    return "-" if value is None else str(value)


def format_growth_value(growth: GrowthValue) -> str:
    """Human-readable growth: ``+12.50%``, ``new``, ``dormant`` or ``-``.

    Examples
    --------
    >>> from customer_volume_audit.segmentation.growth import GrowthValue
    >>> format_growth_value(GrowthValue.finite(12.5))
    '+12.50%'
    >>> format_growth_value(GrowthValue.infinite())
    'new'
    """
    if growth.kind is GrowthKind.FINITE:
        return f"{growth.percent:+.2f}%"
    if growth.kind is GrowthKind.INFINITE:
        return "new"
    if growth.kind is GrowthKind.DORMANT:
        return "dormant"
    return "-"


def format_tier_summary_table(summaries: Sequence[TierSummary]) -> str:
    """Format tier personas as a markdown table.

    Parameters
    ----------
    summaries:
        Output of :func:`~customer_volume_audit.segmentation.summarize_tiers`

    Returns
    -------
    str:
        Markdown-formatted table, one row per tier
    """
    table = """## Volume Tier Personas

| Tier | Records | Customers | Mean Volume | Median Volume | Avg Deliveries | Fountain Only | Top Trade Channel | Top Cold Drink Channel | Top Order Type | Median Delivery Cost | Growth Ready |
|------|---------|-----------|-------------|---------------|----------------|---------------|-------------------|------------------------|----------------|----------------------|--------------|
"""
    for s in summaries:
        cost = f"${s.median_delivery_cost:,.2f}" if s.median_delivery_cost is not None else "-"
        table += (
            f"| {s.tier.value} | {s.record_count:,} | {s.customer_count:,} "
            f"| {s.mean_volume:,.2f} | {s.median_volume:,.2f} | {s.mean_transactions:,.2f} "
            f"| {s.fountain_only_pct}% | {_dash(s.top_trade_channel)} "
            f"| {_dash(s.top_cold_drink_channel)} | {_dash(s.top_order_type)} "
            f"| {cost} | {s.growth_ready_count:,} |\n"
        )
    return table


def format_growth_ready_table(
    assessments: Sequence[GrowthAssessment],
    limit: int = DEFAULT_GROWTH_READY_LIMIT,
) -> str:
    """Format growth-ready customer-years, newest year first.

    Infinite growth (newly activated) sorts ahead of finite growth within a
    year. Only the first ``limit`` rows are listed.
    """
    ready = [a for a in assessments if a.growth_ready]
    ready.sort(
        key=lambda a: (
            -a.year,
            0 if a.volume_growth.kind is GrowthKind.INFINITE else 1,
            -(a.volume_growth.percent or 0.0),
            a.customer_id,
        )
    )

    table = f"""## Growth Ready Customers

{len(ready):,} customer-years in Low/Medium tiers with positive year-over-year growth.

| Customer | Year | Tier | Volume | Previous Volume | Growth |
|----------|------|------|--------|-----------------|--------|
"""
    for a in ready[:limit]:
        previous = f"{a.previous_volume:,.2f}" if a.previous_volume is not None else "-"
        table += (
            f"| {a.customer_id} | {a.year} | {a.tier.value} | {a.total_volume:,.2f} "
            f"| {previous} | {format_growth_value(a.volume_growth)} |\n"
        )
    if len(ready) > limit:
        table += f"\n_{len(ready) - limit:,} more not shown._\n"
    return table


def format_outlier_table(outliers: OutlierFilterResult) -> str:
    """Format the outlier cut-off and its effect."""
    return f"""## Outlier Filter

| Metric | Value |
|--------|-------|
| Percentile | p{outliers.percentile:g} |
| Volume Threshold | {outliers.threshold:,.2f} |
| Retained Customer-Years | {len(outliers.retained):,} |
| Dropped Customer-Years | {len(outliers.dropped):,} ({outliers.dropped_share * 100:.2f}%) |
"""


def format_segmentation_report(
    result: SegmentationResult,
    generated_at: datetime | None = None,
    growth_ready_limit: int = DEFAULT_GROWTH_READY_LIMIT,
) -> str:
    """Assemble the complete markdown report for a pipeline run."""
    generated_at = generated_at or datetime.now()
    years = sorted({a.year for a in result.aggregates})
    year_span = f"{years[0]}-{years[-1]}" if years else "-"

    sections = [
        "# Customer Volume Segmentation Report\n",
        f"**Generated:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Years:** {year_span}",
        f"**Customers:** {len({a.customer_id for a in result.aggregates}):,}\n",
        format_outlier_table(result.outliers),
        format_tier_summary_table(result.tier_summaries),
        format_growth_ready_table(result.growth, limit=growth_ready_limit),
    ]
    return "\n".join(sections)
