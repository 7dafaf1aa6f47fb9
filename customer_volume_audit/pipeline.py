"""End-to-end customer volume segmentation.

Runs the stages in order over in-memory records:

    transactions -> customer-year aggregates -> outlier filter -> tiers
    -> personas -> growth -> tier summaries

Each run is stateless; the outlier threshold is recomputed from the data
every time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from customer_volume_audit.foundation.aggregation import (
    CustomerYearAggregate,
    aggregate_customer_years,
)
from customer_volume_audit.foundation.records import (
    CustomerProfile,
    DeliveryCostRate,
    TransactionRecord,
    ZipLocation,
)
from customer_volume_audit.segmentation.growth import GrowthAssessment, classify_growth
from customer_volume_audit.segmentation.outliers import (
    DEFAULT_OUTLIER_PERCENTILE,
    OutlierFilterResult,
    filter_volume_outliers,
)
from customer_volume_audit.segmentation.personas import PersonaRecord, build_personas
from customer_volume_audit.segmentation.summary import TierSummary, summarize_tiers
from customer_volume_audit.segmentation.tiers import TieredAggregate, assign_tiers

logger = logging.getLogger(__name__)

# Product family used to pick one delivery cost row per channel and range
DEFAULT_DELIVERY_COST_APPLICABLE_TO = "Bottles and Cans"


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for :func:`run_segmentation`.

    Attributes
    ----------
    outlier_percentile:
        Upper percentile of customer-year volume above which records are
        dropped (default: 99).
    delivery_cost_applicable_to:
        Product family used to narrow the delivery cost schedule (default:
        ``"Bottles and Cans"``). Rows without a family always apply.
        ``None`` uses every row.
    years:
        Optional set of years to keep. Transactions from other years are
        ignored before aggregation. ``None`` keeps every year.
    """

    outlier_percentile: float = DEFAULT_OUTLIER_PERCENTILE
    delivery_cost_applicable_to: str | None = DEFAULT_DELIVERY_COST_APPLICABLE_TO
    years: frozenset[int] | None = None

    def __post_init__(self) -> None:
        if not 0 < self.outlier_percentile <= 100:
            raise ValueError(
                f"outlier_percentile must be in (0, 100]: {self.outlier_percentile}"
            )
        if self.years is not None and not self.years:
            raise ValueError("years must be None or a non-empty set")


@dataclass(frozen=True)
class SegmentationResult:
    """Everything produced by one pipeline run."""

    aggregates: tuple[CustomerYearAggregate, ...]
    outliers: OutlierFilterResult
    tiered: tuple[TieredAggregate, ...]
    personas: tuple[PersonaRecord, ...]
    growth: tuple[GrowthAssessment, ...]
    tier_summaries: tuple[TierSummary, ...] = field(default_factory=tuple)

    @property
    def growth_ready(self) -> tuple[GrowthAssessment, ...]:
        return tuple(a for a in self.growth if a.growth_ready)


def run_segmentation(
    transactions: Sequence[TransactionRecord],
    profiles: Sequence[CustomerProfile] = (),
    locations: Sequence[ZipLocation] = (),
    delivery_costs: Sequence[DeliveryCostRate] = (),
    config: PipelineConfig | None = None,
) -> SegmentationResult:
    """Run every segmentation stage over the provided datasets.

    Parameters
    ----------
    transactions:
        Delivery events.
    profiles, locations, delivery_costs:
        Reference data, left-joined onto the tiered records.
    config:
        Pipeline configuration; defaults to :class:`PipelineConfig`.

    Raises
    ------
    ValueError
        If no customer-year aggregates remain to compute the outlier
        percentile from, or a reference source has duplicate keys.
    """
    config = config or PipelineConfig()

    if config.years is not None:
        transactions = [t for t in transactions if t.year in config.years]
        logger.info(
            f"Kept {len(transactions)} transactions for years {sorted(config.years)}"
        )

    aggregates = aggregate_customer_years(transactions)
    logger.info(
        f"Aggregated {len(transactions)} transactions into "
        f"{len(aggregates)} customer-year records"
    )

    outliers = filter_volume_outliers(aggregates, percentile=config.outlier_percentile)
    tiered = assign_tiers(outliers.retained)

    personas = build_personas(
        tiered,
        transactions,
        profiles,
        locations,
        delivery_costs,
        applicable_to=config.delivery_cost_applicable_to,
    )
    growth = classify_growth(tiered)
    summaries = summarize_tiers(personas, growth)

    for summary in summaries:
        logger.info(
            f"{summary.tier.value}: {summary.record_count} records, "
            f"{summary.customer_count} customers, "
            f"{summary.growth_ready_count} growth ready"
        )

    return SegmentationResult(
        aggregates=tuple(aggregates),
        outliers=outliers,
        tiered=tuple(tiered),
        personas=tuple(personas),
        growth=tuple(growth),
        tier_summaries=tuple(summaries),
    )
