"""Tier-level persona summaries.

Condenses the enriched customer-year table into one row per volume tier
describing the tier's typical customer: how much they take, how they
order, which channels dominate and how many are growth ready.
"""

from __future__ import annotations

import statistics
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from customer_volume_audit.segmentation.growth import GrowthAssessment
from customer_volume_audit.segmentation.personas import PersonaRecord
from customer_volume_audit.segmentation.tiers import VolumeTier

# Standard precision for shares and averages in summaries
SUMMARY_PRECISION = 2


@dataclass(frozen=True)
class TierSummary:
    """Persona overview for a single volume tier.

    Attributes
    ----------
    tier:
        Volume tier
    record_count:
        Customer-year records in the tier
    customer_count:
        Distinct customers with at least one record in the tier
    mean_volume:
        Average total volume per customer-year
    median_volume:
        Median total volume per customer-year
    mean_transactions:
        Average delivery count per customer-year
    fountain_only_pct:
        Percentage of records flagged fountain only
    top_trade_channel:
        Most common trade channel, ``None`` when no profile matched
    top_cold_drink_channel:
        Most common cold drink channel, ``None`` when no profile matched
    top_order_type:
        Most common modal order type
    median_delivery_cost:
        Median of matched delivery costs, ``None`` when none matched
    growth_ready_count:
        Records in the tier flagged growth ready
    """

    tier: VolumeTier
    record_count: int
    customer_count: int
    mean_volume: float
    median_volume: float
    mean_transactions: float
    fountain_only_pct: float
    top_trade_channel: str | None
    top_cold_drink_channel: str | None
    top_order_type: str | None
    median_delivery_cost: float | None
    growth_ready_count: int


def _most_common(values: Sequence[str | None]) -> str | None:
    counter = Counter(v for v in values if v)
    if not counter:
        return None
    top = max(counter.values())
    return min(k for k, v in counter.items() if v == top)


def summarize_tiers(
    personas: Sequence[PersonaRecord],
    assessments: Sequence[GrowthAssessment] = (),
) -> list[TierSummary]:
    """Summarise personas per tier, ordered Low, Medium, High.

    Tiers without records are omitted.
    """
    ready_keys = {(a.customer_id, a.year) for a in assessments if a.growth_ready}

    summaries: list[TierSummary] = []
    for tier in VolumeTier:
        members = [p for p in personas if p.tier is tier]
        if not members:
            continue

        volumes = [p.total_volume for p in members]
        costs = [
            p.delivery_cost.median_delivery_cost
            for p in members
            if p.delivery_cost is not None
        ]
        summaries.append(
            TierSummary(
                tier=tier,
                record_count=len(members),
                customer_count=len({p.customer_id for p in members}),
                mean_volume=round(statistics.fmean(volumes), SUMMARY_PRECISION),
                median_volume=round(statistics.median(volumes), SUMMARY_PRECISION),
                mean_transactions=round(
                    statistics.fmean(p.tiered.aggregate.transaction_count for p in members),
                    SUMMARY_PRECISION,
                ),
                fountain_only_pct=round(
                    100 * sum(p.fountain_only for p in members) / len(members),
                    SUMMARY_PRECISION,
                ),
                top_trade_channel=_most_common(
                    [p.profile.trade_channel if p.profile else None for p in members]
                ),
                top_cold_drink_channel=_most_common(
                    [p.profile.cold_drink_channel if p.profile else None for p in members]
                ),
                top_order_type=_most_common([p.most_frequent_order_type for p in members]),
                median_delivery_cost=(
                    round(statistics.median(costs), SUMMARY_PRECISION) if costs else None
                ),
                growth_ready_count=sum(
                    1 for p in members if (p.customer_id, p.year) in ready_keys
                ),
            )
        )
    return summaries
