"""Volume tier and volume range classification.

Thresholds live in the boundary tables below so a change to the business
rules does not touch the classification logic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from customer_volume_audit.foundation.aggregation import CustomerYearAggregate


class VolumeTier(str, Enum):
    """Coarse three-level volume classification."""

    LOW = "Low Volume"
    MEDIUM = "Medium Volume"
    HIGH = "High Volume"


@dataclass(frozen=True)
class TierBoundary:
    """Upper bound (inclusive) for a tier; ``None`` means unbounded."""

    tier: VolumeTier
    upper_inclusive: float | None


@dataclass(frozen=True)
class VolumeRangeBoundary:
    """Lower bound (inclusive) for a volume range bucket."""

    label: str
    lower_inclusive: float


# Ordered ascending; the first boundary whose upper bound holds wins.
TIER_BOUNDARIES: tuple[TierBoundary, ...] = (
    TierBoundary(VolumeTier.LOW, 200.0),
    TierBoundary(VolumeTier.MEDIUM, 1000.0),
    TierBoundary(VolumeTier.HIGH, None),
)

VOLUME_RANGE_WIDTH = 150
VOLUME_RANGE_COUNT = 10

# Ordered ascending by lower bound. Labels match the delivery cost schedule.
VOLUME_RANGE_BOUNDARIES: tuple[VolumeRangeBoundary, ...] = tuple(
    VolumeRangeBoundary(
        label=(
            f"{i * VOLUME_RANGE_WIDTH} - {(i + 1) * VOLUME_RANGE_WIDTH - 1}"
            if i < VOLUME_RANGE_COUNT - 1
            else f"{i * VOLUME_RANGE_WIDTH}+"
        ),
        lower_inclusive=float(i * VOLUME_RANGE_WIDTH),
    )
    for i in range(VOLUME_RANGE_COUNT)
)

VOLUME_RANGE_LABELS: tuple[str, ...] = tuple(b.label for b in VOLUME_RANGE_BOUNDARIES)

GROWTH_ELIGIBLE_TIERS = frozenset({VolumeTier.LOW, VolumeTier.MEDIUM})


def _validate_volume(total_volume: float) -> None:
    if math.isnan(total_volume):
        raise ValueError("Cannot classify a NaN volume")
    if total_volume < 0:
        raise ValueError(f"Volume cannot be negative: {total_volume}")


def classify_tier(total_volume: float) -> VolumeTier:
    """Map a non-negative volume to its tier.

    Examples
    --------
    >>> classify_tier(200).value
    'Low Volume'
    >>> classify_tier(200.01).value
    'Medium Volume'
    >>> classify_tier(1000.01).value
    'High Volume'
    """
    _validate_volume(total_volume)
    for boundary in TIER_BOUNDARIES:
        if boundary.upper_inclusive is None or total_volume <= boundary.upper_inclusive:
            return boundary.tier
    raise AssertionError("TIER_BOUNDARIES must end with an unbounded tier")  # pragma: no cover


def classify_volume_range(total_volume: float) -> str:
    """Map a non-negative volume to its delivery-cost volume range label.

    Examples
    --------
    >>> classify_volume_range(149.9)
    '0 - 149'
    >>> classify_volume_range(150)
    '150 - 299'
    >>> classify_volume_range(20000)
    '1350+'
    """
    _validate_volume(total_volume)
    label = VOLUME_RANGE_BOUNDARIES[0].label
    for boundary in VOLUME_RANGE_BOUNDARIES:
        if total_volume >= boundary.lower_inclusive:
            label = boundary.label
        else:
            break
    return label


@dataclass(frozen=True)
class TieredAggregate:
    """A customer-year aggregate with its tier and volume range."""

    aggregate: CustomerYearAggregate
    tier: VolumeTier
    volume_range: str

    @property
    def customer_id(self) -> str:
        return self.aggregate.customer_id

    @property
    def year(self) -> int:
        return self.aggregate.year

    @property
    def total_volume(self) -> float:
        return self.aggregate.total_volume


def assign_tiers(aggregates: Iterable[CustomerYearAggregate]) -> list[TieredAggregate]:
    """Classify every aggregate; input order is preserved."""
    return [
        TieredAggregate(
            aggregate=aggregate,
            tier=classify_tier(aggregate.total_volume),
            volume_range=classify_volume_range(aggregate.total_volume),
        )
        for aggregate in aggregates
    ]
