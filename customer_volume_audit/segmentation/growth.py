"""Year-over-year volume growth and the growth-ready flag.

Growth is compared against the customer's immediately preceding
*observed* year, which is not necessarily the previous calendar year.
Zero previous volume is a domain signal rather than an error:

- previous 0, current > 0 -> infinite growth (newly activated)
- previous 0, current 0   -> dormant, growth undefined
- first observed year     -> no history, growth undefined
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from customer_volume_audit.segmentation.tiers import (
    GROWTH_ELIGIBLE_TIERS,
    TieredAggregate,
    VolumeTier,
)

logger = logging.getLogger(__name__)


class GrowthKind(str, Enum):
    """Kind of year-over-year growth value."""

    FINITE = "finite"
    INFINITE = "infinite"
    DORMANT = "dormant"
    NO_HISTORY = "no_history"


@dataclass(frozen=True)
class GrowthValue:
    """Tagged growth percentage.

    ``percent`` is set only for :attr:`GrowthKind.FINITE`.
    """

    kind: GrowthKind
    percent: float | None = None

    def __post_init__(self) -> None:
        if (self.kind is GrowthKind.FINITE) != (self.percent is not None):
            raise ValueError(
                f"Growth percent must be set exactly when kind is finite: "
                f"kind={self.kind.value}, percent={self.percent}"
            )

    @classmethod
    def finite(cls, percent: float) -> GrowthValue:
        return cls(GrowthKind.FINITE, percent)

    @classmethod
    def infinite(cls) -> GrowthValue:
        return cls(GrowthKind.INFINITE)

    @classmethod
    def dormant(cls) -> GrowthValue:
        return cls(GrowthKind.DORMANT)

    @classmethod
    def no_history(cls) -> GrowthValue:
        return cls(GrowthKind.NO_HISTORY)

    @property
    def is_defined(self) -> bool:
        return self.kind in (GrowthKind.FINITE, GrowthKind.INFINITE)

    @property
    def is_positive(self) -> bool:
        """Strictly greater than zero; infinite growth counts."""
        if self.kind is GrowthKind.INFINITE:
            return True
        return self.kind is GrowthKind.FINITE and self.percent > 0

    def as_float(self) -> float:
        """IEEE representation: ``inf`` for infinite, ``nan`` when undefined."""
        if self.kind is GrowthKind.FINITE:
            return self.percent
        if self.kind is GrowthKind.INFINITE:
            return float("inf")
        return float("nan")


@dataclass(frozen=True)
class GrowthAssessment:
    """Growth classification for one customer-year.

    Attributes
    ----------
    customer_id:
        Unique customer identifier
    year:
        Year being assessed
    tier:
        Tier of the current year
    total_volume:
        Volume of the current year
    previous_volume:
        Volume of the preceding observed year, ``None`` for the first year
    volume_growth:
        Percentage change from ``previous_volume``
    growth_ready:
        Low or Medium tier with positive growth
    """

    customer_id: str
    year: int
    tier: VolumeTier
    total_volume: float
    previous_volume: float | None
    volume_growth: GrowthValue
    growth_ready: bool


def calculate_volume_growth(
    total_volume: float, previous_volume: float | None
) -> GrowthValue:
    """Percentage change from ``previous_volume`` to ``total_volume``.

    Examples
    --------
    >>> calculate_volume_growth(150, 100).percent
    50.0
    >>> calculate_volume_growth(50, 0).kind.value
    'infinite'
    >>> calculate_volume_growth(0, 0).kind.value
    'dormant'
    >>> calculate_volume_growth(10, None).kind.value
    'no_history'
    """
    if previous_volume is None:
        return GrowthValue.no_history()
    if previous_volume == 0:
        if total_volume > 0:
            return GrowthValue.infinite()
        return GrowthValue.dormant()
    return GrowthValue.finite((total_volume - previous_volume) / previous_volume * 100)


def is_growth_ready(tier: VolumeTier, growth: GrowthValue) -> bool:
    """Low/Medium tier with strictly positive growth."""
    return tier in GROWTH_ELIGIBLE_TIERS and growth.is_positive


def classify_growth(tiered: Sequence[TieredAggregate]) -> list[GrowthAssessment]:
    """Assess year-over-year growth for every tiered customer-year.

    Parameters
    ----------
    tiered:
        Classified records. At most one record per (customer_id, year).

    Returns
    -------
    list[GrowthAssessment]
        Sorted by (customer_id, year).

    Raises
    ------
    ValueError
        If a (customer_id, year) pair appears more than once.
    """
    by_customer: dict[str, list[TieredAggregate]] = defaultdict(list)
    for record in tiered:
        by_customer[record.customer_id].append(record)

    assessments: list[GrowthAssessment] = []
    for customer_id in sorted(by_customer):
        history = sorted(by_customer[customer_id], key=lambda r: r.year)
        previous_volume: float | None = None
        previous_year: int | None = None
        for record in history:
            if record.year == previous_year:
                raise ValueError(
                    f"Duplicate customer-year record: customer_id={customer_id}, "
                    f"year={record.year}"
                )
            growth = calculate_volume_growth(record.total_volume, previous_volume)
            assessments.append(
                GrowthAssessment(
                    customer_id=customer_id,
                    year=record.year,
                    tier=record.tier,
                    total_volume=record.total_volume,
                    previous_volume=previous_volume,
                    volume_growth=growth,
                    growth_ready=is_growth_ready(record.tier, growth),
                )
            )
            previous_volume = record.total_volume
            previous_year = record.year

    ready = sum(1 for a in assessments if a.growth_ready)
    logger.info(f"Growth classification: {ready} of {len(assessments)} records growth ready")
    return assessments
