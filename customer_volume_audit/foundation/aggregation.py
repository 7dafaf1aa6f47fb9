"""Customer × year volume aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from customer_volume_audit.foundation.records import TransactionRecord

logger = logging.getLogger(__name__)

# Tolerance for total_volume == cases + gallons
VOLUME_SUM_TOLERANCE = 1e-6


@dataclass(frozen=True)
class CustomerYearAggregate:
    """Delivered volume for a customer within a calendar year.

    Attributes
    ----------
    customer_id:
        Unique customer identifier
    year:
        Calendar year of the aggregated deliveries
    total_delivered_cases:
        Sum of delivered cases, missing values counted as zero
    total_delivered_gallons:
        Sum of delivered gallons, missing values counted as zero
    total_volume:
        Cases plus gallons. Both are treated as the same nominal volume
        unit for ranking purposes; this is not a physical quantity.
    transaction_count:
        Number of delivery rows in the year
    average_volume_per_transaction:
        Mean of cases + gallons over transactions where both are present.
        ``None`` when no transaction in the year has a complete volume.
    """

    customer_id: str
    year: int
    total_delivered_cases: float
    total_delivered_gallons: float
    total_volume: float
    transaction_count: int
    average_volume_per_transaction: float | None = None

    def __post_init__(self) -> None:
        if self.total_delivered_cases < 0:
            raise ValueError(
                f"Total delivered cases cannot be negative: {self.total_delivered_cases} "
                f"(customer_id={self.customer_id})"
            )
        if self.total_delivered_gallons < 0:
            raise ValueError(
                f"Total delivered gallons cannot be negative: {self.total_delivered_gallons} "
                f"(customer_id={self.customer_id})"
            )
        if self.transaction_count <= 0:
            raise ValueError(
                f"Transaction count must be positive: {self.transaction_count} "
                f"(customer_id={self.customer_id})"
            )
        expected = self.total_delivered_cases + self.total_delivered_gallons
        if abs(self.total_volume - expected) > VOLUME_SUM_TOLERANCE:
            raise ValueError(
                f"Total volume ({self.total_volume}) != cases + gallons ({expected}) "
                f"(customer_id={self.customer_id})"
            )


def aggregate_customer_years(
    transactions: Iterable[TransactionRecord],
) -> list[CustomerYearAggregate]:
    """Roll delivery events up to one record per (customer_id, year).

    Missing cases or gallons count as zero towards the totals, so a year
    with only blank deliveries still yields a record with
    ``total_volume == 0``. The per-transaction average skips transactions
    whose volume is incomplete instead of zeroing them.

    Parameters
    ----------
    transactions:
        Delivery events in any order.

    Returns
    -------
    list[CustomerYearAggregate]
        Sorted by (customer_id, year).

    Examples
    --------
    >>> txns = [
    ...     TransactionRecord("C1", 2023, delivered_cases=10, delivered_gallons=5),
    ...     TransactionRecord("C1", 2023, delivered_cases=None, delivered_gallons=2.5),
    ... ]
    >>> agg = aggregate_customer_years(txns)[0]
    >>> agg.total_volume
    17.5
    >>> agg.average_volume_per_transaction
    15.0
    """
    buckets: dict[tuple[str, int], dict[str, float | int]] = {}
    for txn in transactions:
        key = (txn.customer_id, txn.year)
        if key not in buckets:
            buckets[key] = {
                "cases": 0.0,
                "gallons": 0.0,
                "count": 0,
                "complete_volume": 0.0,
                "complete_count": 0,
            }

        bucket = buckets[key]
        bucket["cases"] += txn.cases_or_zero
        bucket["gallons"] += txn.gallons_or_zero
        bucket["count"] += 1
        volume = txn.volume
        if volume is not None:
            bucket["complete_volume"] += volume
            bucket["complete_count"] += 1

    aggregates: list[CustomerYearAggregate] = []
    for (customer_id, year), payload in buckets.items():
        if payload["complete_count"]:
            average = payload["complete_volume"] / payload["complete_count"]
        else:
            average = None
        aggregates.append(
            CustomerYearAggregate(
                customer_id=customer_id,
                year=year,
                total_delivered_cases=payload["cases"],
                total_delivered_gallons=payload["gallons"],
                total_volume=payload["cases"] + payload["gallons"],
                transaction_count=payload["count"],
                average_volume_per_transaction=average,
            )
        )

    aggregates.sort(key=lambda aggregate: (aggregate.customer_id, aggregate.year))
    logger.debug(f"Aggregated {len(aggregates)} customer-year records")
    return aggregates
