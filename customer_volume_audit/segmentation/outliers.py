"""Upper-percentile outlier removal for customer-year volumes.

The threshold is always derived from the population being filtered, so
re-running the pipeline on a different dataset moves the cut-off with it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from customer_volume_audit.foundation.aggregation import CustomerYearAggregate

logger = logging.getLogger(__name__)

DEFAULT_OUTLIER_PERCENTILE = 99.0


@dataclass(frozen=True)
class OutlierFilterResult:
    """Outcome of :func:`filter_volume_outliers`.

    Attributes
    ----------
    retained:
        Aggregates with ``total_volume <= threshold``, input order preserved
    dropped:
        Aggregates above the threshold, input order preserved
    threshold:
        Volume at the requested percentile of the full population
    percentile:
        Percentile used to compute the threshold (0-100]
    """

    retained: tuple[CustomerYearAggregate, ...]
    dropped: tuple[CustomerYearAggregate, ...]
    threshold: float
    percentile: float

    @property
    def dropped_share(self) -> float:
        total = len(self.retained) + len(self.dropped)
        return len(self.dropped) / total if total else 0.0


def _validate_percentile(percentile: float) -> None:
    if not 0 < percentile <= 100:
        raise ValueError(f"Percentile must be in (0, 100]: {percentile}")


def volume_percentile(volumes: Iterable[float | None], percentile: float) -> float:
    """Linear-interpolation percentile of ``volumes`` ignoring missing values.

    Raises
    ------
    ValueError
        If no non-missing volume is available or the percentile is out of range.

    Examples
    --------
    >>> volume_percentile([0, 10, 20, 30, 40], 50)
    20.0
    >>> volume_percentile([0, 100], 99)
    99.0
    """
    _validate_percentile(percentile)
    values = [
        float(v) for v in volumes if v is not None and not math.isnan(float(v))
    ]
    if not values:
        raise ValueError(
            "Cannot compute volume percentile of an empty population; "
            "check that the transaction source produced any customer-year records"
        )
    return float(np.percentile(np.asarray(values, dtype=float), percentile, method="linear"))


def filter_volume_outliers(
    aggregates: Sequence[CustomerYearAggregate],
    percentile: float = DEFAULT_OUTLIER_PERCENTILE,
) -> OutlierFilterResult:
    """Drop customer-years whose total volume exceeds the given percentile.

    Parameters
    ----------
    aggregates:
        Full population of customer-year aggregates. Every aggregate must be
        present before calling, since the threshold depends on all of them.
    percentile:
        Upper percentile to cut at (default: 99).

    Raises
    ------
    ValueError
        If ``aggregates`` is empty.
    """
    threshold = volume_percentile((a.total_volume for a in aggregates), percentile)

    retained = tuple(a for a in aggregates if a.total_volume <= threshold)
    dropped = tuple(a for a in aggregates if a.total_volume > threshold)

    logger.info(
        f"Outlier filter: p{percentile:g} threshold={threshold:.2f}, "
        f"retained={len(retained)}, dropped={len(dropped)}"
    )
    return OutlierFilterResult(
        retained=retained,
        dropped=dropped,
        threshold=threshold,
        percentile=percentile,
    )
