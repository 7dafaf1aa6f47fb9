"""Persona enrichment: join tiered aggregates to reference data.

Every join is a left join. A customer-year is never dropped because its
profile, zip code or delivery cost row is missing; the corresponding
fields are simply left as ``None``.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Iterable, Sequence

from customer_volume_audit.foundation.records import (
    CustomerProfile,
    DeliveryCostRate,
    TransactionRecord,
    ZipLocation,
)
from customer_volume_audit.segmentation.tiers import TieredAggregate, VolumeTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonaRecord:
    """A tiered customer-year enriched with profile, location and cost data.

    Attributes
    ----------
    tiered:
        The classified customer-year aggregate
    profile:
        Matching customer profile, or ``None``
    location:
        Zip code lookup for the profile's zip, or ``None``
    most_frequent_order_type:
        Modal order type across all of the customer's transactions
    delivery_cost:
        Delivery cost rate for the profile's cold drink channel and the
        record's volume range, or ``None``
    fountain_only:
        Local market partner that is explicitly not a CO2 customer
    """

    tiered: TieredAggregate
    profile: CustomerProfile | None
    location: ZipLocation | None
    most_frequent_order_type: str | None
    delivery_cost: DeliveryCostRate | None
    fountain_only: bool

    @property
    def customer_id(self) -> str:
        return self.tiered.customer_id

    @property
    def year(self) -> int:
        return self.tiered.year

    @property
    def tier(self) -> VolumeTier:
        return self.tiered.tier

    @property
    def total_volume(self) -> float:
        return self.tiered.total_volume


def most_frequent_order_type(
    transactions: Iterable[TransactionRecord],
) -> dict[str, str | None]:
    """Return the modal order type for each customer across all years.

    Ties are broken by the lexicographically smallest order type so the
    result does not depend on input order. Missing order types are not
    counted; a customer with none at all maps to ``None``.

    Examples
    --------
    >>> txns = [
    ...     TransactionRecord("C1", 2023, order_type="SALES REP"),
    ...     TransactionRecord("C1", 2023, order_type="MYCOKE360"),
    ...     TransactionRecord("C2", 2023, order_type=None),
    ... ]
    >>> most_frequent_order_type(txns)
    {'C1': 'MYCOKE360', 'C2': None}
    """
    counts: dict[str, Counter[str]] = defaultdict(Counter)
    for txn in transactions:
        counter = counts[txn.customer_id]
        if txn.order_type:
            counter[txn.order_type] += 1

    modes: dict[str, str | None] = {}
    for customer_id, counter in counts.items():
        if not counter:
            modes[customer_id] = None
            continue
        top = max(counter.values())
        modes[customer_id] = min(k for k, v in counter.items() if v == top)
    return modes


def _index_unique(items: Iterable, key, what: str) -> dict:
    index: dict = {}
    for item in items:
        k = key(item)
        if k in index:
            raise ValueError(f"Duplicate {what} key: {k!r}")
        index[k] = item
    return index


def build_personas(
    tiered: Sequence[TieredAggregate],
    transactions: Iterable[TransactionRecord],
    profiles: Iterable[CustomerProfile],
    locations: Iterable[ZipLocation],
    delivery_costs: Iterable[DeliveryCostRate],
    applicable_to: str | None = None,
) -> list[PersonaRecord]:
    """Left-join tiered aggregates to every reference source.

    Parameters
    ----------
    tiered:
        Classified customer-year records.
    transactions:
        All transactions (every year), used for the modal order type.
    profiles:
        Customer profiles keyed by ``customer_id``.
    locations:
        Zip code lookup keyed by ``zip_code``.
    delivery_costs:
        Delivery cost schedule keyed by (cold_drink_channel, volume_range).
    applicable_to:
        Optional product family filter applied to the cost schedule before
        indexing (e.g. ``"Bottles and Cans"``). Rows without a family are
        always kept. Schedules that carry one row per family need this to
        stay unique per key.

    Returns
    -------
    list[PersonaRecord]
        One record per input record, in input order.

    Raises
    ------
    ValueError
        If a reference source has duplicate keys.
    """
    profile_index: dict[str, CustomerProfile] = _index_unique(
        profiles, lambda p: p.customer_id, "customer profile"
    )
    location_index: dict[str, ZipLocation] = _index_unique(
        locations, lambda z: z.zip_code, "zip location"
    )
    if applicable_to is not None:
        delivery_costs = (
            rate
            for rate in delivery_costs
            if rate.applicable_to is None or rate.applicable_to == applicable_to
        )
    cost_index: dict[tuple[str, str], DeliveryCostRate] = _index_unique(
        delivery_costs,
        lambda r: (r.cold_drink_channel, r.volume_range),
        "delivery cost",
    )
    order_types = most_frequent_order_type(transactions)

    personas: list[PersonaRecord] = []
    missing_profiles = missing_locations = missing_costs = 0
    for record in tiered:
        profile = profile_index.get(record.customer_id)
        location = None
        cost = None
        if profile is None:
            missing_profiles += 1
        else:
            if profile.zip_code is not None:
                location = location_index.get(profile.zip_code)
            if profile.cold_drink_channel is not None:
                cost = cost_index.get((profile.cold_drink_channel, record.volume_range))
        if location is None:
            missing_locations += 1
        if cost is None:
            missing_costs += 1

        personas.append(
            PersonaRecord(
                tiered=record,
                profile=profile,
                location=location,
                most_frequent_order_type=order_types.get(record.customer_id),
                delivery_cost=cost,
                fountain_only=profile.is_fountain_only if profile else False,
            )
        )

    if missing_profiles or missing_locations or missing_costs:
        logger.warning(
            f"Unmatched joins over {len(personas)} records: "
            f"profile={missing_profiles}, location={missing_locations}, "
            f"delivery_cost={missing_costs}"
        )
    return personas
