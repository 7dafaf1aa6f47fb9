"""Source record definitions for the distributor datasets.

The records capture the minimum pieces of information that every
downstream segmentation step relies on: delivery events, the static
customer profile, the zip code mapping and the delivery cost schedule.
All records are immutable once constructed so the pipeline stages can
share them freely.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date


def _is_missing(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


@dataclass(frozen=True)
class TransactionRecord:
    """A single delivery event.

    Attributes
    ----------
    customer_id:
        Customer the delivery was made to.
    year:
        Calendar year the delivery is attributed to.
    order_type:
        Channel the order was placed through (e.g. ``MYCOKE360``,
        ``SALES REP``). May be ``None`` when the source left it blank.
    delivered_cases:
        Cases delivered, or ``None`` when missing.
    delivered_gallons:
        Fountain gallons delivered, or ``None`` when missing.
    transaction_date:
        Date of the delivery, if known.
    """

    customer_id: str
    year: int
    order_type: str | None = None
    delivered_cases: float | None = None
    delivered_gallons: float | None = None
    transaction_date: date | None = None

    def __post_init__(self) -> None:
        if not self.customer_id:
            raise ValueError("Transaction customer_id cannot be empty")
        if not _is_missing(self.delivered_cases) and self.delivered_cases < 0:
            raise ValueError(
                f"Delivered cases cannot be negative: {self.delivered_cases} "
                f"(customer_id={self.customer_id}, year={self.year})"
            )
        if not _is_missing(self.delivered_gallons) and self.delivered_gallons < 0:
            raise ValueError(
                f"Delivered gallons cannot be negative: {self.delivered_gallons} "
                f"(customer_id={self.customer_id}, year={self.year})"
            )

    @property
    def cases_or_zero(self) -> float:
        return 0.0 if _is_missing(self.delivered_cases) else float(self.delivered_cases)

    @property
    def gallons_or_zero(self) -> float:
        return (
            0.0 if _is_missing(self.delivered_gallons) else float(self.delivered_gallons)
        )

    @property
    def volume(self) -> float | None:
        """Cases plus gallons, or ``None`` if either component is missing."""
        if _is_missing(self.delivered_cases) or _is_missing(self.delivered_gallons):
            return None
        return float(self.delivered_cases) + float(self.delivered_gallons)


@dataclass(frozen=True)
class CustomerProfile:
    """Static reference attributes for a customer.

    Boolean flags are tri-state: ``None`` means the source did not say.
    """

    customer_id: str
    zip_code: str | None = None
    onboarding_date: date | None = None
    first_delivery_date: date | None = None
    trade_channel: str | None = None
    sub_trade_channel: str | None = None
    cold_drink_channel: str | None = None
    local_market_partner: bool | None = None
    co2_customer: bool | None = None
    frequent_order_type: str | None = None
    primary_group_number: str | None = None

    @property
    def is_fountain_only(self) -> bool:
        """Local market partner that explicitly does not buy CO2."""
        return self.local_market_partner is True and self.co2_customer is False


@dataclass(frozen=True)
class ZipLocation:
    """City/state lookup for a zip code."""

    zip_code: str
    city: str | None = None
    state: str | None = None
    county: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class DeliveryCostRate:
    """Median delivery cost for a cold drink channel and volume range.

    Attributes
    ----------
    cold_drink_channel:
        Channel label matching :attr:`CustomerProfile.cold_drink_channel`.
    volume_range:
        Volume range bucket label (see
        :data:`customer_volume_audit.segmentation.tiers.VOLUME_RANGE_BOUNDARIES`).
    median_delivery_cost:
        Median cost per unit delivered.
    applicable_to:
        Product family the rate applies to (``Bottles and Cans`` or
        ``Fountain``), if the schedule distinguishes them.
    cost_type:
        Unit of the cost (``Per Case`` or ``Per Gallon``).
    """

    cold_drink_channel: str
    volume_range: str
    median_delivery_cost: float
    applicable_to: str | None = None
    cost_type: str | None = None

    def __post_init__(self) -> None:
        if self.median_delivery_cost < 0:
            raise ValueError(
                f"Median delivery cost cannot be negative: {self.median_delivery_cost} "
                f"(channel={self.cold_drink_channel}, range={self.volume_range})"
            )
