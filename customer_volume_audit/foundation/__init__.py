"""Foundational building blocks for the customer volume audit.

This package exposes the source record definitions as well as the
customer × year volume aggregation every segmentation step builds on.
"""

from .aggregation import CustomerYearAggregate, aggregate_customer_years
from .records import (
    CustomerProfile,
    DeliveryCostRate,
    TransactionRecord,
    ZipLocation,
)

__all__ = [
    "CustomerProfile",
    "CustomerYearAggregate",
    "DeliveryCostRate",
    "TransactionRecord",
    "ZipLocation",
    "aggregate_customer_years",
]
