"""Synthetic data generation utilities.

This package helps produce realistic-but-fake distributor datasets to
exercise the segmentation pipeline without accessing production data.
"""

from .generator import (
    DistributorDataset,
    DistributorScenario,
    generate_delivery_costs,
    generate_distributor_dataset,
    generate_locations,
    generate_profiles,
    generate_transactions,
)

__all__ = [
    "DistributorDataset",
    "DistributorScenario",
    "generate_delivery_costs",
    "generate_distributor_dataset",
    "generate_locations",
    "generate_profiles",
    "generate_transactions",
]
