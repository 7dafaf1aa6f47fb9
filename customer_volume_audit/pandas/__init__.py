"""Pandas DataFrame adapters for customer volume audit components."""

from ._utils import standardize_columns
from .sources import (
    dataframe_to_delivery_costs,
    dataframe_to_locations,
    dataframe_to_profiles,
    dataframe_to_transactions,
    load_delivery_costs_csv,
    load_locations_csv,
    load_profiles_csv,
    load_transactions_csv,
)
from .segmentation import (
    aggregates_to_dataframe,
    personas_to_dataframe,
    run_segmentation_df,
    segmentation_to_dataframe,
    tier_summaries_to_dataframe,
)

__all__ = [
    "standardize_columns",
    # Source loaders
    "dataframe_to_delivery_costs",
    "dataframe_to_locations",
    "dataframe_to_profiles",
    "dataframe_to_transactions",
    "load_delivery_costs_csv",
    "load_locations_csv",
    "load_profiles_csv",
    "load_transactions_csv",
    # Result adapters
    "aggregates_to_dataframe",
    "personas_to_dataframe",
    "run_segmentation_df",
    "segmentation_to_dataframe",
    "tier_summaries_to_dataframe",
]
