"""Pandas DataFrame adapters for segmentation results."""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd  # type: ignore

from customer_volume_audit.foundation.aggregation import CustomerYearAggregate
from customer_volume_audit.pipeline import (
    PipelineConfig,
    SegmentationResult,
    run_segmentation,
)
from customer_volume_audit.segmentation.growth import GrowthAssessment
from customer_volume_audit.segmentation.personas import PersonaRecord
from customer_volume_audit.segmentation.summary import TierSummary
from .sources import (
    dataframe_to_delivery_costs,
    dataframe_to_locations,
    dataframe_to_profiles,
    dataframe_to_transactions,
)

AGGREGATE_COLUMNS = [
    "customer_id",
    "year",
    "total_delivered_cases",
    "total_delivered_gallons",
    "total_volume",
    "transaction_count",
    "average_volume_per_transaction",
]

PERSONA_COLUMNS = AGGREGATE_COLUMNS + [
    "volume_tier",
    "volume_range",
    "zip_code",
    "city",
    "state",
    "county",
    "onboarding_date",
    "first_delivery_date",
    "trade_channel",
    "sub_trade_channel",
    "cold_drink_channel",
    "local_market_partner",
    "co2_customer",
    "frequent_order_type",
    "most_frequent_order_type",
    "median_delivery_cost",
    "cost_type",
    "fountain_only",
]

GROWTH_COLUMNS = [
    "previous_volume",
    "volume_growth",
    "growth_kind",
    "growth_ready",
]

REPORT_COLUMNS = PERSONA_COLUMNS + GROWTH_COLUMNS


def _aggregate_row(aggregate: CustomerYearAggregate) -> dict:
    return {
        "customer_id": aggregate.customer_id,
        "year": aggregate.year,
        "total_delivered_cases": aggregate.total_delivered_cases,
        "total_delivered_gallons": aggregate.total_delivered_gallons,
        "total_volume": aggregate.total_volume,
        "transaction_count": aggregate.transaction_count,
        "average_volume_per_transaction": aggregate.average_volume_per_transaction,
    }


def aggregates_to_dataframe(
    aggregates: Sequence[CustomerYearAggregate],
) -> pd.DataFrame:
    """Convert customer-year aggregates to a DataFrame.

    Example:
        >>> aggregates = aggregate_customer_years(transactions)
        >>> aggregates_to_dataframe(aggregates).head()
    """
    if not aggregates:
        return pd.DataFrame(columns=AGGREGATE_COLUMNS)
    return pd.DataFrame([_aggregate_row(a) for a in aggregates], columns=AGGREGATE_COLUMNS)


def _persona_row(persona: PersonaRecord) -> dict:
    profile = persona.profile
    location = persona.location
    cost = persona.delivery_cost
    row = _aggregate_row(persona.tiered.aggregate)
    row.update(
        {
            "volume_tier": persona.tier.value,
            "volume_range": persona.tiered.volume_range,
            "zip_code": profile.zip_code if profile else None,
            "city": location.city if location else None,
            "state": location.state if location else None,
            "county": location.county if location else None,
            "onboarding_date": profile.onboarding_date if profile else None,
            "first_delivery_date": profile.first_delivery_date if profile else None,
            "trade_channel": profile.trade_channel if profile else None,
            "sub_trade_channel": profile.sub_trade_channel if profile else None,
            "cold_drink_channel": profile.cold_drink_channel if profile else None,
            "local_market_partner": profile.local_market_partner if profile else None,
            "co2_customer": profile.co2_customer if profile else None,
            "frequent_order_type": profile.frequent_order_type if profile else None,
            "most_frequent_order_type": persona.most_frequent_order_type,
            "median_delivery_cost": cost.median_delivery_cost if cost else None,
            "cost_type": cost.cost_type if cost else None,
            "fountain_only": persona.fountain_only,
        }
    )
    return row


def personas_to_dataframe(personas: Sequence[PersonaRecord]) -> pd.DataFrame:
    """Convert persona records to a DataFrame, one row per customer-year."""
    if not personas:
        return pd.DataFrame(columns=PERSONA_COLUMNS)
    return pd.DataFrame([_persona_row(p) for p in personas], columns=PERSONA_COLUMNS)


def _growth_row(assessment: Optional[GrowthAssessment]) -> dict:
    if assessment is None:
        return {column: None for column in GROWTH_COLUMNS}
    return {
        "previous_volume": assessment.previous_volume,
        "volume_growth": assessment.volume_growth.as_float(),
        "growth_kind": assessment.volume_growth.kind.value,
        "growth_ready": assessment.growth_ready,
    }


def segmentation_to_dataframe(result: SegmentationResult) -> pd.DataFrame:
    """Flatten a pipeline result into the persona/growth report table.

    Growth is exported as a float (``inf`` for newly activated customers,
    ``NaN`` when undefined) alongside an explicit ``growth_kind`` column so
    the two undefined cases stay distinguishable after export.

    Example:
        >>> result = run_segmentation(transactions, profiles, locations, costs)
        >>> report = segmentation_to_dataframe(result)
        >>> report[report["growth_ready"]].head()
    """
    if not result.personas:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    growth_index = {(a.customer_id, a.year): a for a in result.growth}
    rows = []
    for persona in result.personas:
        row = _persona_row(persona)
        row.update(_growth_row(growth_index.get((persona.customer_id, persona.year))))
        rows.append(row)

    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    return df.sort_values(["customer_id", "year"]).reset_index(drop=True)


def tier_summaries_to_dataframe(summaries: Sequence[TierSummary]) -> pd.DataFrame:
    """Convert tier summaries to a DataFrame indexed by tier label."""
    columns = [
        "tier",
        "record_count",
        "customer_count",
        "mean_volume",
        "median_volume",
        "mean_transactions",
        "fountain_only_pct",
        "top_trade_channel",
        "top_cold_drink_channel",
        "top_order_type",
        "median_delivery_cost",
        "growth_ready_count",
    ]
    rows = [
        {
            "tier": s.tier.value,
            "record_count": s.record_count,
            "customer_count": s.customer_count,
            "mean_volume": s.mean_volume,
            "median_volume": s.median_volume,
            "mean_transactions": s.mean_transactions,
            "fountain_only_pct": s.fountain_only_pct,
            "top_trade_channel": s.top_trade_channel,
            "top_cold_drink_channel": s.top_cold_drink_channel,
            "top_order_type": s.top_order_type,
            "median_delivery_cost": s.median_delivery_cost,
            "growth_ready_count": s.growth_ready_count,
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=columns)


def run_segmentation_df(
    transactions_df: pd.DataFrame,
    profiles_df: Optional[pd.DataFrame] = None,
    locations_df: Optional[pd.DataFrame] = None,
    delivery_costs_df: Optional[pd.DataFrame] = None,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """Run the segmentation pipeline on DataFrames.

    Convenience function combining conversion, the core pipeline and
    flattening of the result.

    Example:
        >>> report = run_segmentation_df(
        ...     pd.read_csv("transactional_data.csv"),
        ...     pd.read_csv("customer_profile.csv"),
        ... )
    """
    result = run_segmentation(
        dataframe_to_transactions(transactions_df),
        dataframe_to_profiles(profiles_df) if profiles_df is not None else (),
        dataframe_to_locations(locations_df) if locations_df is not None else (),
        (
            dataframe_to_delivery_costs(delivery_costs_df)
            if delivery_costs_df is not None
            else ()
        ),
        config=config,
    )
    return segmentation_to_dataframe(result)
