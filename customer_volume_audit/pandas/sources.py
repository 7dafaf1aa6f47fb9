"""Load and normalise the four distributor source tables.

Each ``dataframe_to_*`` function accepts a DataFrame whose columns have
already been standardised (lowercase snake_case) and returns typed
records. The ``load_*_csv`` helpers wrap :func:`pandas.read_csv` and the
column normalisation so raw exports can be passed straight in.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd  # type: ignore

from customer_volume_audit.foundation.records import (
    CustomerProfile,
    DeliveryCostRate,
    TransactionRecord,
    ZipLocation,
)
from ._utils import (
    rename_aliases,
    require_columns,
    standardize_columns,
    to_optional_bool,
    to_optional_date,
    to_optional_float,
    to_optional_str,
    to_identifier,
)

logger = logging.getLogger(__name__)

TRANSACTION_ALIASES = {
    "customer_number": "customer_id",
}
PROFILE_ALIASES = {
    "customer_number": "customer_id",
    "on_boarding_date": "onboarding_date",
}
LOCATION_ALIASES = {
    "zip": "zip_code",
}
DELIVERY_COST_ALIASES = {
    "vol_range": "volume_range",
}

# Field order of the comma-separated ``full_address`` column in the zip export:
# zip, city, state, state abbreviation, county, county code, latitude, longitude
FULL_ADDRESS_FIELDS = (
    "zip",
    "city",
    "state",
    "state_abbr",
    "county",
    "county_code",
    "latitude",
    "longitude",
)


def _require_customer_ids(df: pd.DataFrame, source: str) -> None:
    blank = df["customer_id"].map(to_identifier).isnull()
    if blank.any():
        raise ValueError(f"{source} missing customer_id in {int(blank.sum())} rows")


def normalize_transactions(df: pd.DataFrame) -> pd.DataFrame:
    """Standardise transaction columns and derive ``year`` from the date if absent."""
    df = rename_aliases(standardize_columns(df), TRANSACTION_ALIASES)
    if "transaction_date" in df.columns:
        df["transaction_date"] = pd.to_datetime(df["transaction_date"], errors="coerce")
    if "year" not in df.columns and "transaction_date" in df.columns:
        df["year"] = df["transaction_date"].dt.year
    for col in ("delivered_cases", "delivered_gallons"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def dataframe_to_transactions(df: pd.DataFrame) -> List[TransactionRecord]:
    """Convert a transactions DataFrame to :class:`TransactionRecord` objects.

    Required columns: ``customer_id``, ``year``, ``delivered_cases``,
    ``delivered_gallons``. ``order_type`` and ``transaction_date`` are
    optional. Missing volumes are kept as ``None``.

    Raises:
        ValueError: If required columns are missing or a row has no
            customer_id or year.
    """
    df = normalize_transactions(df)
    require_columns(
        df,
        ["customer_id", "year", "delivered_cases", "delivered_gallons"],
        "Transactions",
    )
    if df.empty:
        return []
    _require_customer_ids(df, "Transactions")

    null_years = df["year"].isnull()
    if null_years.any():
        raise ValueError(
            f"Transactions missing year in {int(null_years.sum())} rows; "
            "provide a year column or a parseable transaction_date"
        )

    has_order_type = "order_type" in df.columns
    has_date = "transaction_date" in df.columns
    records = []
    for record in df.to_dict("records"):
        records.append(
            TransactionRecord(
                customer_id=to_identifier(record["customer_id"]),
                year=int(record["year"]),
                order_type=to_optional_str(record["order_type"]) if has_order_type else None,
                delivered_cases=to_optional_float(record["delivered_cases"]),
                delivered_gallons=to_optional_float(record["delivered_gallons"]),
                transaction_date=(
                    to_optional_date(record["transaction_date"]) if has_date else None
                ),
            )
        )
    return records


def dataframe_to_profiles(df: pd.DataFrame) -> List[CustomerProfile]:
    """Convert a customer profile DataFrame to :class:`CustomerProfile` objects.

    Only ``customer_id`` is required; every other attribute is optional
    and left as ``None`` when the column is absent or the value is blank.

    Raises:
        ValueError: If ``customer_id`` is missing or blank in any row.
    """
    df = rename_aliases(standardize_columns(df), PROFILE_ALIASES)
    require_columns(df, ["customer_id"], "Customer profiles")
    _require_customer_ids(df, "Customer profiles")

    profiles = []
    for record in df.to_dict("records"):
        profiles.append(
            CustomerProfile(
                customer_id=to_identifier(record["customer_id"]),
                zip_code=to_identifier(record.get("zip_code")),
                onboarding_date=to_optional_date(record.get("onboarding_date")),
                first_delivery_date=to_optional_date(record.get("first_delivery_date")),
                trade_channel=to_optional_str(record.get("trade_channel")),
                sub_trade_channel=to_optional_str(record.get("sub_trade_channel")),
                cold_drink_channel=to_optional_str(record.get("cold_drink_channel")),
                local_market_partner=to_optional_bool(record.get("local_market_partner")),
                co2_customer=to_optional_bool(record.get("co2_customer")),
                frequent_order_type=to_optional_str(record.get("frequent_order_type")),
                primary_group_number=to_identifier(record.get("primary_group_number")),
            )
        )
    return profiles


def _split_full_address(df: pd.DataFrame) -> pd.DataFrame:
    parts = df["full_address"].astype(str).str.split(",", expand=True)
    for position, name in enumerate(FULL_ADDRESS_FIELDS):
        if name == "zip" or position >= parts.shape[1]:
            continue
        if name not in df.columns:
            df[name] = parts[position].str.strip()
    return df


def dataframe_to_locations(df: pd.DataFrame) -> List[ZipLocation]:
    """Convert a zip mapping DataFrame to :class:`ZipLocation` objects.

    Accepts either explicit ``city``/``state``/``county`` columns or the
    comma-separated ``full_address`` export format.
    """
    df = rename_aliases(standardize_columns(df), LOCATION_ALIASES)
    require_columns(df, ["zip_code"], "Zip locations")
    if "full_address" in df.columns:
        df = _split_full_address(df)

    locations = []
    for record in df.to_dict("records"):
        zip_code = to_identifier(record["zip_code"])
        if zip_code is None:
            continue
        locations.append(
            ZipLocation(
                zip_code=zip_code,
                city=to_optional_str(record.get("city")),
                state=to_optional_str(record.get("state")),
                county=to_optional_str(record.get("county")),
                latitude=to_optional_float(record.get("latitude")),
                longitude=to_optional_float(record.get("longitude")),
            )
        )
    return locations


def dataframe_to_delivery_costs(df: pd.DataFrame) -> List[DeliveryCostRate]:
    """Convert a delivery cost schedule DataFrame to :class:`DeliveryCostRate` objects.

    Raises:
        ValueError: If required columns are missing or a channel, range
            or cost is blank.
    """
    df = rename_aliases(standardize_columns(df), DELIVERY_COST_ALIASES)
    require_columns(
        df,
        ["cold_drink_channel", "volume_range", "median_delivery_cost"],
        "Delivery costs",
    )

    rates = []
    for idx, record in enumerate(df.to_dict("records")):
        channel = to_optional_str(record["cold_drink_channel"])
        volume_range = to_optional_str(record["volume_range"])
        if channel is None or volume_range is None:
            raise ValueError(
                f"Delivery cost row {idx} has no cold_drink_channel or volume_range"
            )
        cost = to_optional_float(record["median_delivery_cost"])
        if cost is None:
            raise ValueError(f"Delivery cost row {idx} has no median_delivery_cost")
        rates.append(
            DeliveryCostRate(
                cold_drink_channel=channel,
                volume_range=volume_range,
                median_delivery_cost=cost,
                applicable_to=to_optional_str(record.get("applicable_to")),
                cost_type=to_optional_str(record.get("cost_type")),
            )
        )
    return rates


def _read_csv(path: Path) -> pd.DataFrame:
    logger.info(f"Loading {path}")
    return pd.read_csv(path)


def load_transactions_csv(path: str | Path) -> List[TransactionRecord]:
    records = dataframe_to_transactions(_read_csv(Path(path)))
    logger.info(f"Loaded {len(records)} transactions")
    return records


def load_profiles_csv(path: str | Path) -> List[CustomerProfile]:
    records = dataframe_to_profiles(_read_csv(Path(path)))
    logger.info(f"Loaded {len(records)} customer profiles")
    return records


def load_locations_csv(path: str | Path) -> List[ZipLocation]:
    records = dataframe_to_locations(_read_csv(Path(path)))
    logger.info(f"Loaded {len(records)} zip locations")
    return records


def load_delivery_costs_csv(path: str | Path) -> List[DeliveryCostRate]:
    records = dataframe_to_delivery_costs(_read_csv(Path(path)))
    logger.info(f"Loaded {len(records)} delivery cost rates")
    return records
