"""Shared utilities for pandas conversion operations."""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Mapping

import pandas as pd  # type: ignore

_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0"}


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize column names: strip, lowercase, snake_case.

    Example:
        >>> standardize_columns(pd.DataFrame(columns=["Cold Drink Channel"])).columns[0]
        'cold_drink_channel'
    """
    df = df.copy()
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.lower()
        .str.replace(" ", "_")
        .str.replace("-", "_")
    )
    return df


def rename_aliases(df: pd.DataFrame, aliases: Mapping[str, str]) -> pd.DataFrame:
    """Rename source-specific column names to canonical ones.

    An alias is only applied when the canonical column is not already present.
    """
    mapping = {
        source: target
        for source, target in aliases.items()
        if source in df.columns and target not in df.columns
    }
    return df.rename(columns=mapping)


def require_columns(df: pd.DataFrame, required: list[str], source: str) -> None:
    """Raise ValueError listing any required column ``df`` lacks."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{source} missing required columns: {missing}")


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def to_optional_str(value: Any) -> str | None:
    if is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def to_optional_float(value: Any) -> float | None:
    """Convert to float, stripping currency formatting such as ``$1,234.50``."""
    if is_missing(value):
        return None
    if isinstance(value, str):
        text = value.strip().replace("$", "").replace(",", "")
        if not text:
            return None
        return float(text)
    return float(value)


def to_optional_bool(value: Any) -> bool | None:
    """Interpret common boolean encodings; anything unrecognised is ``None``."""
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return None
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def to_optional_date(value: Any) -> date | None:
    if is_missing(value):
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if ts is pd.NaT or pd.isna(ts):
        return None
    return ts.date()


def to_identifier(value: Any) -> str | None:
    """Identifiers read as numbers come back as e.g. ``71018.0``; keep the digits."""
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return to_optional_str(value)
