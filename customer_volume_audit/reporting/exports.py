"""Export segmentation results to files.

Provides CSV, JSON and markdown outputs of the persona/growth table for
reporting and audit trails.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any

from customer_volume_audit.pandas.segmentation import (
    segmentation_to_dataframe,
    tier_summaries_to_dataframe,
)
from customer_volume_audit.pipeline import SegmentationResult
from customer_volume_audit.reporting.markdown_tables import format_segmentation_report

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def export_segmentation_csv(result: SegmentationResult, output_path: str | Path) -> Path:
    """Write the persona/growth table to CSV, one row per customer-year.

    Examples
    --------
    >>> result = run_segmentation(transactions, profiles, locations, costs)
    >>> export_segmentation_csv(result, "out/segmentation.csv")
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    segmentation_to_dataframe(result).to_csv(output_path, index=False)
    logger.info(f"Segmentation table exported to {output_path}")
    return output_path


def export_segmentation_json(
    result: SegmentationResult,
    output_path: str | Path,
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Write the persona/growth table and tier summaries to JSON.

    Non-finite growth values are not valid JSON numbers, so infinite growth
    is written as the string ``"inf"`` and undefined growth as ``null``; the
    ``growth_kind`` field carries the distinction.

    Parameters
    ----------
    result:
        Pipeline output
    output_path:
        Path where the JSON file will be saved
    metadata:
        Optional metadata to include (e.g. data source, run id)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rows = segmentation_to_dataframe(result).astype(object).to_dict("records")
    summaries = tier_summaries_to_dataframe(result.tier_summaries).astype(object)
    payload = {
        "metadata": metadata or {},
        "timestamp": datetime.now().isoformat(),
        "outlier_threshold": result.outliers.threshold,
        "outlier_percentile": result.outliers.percentile,
        "tier_summaries": [
            {k: _json_value(v) for k, v in row.items()}
            for row in summaries.to_dict("records")
        ],
        "records": [{k: _json_value(v) for k, v in row.items()} for row in rows],
    }

    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)

    logger.info(f"Segmentation JSON exported to {output_path}")
    return output_path


def export_segmentation_report(result: SegmentationResult, output_path: str | Path) -> Path:
    """Write the markdown segmentation report."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fh:
        fh.write(format_segmentation_report(result))
    logger.info(f"Segmentation report exported to {output_path}")
    return output_path
