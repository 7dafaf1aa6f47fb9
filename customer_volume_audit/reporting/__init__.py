"""Report formatting and export for segmentation results."""

from .exports import (
    export_segmentation_csv,
    export_segmentation_json,
    export_segmentation_report,
)
from .markdown_tables import (
    format_growth_ready_table,
    format_growth_value,
    format_outlier_table,
    format_segmentation_report,
    format_tier_summary_table,
)

__all__ = [
    "export_segmentation_csv",
    "export_segmentation_json",
    "export_segmentation_report",
    "format_growth_ready_table",
    "format_growth_value",
    "format_outlier_table",
    "format_segmentation_report",
    "format_tier_summary_table",
]
