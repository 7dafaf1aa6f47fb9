"""Volume segmentation stages: outlier removal, tiering, personas, growth."""

from .growth import (
    GrowthAssessment,
    GrowthKind,
    GrowthValue,
    calculate_volume_growth,
    classify_growth,
    is_growth_ready,
)
from .outliers import (
    DEFAULT_OUTLIER_PERCENTILE,
    OutlierFilterResult,
    filter_volume_outliers,
    volume_percentile,
)
from .personas import PersonaRecord, build_personas, most_frequent_order_type
from .summary import TierSummary, summarize_tiers
from .tiers import (
    TIER_BOUNDARIES,
    VOLUME_RANGE_BOUNDARIES,
    VOLUME_RANGE_LABELS,
    TieredAggregate,
    VolumeTier,
    assign_tiers,
    classify_tier,
    classify_volume_range,
)

__all__ = [
    # Outliers
    "DEFAULT_OUTLIER_PERCENTILE",
    "OutlierFilterResult",
    "filter_volume_outliers",
    "volume_percentile",
    # Tiers
    "TIER_BOUNDARIES",
    "VOLUME_RANGE_BOUNDARIES",
    "VOLUME_RANGE_LABELS",
    "TieredAggregate",
    "VolumeTier",
    "assign_tiers",
    "classify_tier",
    "classify_volume_range",
    # Personas
    "PersonaRecord",
    "build_personas",
    "most_frequent_order_type",
    # Growth
    "GrowthAssessment",
    "GrowthKind",
    "GrowthValue",
    "calculate_volume_growth",
    "classify_growth",
    "is_growth_ready",
    # Summary
    "TierSummary",
    "summarize_tiers",
]
