"""Tests for volume percentile outlier filtering."""

import pytest

from customer_volume_audit.foundation import CustomerYearAggregate
from customer_volume_audit.segmentation import (
    DEFAULT_OUTLIER_PERCENTILE,
    filter_volume_outliers,
    volume_percentile,
)


def _aggregate(customer_id: str, volume: float, year: int = 2023) -> CustomerYearAggregate:
    return CustomerYearAggregate(
        customer_id=customer_id,
        year=year,
        total_delivered_cases=volume,
        total_delivered_gallons=0.0,
        total_volume=volume,
        transaction_count=1,
        average_volume_per_transaction=volume,
    )


class TestVolumePercentile:
    """Test volume_percentile function."""

    def test_linear_interpolation(self):
        """Percentile interpolates linearly between ranks."""
        assert volume_percentile([0, 10, 20, 30, 40], 50) == 20.0
        assert volume_percentile([0, 100], 99) == pytest.approx(99.0)
        assert volume_percentile(range(1, 101), 99) == pytest.approx(99.01)

    def test_missing_values_ignored(self):
        """None and NaN values are excluded from the population."""
        assert volume_percentile([None, 10.0, float("nan"), 20.0], 100) == 20.0

    def test_empty_population_raises_error(self):
        """An empty population has no percentile."""
        with pytest.raises(ValueError, match="empty population"):
            volume_percentile([], 99)

    def test_all_missing_raises_error(self):
        """A population with only missing values has no percentile."""
        with pytest.raises(ValueError, match="empty population"):
            volume_percentile([None, float("nan")], 99)

    @pytest.mark.parametrize("percentile", [0, -5, 100.5])
    def test_out_of_range_percentile_raises_error(self, percentile):
        """Percentile must be in (0, 100]."""
        with pytest.raises(ValueError, match="Percentile must be in"):
            volume_percentile([1, 2, 3], percentile)


class TestFilterVolumeOutliers:
    """Test filter_volume_outliers function."""

    def test_default_percentile_is_99(self):
        assert DEFAULT_OUTLIER_PERCENTILE == 99.0

    def test_drops_records_above_threshold(self):
        """Records above the p99 volume are dropped, the rest retained."""
        aggregates = [_aggregate(f"C{i}", float(i)) for i in range(1, 101)]

        result = filter_volume_outliers(aggregates)

        assert result.threshold == pytest.approx(99.01)
        assert [a.customer_id for a in result.dropped] == ["C100"]
        assert len(result.retained) == 99
        assert result.dropped_share == pytest.approx(0.01)

    def test_records_at_threshold_are_retained(self):
        """The comparison is <=, so a record exactly at the threshold stays."""
        aggregates = [_aggregate("C1", 10.0), _aggregate("C2", 10.0)]

        result = filter_volume_outliers(aggregates)

        assert result.threshold == 10.0
        assert len(result.retained) == 2
        assert result.dropped == ()

    def test_preserves_input_order(self):
        """Retained records keep their input order."""
        aggregates = [_aggregate("C3", 3.0), _aggregate("C1", 1.0), _aggregate("C2", 2.0)]

        result = filter_volume_outliers(aggregates, percentile=100)

        assert [a.customer_id for a in result.retained] == ["C3", "C1", "C2"]

    def test_empty_input_raises_error(self):
        """Filtering an empty population is a data error."""
        with pytest.raises(ValueError, match="empty population"):
            filter_volume_outliers([])

    def test_threshold_recomputed_from_population(self):
        """Different populations produce different thresholds."""
        small = [_aggregate(f"C{i}", float(i)) for i in range(1, 11)]
        large = [_aggregate(f"C{i}", float(i * 100)) for i in range(1, 11)]

        assert filter_volume_outliers(small).threshold < filter_volume_outliers(large).threshold

    def test_idempotent_on_own_output(self):
        """Re-filtering the retained records removes nothing when the top is tied."""
        volumes = [50.0] * 100 + [10000.0]
        aggregates = [_aggregate(f"C{i}", v) for i, v in enumerate(volumes)]

        first = filter_volume_outliers(aggregates)
        second = filter_volume_outliers(list(first.retained))

        assert len(first.dropped) == 1
        assert second.dropped == ()
        assert second.retained == first.retained
