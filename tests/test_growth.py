"""Tests for year-over-year growth and growth readiness."""

import math

import pytest

from customer_volume_audit.foundation import CustomerYearAggregate
from customer_volume_audit.segmentation import (
    GrowthKind,
    GrowthValue,
    TieredAggregate,
    VolumeTier,
    assign_tiers,
    calculate_volume_growth,
    classify_growth,
    is_growth_ready,
)


def _tiered(customer_id: str, year: int, volume: float) -> TieredAggregate:
    aggregate = CustomerYearAggregate(customer_id, year, volume, 0.0, volume, 1)
    return assign_tiers([aggregate])[0]


class TestGrowthValue:
    """Test GrowthValue tagging and comparisons."""

    def test_finite_requires_percent(self):
        with pytest.raises(ValueError, match="exactly when kind is finite"):
            GrowthValue(GrowthKind.FINITE)

    def test_non_finite_rejects_percent(self):
        with pytest.raises(ValueError, match="exactly when kind is finite"):
            GrowthValue(GrowthKind.INFINITE, 5.0)

    def test_is_positive(self):
        """Infinite counts as positive; undefined and non-positive do not."""
        assert GrowthValue.finite(0.01).is_positive
        assert GrowthValue.infinite().is_positive
        assert not GrowthValue.finite(0.0).is_positive
        assert not GrowthValue.finite(-10.0).is_positive
        assert not GrowthValue.dormant().is_positive
        assert not GrowthValue.no_history().is_positive

    def test_is_defined(self):
        assert GrowthValue.finite(1.0).is_defined
        assert GrowthValue.infinite().is_defined
        assert not GrowthValue.dormant().is_defined
        assert not GrowthValue.no_history().is_defined

    def test_as_float(self):
        """IEEE rendering keeps infinity and NaN distinguishable from finite values."""
        assert GrowthValue.finite(50.0).as_float() == 50.0
        assert GrowthValue.infinite().as_float() == math.inf
        assert math.isnan(GrowthValue.dormant().as_float())
        assert math.isnan(GrowthValue.no_history().as_float())


class TestCalculateVolumeGrowth:
    """Test calculate_volume_growth function."""

    def test_finite_growth(self):
        """100 -> 150 is exactly +50%."""
        growth = calculate_volume_growth(150, 100)
        assert growth.kind is GrowthKind.FINITE
        assert growth.percent == 50.0

    def test_decline(self):
        """150 -> 0 is -100%."""
        assert calculate_volume_growth(0, 150).percent == -100.0

    def test_zero_previous_positive_current_is_infinite(self):
        """0 -> 50 signals a newly activated customer."""
        assert calculate_volume_growth(50, 0).kind is GrowthKind.INFINITE

    def test_zero_previous_zero_current_is_dormant(self):
        """0 -> 0 is undefined growth for a dormant customer."""
        assert calculate_volume_growth(0, 0).kind is GrowthKind.DORMANT

    def test_no_previous_is_no_history(self):
        """Without a previous year there is no growth value."""
        growth = calculate_volume_growth(120, None)
        assert growth.kind is GrowthKind.NO_HISTORY
        assert growth.percent is None


class TestIsGrowthReady:
    """Test is_growth_ready predicate."""

    def test_high_tier_never_ready(self):
        """High Volume is never growth ready, whatever the growth."""
        assert not is_growth_ready(VolumeTier.HIGH, GrowthValue.finite(999.0))
        assert not is_growth_ready(VolumeTier.HIGH, GrowthValue.infinite())

    @pytest.mark.parametrize("tier", [VolumeTier.LOW, VolumeTier.MEDIUM])
    def test_low_and_medium_ready_when_growing(self, tier):
        assert is_growth_ready(tier, GrowthValue.finite(0.5))
        assert is_growth_ready(tier, GrowthValue.infinite())

    @pytest.mark.parametrize("tier", [VolumeTier.LOW, VolumeTier.MEDIUM])
    def test_low_and_medium_not_ready_otherwise(self, tier):
        assert not is_growth_ready(tier, GrowthValue.finite(0.0))
        assert not is_growth_ready(tier, GrowthValue.finite(-5.0))
        assert not is_growth_ready(tier, GrowthValue.dormant())
        assert not is_growth_ready(tier, GrowthValue.no_history())


class TestClassifyGrowth:
    """Test classify_growth over customer histories."""

    def test_first_year_has_no_growth(self):
        """A customer's first observed year has undefined growth and is not ready."""
        assessments = classify_growth([_tiered("C1", 2023, 100)])

        assert len(assessments) == 1
        assert assessments[0].previous_volume is None
        assert assessments[0].volume_growth.kind is GrowthKind.NO_HISTORY
        assert assessments[0].growth_ready is False

    def test_uses_preceding_observed_year(self):
        """A skipped year is bridged to the last observed year."""
        records = [
            _tiered("C1", 2024, 150),
            _tiered("C1", 2021, 100),
        ]

        assessments = classify_growth(records)

        assert [a.year for a in assessments] == [2021, 2024]
        assert assessments[1].previous_volume == 100
        assert assessments[1].volume_growth.percent == 50.0
        assert assessments[1].growth_ready is True

    def test_newly_activated_is_growth_ready(self):
        """0 -> 50 is infinite growth and Low tier, hence growth ready."""
        assessments = classify_growth([_tiered("C1", 2022, 0), _tiered("C1", 2023, 50)])

        assert assessments[1].volume_growth.kind is GrowthKind.INFINITE
        assert assessments[1].growth_ready is True

    def test_dormant_customer_not_ready(self):
        assessments = classify_growth([_tiered("C1", 2022, 0), _tiered("C1", 2023, 0)])

        assert assessments[1].volume_growth.kind is GrowthKind.DORMANT
        assert assessments[1].growth_ready is False

    def test_high_volume_growth_not_ready(self):
        """5000 with strong growth stays not ready because it is High Volume."""
        assessments = classify_growth([_tiered("C1", 2022, 500), _tiered("C1", 2023, 5000)])

        assert assessments[1].tier is VolumeTier.HIGH
        assert assessments[1].volume_growth.percent == pytest.approx(900.0)
        assert assessments[1].growth_ready is False

    def test_customers_are_independent(self):
        """Growth never compares across customers."""
        records = [
            _tiered("C2", 2023, 10),
            _tiered("C1", 2022, 100),
            _tiered("C1", 2023, 80),
        ]

        assessments = classify_growth(records)

        by_key = {(a.customer_id, a.year): a for a in assessments}
        assert by_key[("C2", 2023)].volume_growth.kind is GrowthKind.NO_HISTORY
        assert by_key[("C1", 2023)].volume_growth.percent == pytest.approx(-20.0)
        assert [(a.customer_id, a.year) for a in assessments] == [
            ("C1", 2022),
            ("C1", 2023),
            ("C2", 2023),
        ]

    def test_duplicate_customer_year_raises_error(self):
        with pytest.raises(ValueError, match="Duplicate customer-year"):
            classify_growth([_tiered("C1", 2023, 10), _tiered("C1", 2023, 20)])

    def test_empty_input(self):
        assert classify_growth([]) == []
