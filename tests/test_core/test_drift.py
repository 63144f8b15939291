"""Unit tests for pomkeeper.core.drift module.

Test Coverage:
- Weighted releases-behind estimate for major, minor and patch drift
- Lower-order caps and the minimum of one
- Short and qualified version strings
- DriftEstimator handling of equal, estimated and unresolved outcomes
"""

from __future__ import annotations

import pytest

from pomkeeper.core.drift import DriftEstimator, estimate_releases_behind
from pomkeeper.models import DriftAssessment, ResolutionOutcome


@pytest.mark.unit
class TestEstimateReleasesBehind:
    """Tests for estimate_releases_behind."""

    @pytest.mark.parametrize(
        "current,latest,expected",
        [
            ("1.0.0", "3.2.0", 22),
            ("2.1.0", "2.4.3", 12),
            ("2.4.1", "2.4.3", 2),
            ("1.7.36", "2.0.9", 10),
            ("5.3.31", "5.4.0", 3),
        ],
    )
    def test_weighted_estimate(self, current: str, latest: str, expected: int) -> None:
        assert estimate_releases_behind(current, latest) == expected

    def test_major_jump_outweighs_minor_jump(self) -> None:
        """Test drift is weighted by component, not read off the raw numbers."""
        major = estimate_releases_behind("1.0.0", "2.0.0")
        minor = estimate_releases_behind("1.9.0", "1.10.0")

        assert (major, minor) == (10, 3)
        assert major > minor

    def test_minor_jump_outweighs_patch_jump(self) -> None:
        assert estimate_releases_behind("1.0.9", "1.1.0") > estimate_releases_behind(
            "1.0.0", "1.0.2"
        )

    def test_minor_contribution_capped_for_major_drift(self) -> None:
        """Test minor releases add at most 5 on top of a major jump."""
        assert estimate_releases_behind("1.0.0", "2.9.0") == 15

    def test_patch_contribution_capped_for_minor_drift(self) -> None:
        assert estimate_releases_behind("2.1.0", "2.2.40") == 8

    def test_qualifier_only_change_counts_one(self) -> None:
        assert estimate_releases_behind("32.1.3-android", "32.1.3-jre") == 1

    def test_newer_current_still_counts_one(self) -> None:
        """Test a local version ahead of the latest still reports drift."""
        assert estimate_releases_behind("3.1.0", "3.0.0") == 1

    def test_missing_component_counts_latest_value(self) -> None:
        """Test "2.0" vs "2.0.7" treats the absent patch as seven behind."""
        assert estimate_releases_behind("2.0", "2.0.7") == 7

    def test_qualified_components_use_leading_digits(self) -> None:
        assert estimate_releases_behind("31.1-jre", "32.1.3-jre") == 10

    def test_non_numeric_versions(self) -> None:
        assert estimate_releases_behind("Hoxton.SR12", "Ilford.SR1") == 1


@pytest.mark.unit
class TestDriftEstimator:
    """Tests for DriftEstimator.assess."""

    @pytest.fixture
    def estimator(self) -> DriftEstimator:
        return DriftEstimator()

    def test_no_latest_version(self, estimator: DriftEstimator) -> None:
        result = estimator.assess(ResolutionOutcome.literal("1.0.0"), None)

        assert result == DriftAssessment.unavailable()
        assert result.is_identified is False

    def test_up_to_date(self, estimator: DriftEstimator) -> None:
        result = estimator.assess(ResolutionOutcome.literal("2.0.9"), "2.0.9")

        assert result.latest_version == "2.0.9"
        assert result.is_outdated is False
        assert result.releases_behind == 0

    def test_outdated(self, estimator: DriftEstimator) -> None:
        result = estimator.assess(ResolutionOutcome.literal("1.7.36"), "2.0.9")

        assert result.is_outdated is True
        assert result.releases_behind == 10

    def test_annotated_version_compared_clean(self, estimator: DriftEstimator) -> None:
        """Test provenance annotations never make a current version look outdated."""
        outcome = ResolutionOutcome.parent_inherited("3.2.0", "parent")

        result = estimator.assess(outcome, "3.2.0")

        assert result.is_outdated is False

    def test_trailing_zero_difference_is_outdated(self, estimator: DriftEstimator) -> None:
        """Test only an exact string match counts as up to date."""
        result = estimator.assess(ResolutionOutcome.literal("2.0"), "2.0.0")

        assert result.is_outdated is True
        assert result.releases_behind == 1

    def test_estimated_outcome_not_compared(self, estimator: DriftEstimator) -> None:
        outcome = ResolutionOutcome.estimated("MANAGED_BY_BOM (Spring Boot 3.2.0)")

        result = estimator.assess(outcome, "3.2.1")

        assert result == DriftAssessment(latest_version="3.2.1")

    def test_unresolved_outcome_not_compared(self, estimator: DriftEstimator) -> None:
        result = estimator.assess(ResolutionOutcome.unresolved("none"), "1.0.0")

        assert result.is_outdated is False
        assert result.latest_version == "1.0.0"
