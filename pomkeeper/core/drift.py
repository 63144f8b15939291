"""
Version drift estimation.

Compares a resolved dependency version with the latest published release
and produces a :class:`~pomkeeper.models.dependency.DriftAssessment`.

The ``releases_behind`` figure is a weighted estimate built from the
major/minor/patch deltas, not a count of actual releases:

* major ahead:    ``major * 10 + min(minor, 5)``
* minor ahead:    ``minor * 3 + min(patch, 5)``
* otherwise:      ``max(1, patch)``

Each delta is ``max(0, latest - current)`` over the leading digit run of
the component. The result is clamped to at least 1 whenever the versions
differ.
"""

from __future__ import annotations

from typing import List, Optional

from pomkeeper.constants import (
    LOWER_ORDER_CAP,
    MAJOR_RELEASE_WEIGHT,
    MINOR_RELEASE_WEIGHT,
)
from pomkeeper.models.dependency import DriftAssessment
from pomkeeper.models.resolution import ResolutionOutcome
from pomkeeper.utils.logger import get_logger
from pomkeeper.utils.version_utils import clean_version, numeric_value, split_version

logger = get_logger("drift")


def _component_values(version: str) -> List[Optional[int]]:
    """Leading integers of the first three components; ``None`` when missing."""
    parts = split_version(version)
    values: List[Optional[int]] = []
    for index in range(3):
        if index < len(parts):
            values.append(numeric_value(parts[index])[0] or 0)
        else:
            values.append(None)
    return values


def estimate_releases_behind(current: str, latest: str) -> int:
    """Estimate how many releases *current* trails *latest* by.

    Only meaningful when the two versions differ; the result is always at
    least ``1``, including when *current* is actually newer.

    Examples:
        >>> estimate_releases_behind("1.0.0", "3.2.0")
        22
        >>> estimate_releases_behind("2.1.0", "2.4.3")
        12
        >>> estimate_releases_behind("2.4.1", "2.4.3")
        2
    """
    current_values = _component_values(current)
    latest_values = _component_values(latest)

    deltas: List[int] = []
    for current_value, latest_value in zip(current_values, latest_values):
        latest_number = latest_value or 0
        if current_value is None:
            # Missing on the current side: count the latest's whole value
            deltas.append(latest_number)
        else:
            deltas.append(max(0, latest_number - current_value))

    major, minor, patch = deltas

    if major > 0:
        estimate = major * MAJOR_RELEASE_WEIGHT + min(minor, LOWER_ORDER_CAP)
    elif minor > 0:
        estimate = minor * MINOR_RELEASE_WEIGHT + min(patch, LOWER_ORDER_CAP)
    else:
        estimate = max(1, patch)

    return max(1, estimate)


class DriftEstimator:
    """Produce :class:`DriftAssessment` values for resolution outcomes."""

    def assess(
        self,
        outcome: ResolutionOutcome,
        latest_version: Optional[str],
    ) -> DriftAssessment:
        """Compare *outcome* with *latest_version*.

        Args:
            outcome: Result of version resolution.
            latest_version: Latest published version, or ``None`` if the
                lookup failed.

        Returns:
            ``DriftAssessment.unavailable()`` without a latest version. For
            estimates and unresolved outcomes the latest version is recorded
            but nothing is compared.
        """
        if not latest_version:
            return DriftAssessment.unavailable()

        if not outcome.is_comparable:
            return DriftAssessment(latest_version=latest_version)

        assert outcome.version is not None
        current = clean_version(outcome.version)
        if current == latest_version:
            return DriftAssessment(latest_version=latest_version)

        behind = estimate_releases_behind(current, latest_version)
        logger.debug("%s trails %s by ~%d releases", current, latest_version, behind)
        return DriftAssessment(
            latest_version=latest_version,
            is_outdated=True,
            releases_behind=behind,
        )
