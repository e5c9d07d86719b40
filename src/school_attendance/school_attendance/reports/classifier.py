from __future__ import annotations

from typing import Iterable

from ..core.constants import DEFAULT_TIER_AVERAGE_MIN, DEFAULT_TIER_GOOD_MIN
from ..core.enums import Tier
from .model import TierCounts


class PercentageClassifier:
    """Buckets integer percentages into good / average / poor."""

    def __init__(self, good_min: int = DEFAULT_TIER_GOOD_MIN, average_min: int = DEFAULT_TIER_AVERAGE_MIN):
        if not 0 <= average_min <= good_min <= 100:
            raise ValueError(
                f"Tier thresholds must satisfy 0 <= average_min <= good_min <= 100, got {average_min}/{good_min}"
            )
        self.good_min = int(good_min)
        self.average_min = int(average_min)

    def classify(self, pct: int) -> Tier:
        if pct >= self.good_min:
            return Tier.GOOD
        if pct >= self.average_min:
            return Tier.AVERAGE
        return Tier.POOR

    def count(self, percentages: Iterable[int]) -> TierCounts:
        tally = {Tier.GOOD: 0, Tier.AVERAGE: 0, Tier.POOR: 0}
        for pct in percentages:
            tally[self.classify(pct)] += 1
        return TierCounts(good=tally[Tier.GOOD], average=tally[Tier.AVERAGE], poor=tally[Tier.POOR])
