"""Choice points, max score and final outcome tier for branching scenarios."""
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from coursereel.core.config import Settings

CHOICE_QUALITIES = ("optimal", "suboptimal", "poor")
OUTCOME_TIERS = ("good", "neutral", "poor")

# quality a choice reflects -> final tier it pushes toward
QUALITY_TIER = {
    "optimal": "good",
    "suboptimal": "neutral",
    "poor": "poor",
}

# Tie-break by score percentage: (min percentage, tier), checked top-down
TIER_BANDS = [
    (80.0, "good"),
    (50.0, "neutral"),
    (0.0, "poor"),
]


@dataclass(frozen=True)
class ScoringPolicy:
    """Points per choice quality. Must be strictly descending."""

    optimal: int = 10
    suboptimal: int = 5
    poor: int = 2  # not 0: a poor choice still earns something

    def __post_init__(self) -> None:
        if not (self.optimal > self.suboptimal > self.poor):
            raise ValueError("choice points must satisfy optimal > suboptimal > poor")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoringPolicy":
        return cls(settings.optimal_points, settings.suboptimal_points, settings.poor_points)

    def points_for(self, quality: str) -> int:
        return getattr(self, quality)


def max_score_for_choices(choice_sets: Iterable[Iterable[dict]]) -> int:
    """Sum of the highest-point choice per decision scene."""
    return sum(max((int(c["points"]) for c in choices), default=0) for choices in choice_sets)


def percentage(score: int, max_score: int) -> float:
    return round(score / max_score * 100, 1) if max_score else 0.0


def tier_for_percentage(pct: float) -> str:
    for low, tier in TIER_BANDS:
        if pct >= low:
            return tier
    return "poor"


def determine_outcome_tier(qualities: Iterable[str], score: int, max_score: int) -> str:
    """Tier the choices predominantly reflect; ties fall back to score percentage."""
    counts = Counter(QUALITY_TIER[q] for q in qualities if q in QUALITY_TIER)
    if not counts:
        return tier_for_percentage(percentage(score, max_score))
    ranked = counts.most_common()
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return tier_for_percentage(percentage(score, max_score))
    return ranked[0][0]
