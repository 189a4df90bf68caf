"""Common output shape of the technical, news and macro scorers."""

import math
from dataclasses import dataclass, field

from ..errors import ValidationError

NEUTRAL_SCORE = 50


@dataclass
class ScoredSource:
    """A 0-100 gold-impact score with the reasoning that produced it."""

    name: str
    score: float  # 0 to 100, >50 favors long gold
    reasoning: list = field(default_factory=list)
    signals: list = field(default_factory=list)
    details: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        check_score(self.name, self.score)

    @property
    def has_data(self) -> bool:
        return not self.details.get("no_data", False)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> float:
    return max(0, min(100, value))


def check_score(name: str, score: float) -> None:
    if not 0 <= score <= 100:
        raise ValidationError(f"{name} score must be within [0, 100], got {score}")
