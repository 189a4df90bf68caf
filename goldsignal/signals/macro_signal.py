"""Macro signal extraction from economic releases (FRED series)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from .signal_types import NEUTRAL_SCORE, ScoredSource, round_half_up

if TYPE_CHECKING:
    from ..models import EconomicObservation

_IMPORTANCE_WEIGHTS: dict[str, float] = {
    "high": 1.0,
    "medium": 0.7,
    "low": 0.4,
}

_DEFAULT_CONFIDENCE = 60


@dataclass(frozen=True)
class MacroRule:
    """Threshold rule for one indicator family.

    ``measure`` is ``"change"`` (absolute delta) or ``"pct_change"``.
    A move above ``rise_threshold`` yields ``rise_impact`` for gold, a move
    below ``fall_threshold`` the opposite, both at ``confidence``.
    """

    measure: str
    rise_threshold: float
    fall_threshold: float
    rise_impact: str
    confidence: int
    neutral_confidence: int
    subject: str


@dataclass(frozen=True)
class MacroIndicator:
    name: str
    category: str
    importance: str
    family: str


@dataclass
class MacroAnalysis:
    """Gold impact of one economic release."""

    observation: EconomicObservation
    gold_sentiment: str  # hawkish_usd | dovish_usd | neutral
    impact_on_gold: str
    confidence: int
    summary: str


MACRO_RULES: dict[str, MacroRule] = {
    "policy_rate": MacroRule("change", 0.10, -0.10, "negative", 85, 50, "Fed funds rate"),
    "inflation": MacroRule("pct_change", 0.5, -0.3, "negative", 75, 60, "Inflation"),
    # Rising unemployment means a weaker economy, which supports gold
    "unemployment": MacroRule("change", 0.3, -0.3, "positive", 70, 55, "Unemployment"),
    "payrolls": MacroRule("change", 50, -50, "negative", 75, 60, "Payrolls"),
    "treasury": MacroRule("change", 0.2, -0.2, "negative", 80, 55, "Treasury yield"),
    "gdp": MacroRule("pct_change", 1.0, -1.0, "negative", 70, 60, "GDP"),
}

FRED_INDICATORS: dict[str, MacroIndicator] = {
    "FEDFUNDS": MacroIndicator("Federal Funds Rate", "fed_policy", "high", "policy_rate"),
    "CPIAUCSL": MacroIndicator("Consumer Price Index (CPI)", "inflation", "high", "inflation"),
    "CPILFESL": MacroIndicator("Core CPI (Less Food & Energy)", "inflation", "high", "inflation"),
    "UNRATE": MacroIndicator("Unemployment Rate", "employment", "medium", "unemployment"),
    "PAYEMS": MacroIndicator("Nonfarm Payrolls", "employment", "high", "payrolls"),
    "GDP": MacroIndicator("Gross Domestic Product", "economic_growth", "medium", "gdp"),
    "DGS10": MacroIndicator("10-Year Treasury Rate", "treasury", "high", "treasury"),
    "DGS2": MacroIndicator("2-Year Treasury Rate", "treasury", "medium", "treasury"),
}

_SENTIMENT_FOR_IMPACT = {"negative": "hawkish_usd", "positive": "dovish_usd"}


def _measure(obs: EconomicObservation, measure: str) -> float:
    if not obs.previous_value:
        return 0.0
    change = obs.current_value - obs.previous_value
    if measure == "pct_change":
        return change / obs.previous_value * 100
    return change


def map_macro_impact(obs: EconomicObservation) -> MacroAnalysis:
    """Classify one release with the threshold rule of its indicator family."""
    indicator = FRED_INDICATORS.get(obs.series_id)
    name = obs.name or (indicator.name if indicator else obs.series_id)

    if indicator is None:
        return MacroAnalysis(
            observation=obs,
            gold_sentiment="neutral",
            impact_on_gold="neutral",
            confidence=_DEFAULT_CONFIDENCE,
            summary=f"{name}: {obs.current_value} -> neutral for gold",
        )

    rule = MACRO_RULES[indicator.family]
    delta = _measure(obs, rule.measure)
    unit = "%" if rule.measure == "pct_change" else ""

    if delta > rule.rise_threshold:
        impact = rule.rise_impact
        direction = "rose"
    elif delta < rule.fall_threshold:
        impact = "negative" if rule.rise_impact == "positive" else "positive"
        direction = "fell"
    else:
        return MacroAnalysis(
            observation=obs,
            gold_sentiment="neutral",
            impact_on_gold="neutral",
            confidence=rule.neutral_confidence,
            summary=f"{rule.subject} steady at {obs.current_value:g} -> neutral for gold",
        )

    outcome = "gold up" if impact == "positive" else "gold down"
    return MacroAnalysis(
        observation=obs,
        gold_sentiment=_SENTIMENT_FOR_IMPACT[impact],
        impact_on_gold=impact,
        confidence=rule.confidence,
        summary=f"{rule.subject} {direction} {abs(delta):.2f}{unit} -> {outcome}",
    )


def _item_score(impact: str, confidence: float) -> float:
    if impact == "positive":
        return 65 + (confidence - 50) * 0.3
    if impact == "negative":
        return 35 - (confidence - 50) * 0.3
    return NEUTRAL_SCORE


def aggregate(analyses: Sequence[MacroAnalysis]) -> ScoredSource:
    """Importance- and confidence-weighted mean; an empty window is neutral 50."""
    if not analyses:
        return ScoredSource(
            name="macro",
            score=NEUTRAL_SCORE,
            reasoning=["No recent economic data"],
            signals=["No macro impact"],
            details={"count": 0, "positive": 0, "negative": 0, "neutral": 0, "no_data": True},
        )

    counts = {"positive": 0, "negative": 0, "neutral": 0}
    weighted_total = 0.0
    weight_sum = 0.0
    for analysis in analyses:
        impact = analysis.impact_on_gold if analysis.impact_on_gold in counts else "neutral"
        counts[impact] += 1
        weight = (
            _IMPORTANCE_WEIGHTS.get(analysis.observation.importance, 0.4)
            * analysis.confidence / 100
        )
        weighted_total += _item_score(impact, analysis.confidence) * weight
        weight_sum += weight

    score = weighted_total / weight_sum if weight_sum > 0 else NEUTRAL_SCORE

    positive, negative = counts["positive"], counts["negative"]
    if positive > negative:
        reasoning = f"{positive} positive vs {negative} negative economic factors"
        signal = "Macro environment bullish for gold"
    elif negative > positive:
        reasoning = f"{negative} negative vs {positive} positive economic factors"
        signal = "Macro environment bearish for gold"
    else:
        reasoning = "Mixed macro environment"
        signal = "Neutral macro environment"

    return ScoredSource(
        name="macro",
        score=round_half_up(score),
        reasoning=[reasoning],
        signals=[signal],
        details={
            "count": len(analyses),
            **counts,
            "releases": [a.summary for a in analyses],
        },
    )
