"""News sentiment signal: per-article gold impact and the window aggregate."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

from ..sentiment import patterns
from .signal_types import NEUTRAL_SCORE, ScoredSource, round_half_up

if TYPE_CHECKING:
    from ..models import NewsItem
    from ..sentiment.classifier import SentimentAnalyzer

logger = logging.getLogger(__name__)

# Classifier results below this confidence are dropped before impact mapping
MIN_CONFIDENCE = 60

_SENTIMENT_SCORES = {"POSITIVE": 1, "NEGATIVE": -1, "NEUTRAL": 0}

_MAX_KEYWORDS = 5

_GOLD_SENTIMENT_TEXT = {
    "dovish_usd": "Fed easing -> weaker USD",
    "hawkish_usd": "Fed tightening -> stronger USD",
    "risk_off": "Risk-off -> safe-haven demand",
    "risk_on": "Risk-on -> flows into risk assets",
    "bullish_gold": "Bullish for gold",
    "bearish_gold": "Bearish for gold",
    "neutral": "Neutral",
}

_IMPACT_TEXT = {"positive": "UP", "negative": "DOWN", "neutral": "FLAT"}


@dataclass
class GoldImpact:
    """Result of mapping one text onto the gold-impact scale."""

    impact: str  # positive | negative | neutral
    gold_sentiment: str
    total_score: int
    context_score: int
    reasons: list = field(default_factory=list)


@dataclass
class ArticleAnalysis:
    """Per-article outcome consumed by the news aggregate."""

    item: NewsItem
    sentiment_label: str
    confidence: float
    model: str
    impact_on_gold: str
    gold_sentiment: str
    impact_score: int
    reasons: list = field(default_factory=list)
    category: str = "other"
    keywords: list = field(default_factory=list)
    summary: str = ""


# ---------------------------------------------------------------------------
# Per-article mapping
# ---------------------------------------------------------------------------

def map_gold_impact(
    sentiment_label: str,
    text: str,
    impact_patterns: Sequence[tuple[re.Pattern[str], int, str]] = patterns.GOLD_IMPACT_PATTERNS,
) -> GoldImpact:
    """Combine the sentiment label with weighted financial-context patterns.

    A total of +2 or more is positive for gold, -2 or less negative. The
    sub-label follows the strongest narrative that fired.
    """
    context_score = 0
    reasons: list[str] = []
    for pattern, weight, reason in impact_patterns:
        if pattern.search(text):
            context_score += weight
            reasons.append(reason)

    total = _SENTIMENT_SCORES.get(sentiment_label, 0) + context_score

    if total >= 2:
        impact = "positive"
        if patterns.REASON_FED_DOVISH in reasons:
            gold_sentiment = "dovish_usd"
        elif patterns.REASON_RISK_OFF in reasons:
            gold_sentiment = "risk_off"
        else:
            gold_sentiment = "bullish_gold"
    elif total <= -2:
        impact = "negative"
        if patterns.REASON_FED_HAWKISH in reasons:
            gold_sentiment = "hawkish_usd"
        elif patterns.REASON_STRONG_ECONOMY in reasons or patterns.REASON_RISK_ON in reasons:
            gold_sentiment = "risk_on"
        else:
            gold_sentiment = "bearish_gold"
    else:
        impact = "neutral"
        gold_sentiment = "neutral"

    return GoldImpact(
        impact=impact,
        gold_sentiment=gold_sentiment,
        total_score=total,
        context_score=context_score,
        reasons=reasons,
    )


def is_gold_related(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in patterns.GOLD_KEYWORDS)


def extract_keywords(text: str) -> list[str]:
    lowered = text.lower()
    return [kw for kw in patterns.GOLD_KEYWORDS if kw in lowered][:_MAX_KEYWORDS]


def categorize(text: str) -> str:
    for category, pattern in patterns.NEWS_CATEGORIES:
        if pattern.search(text):
            return category
    return "other"


def _build_summary(impact: GoldImpact, confidence: float) -> str:
    narrative = _GOLD_SENTIMENT_TEXT.get(impact.gold_sentiment, "Neutral")
    summary = f"{narrative} -> GOLD {_IMPACT_TEXT[impact.impact]} ({confidence:.0f}%)"
    if impact.reasons:
        summary += f" | Reasons: {', '.join(impact.reasons)}"
    return summary


def analyze_article(
    item: NewsItem,
    analyzer: SentimentAnalyzer,
    min_confidence: float = MIN_CONFIDENCE,
) -> Optional[ArticleAnalysis]:
    """Classify and map one article; returns None when the classifier is not confident enough."""
    sentiment = analyzer.analyze(item.content or item.title)
    if sentiment.confidence < min_confidence:
        logger.debug(
            "Low confidence (%s%%), skipping: %.50s", sentiment.confidence, item.title,
        )
        return None

    text = item.text
    impact = map_gold_impact(sentiment.label, text)
    return ArticleAnalysis(
        item=item,
        sentiment_label=sentiment.label,
        confidence=sentiment.confidence,
        model=sentiment.model,
        impact_on_gold=impact.impact,
        gold_sentiment=impact.gold_sentiment,
        impact_score=impact.total_score,
        reasons=impact.reasons,
        category=categorize(text),
        keywords=extract_keywords(text),
        summary=_build_summary(impact, sentiment.confidence),
    )


# ---------------------------------------------------------------------------
# Window aggregate
# ---------------------------------------------------------------------------

def _item_score(impact: str, confidence: float) -> float:
    if impact == "positive":
        return 70 + (confidence - 60) * 0.5
    if impact == "negative":
        return 30 - (confidence - 60) * 0.5
    return NEUTRAL_SCORE


def aggregate(analyses: Sequence[ArticleAnalysis]) -> ScoredSource:
    """Confidence-weighted mean of per-article scores; an empty window is neutral 50."""
    if not analyses:
        return ScoredSource(
            name="news",
            score=NEUTRAL_SCORE,
            reasoning=["No recent news available"],
            signals=["No news impact"],
            details={"count": 0, "positive": 0, "negative": 0, "neutral": 0, "no_data": True},
        )

    counts = {"positive": 0, "negative": 0, "neutral": 0}
    weighted_total = 0.0
    weight_sum = 0.0
    for analysis in analyses:
        impact = analysis.impact_on_gold if analysis.impact_on_gold in counts else "neutral"
        counts[impact] += 1
        weight = analysis.confidence / 100
        weighted_total += _item_score(impact, analysis.confidence) * weight
        weight_sum += weight

    score = weighted_total / weight_sum if weight_sum > 0 else NEUTRAL_SCORE

    positive, negative = counts["positive"], counts["negative"]
    if positive > negative:
        reasoning = f"{positive} positive vs {negative} negative news"
        signal = "News sentiment bullish for gold"
    elif negative > positive:
        reasoning = f"{negative} negative vs {positive} positive news"
        signal = "News sentiment bearish for gold"
    else:
        reasoning = "Mixed news sentiment"
        signal = "Neutral news sentiment"

    return ScoredSource(
        name="news",
        score=round_half_up(score),
        reasoning=[reasoning],
        signals=[signal],
        details={"count": len(analyses), **counts},
    )
