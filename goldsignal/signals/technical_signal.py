"""Technical signal extraction from an indicator snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .signal_types import NEUTRAL_SCORE, ScoredSource, clamp_score

if TYPE_CHECKING:
    from ..models import IndicatorSnapshot

# H4 bands: 65/35 for overbought/oversold, 55/45 for momentum
RSI_OVERBOUGHT = 65
RSI_OVERSOLD = 35
RSI_BULLISH = 55
RSI_BEARISH = 45

STRONG_MARKET = 70
WEAK_MARKET = 30

# Percent std of returns above which a risk warning is attached
HIGH_VOLATILITY = 10.0

CROSS_CONFIDENCE = 75
MAX_VIEW_CONFIDENCE = 85


def extract(snapshot: IndicatorSnapshot) -> ScoredSource:
    """Score the snapshot on the 0-100 gold-impact scale."""
    result = ScoredSource(
        name="technical",
        score=NEUTRAL_SCORE,
        details={
            "rsi": snapshot.rsi,
            "macd": snapshot.macd.trend,
            "trend": snapshot.trend,
            "strength": snapshot.strength,
            "close": snapshot.price.close,
            "high": snapshot.price.high,
            "low": snapshot.price.low,
            "volatility": snapshot.volatility,
            "ema200_available": snapshot.ema200 is not None,
        },
    )

    _score_rsi(snapshot, result)
    _score_macd(snapshot, result)
    _score_trend(snapshot, result)
    _score_strength(snapshot, result)
    _technical_view(snapshot, result)

    if snapshot.ema200 is None:
        result.signals.append("Trend from EMA 20/50 (not enough history for EMA 200)")

    if snapshot.volatility > HIGH_VOLATILITY:
        result.signals.append(
            f"High volatility ({snapshot.volatility:.2f}%) - manage risk carefully"
        )

    result.score = clamp_score(result.score)
    return result


def _score_rsi(snapshot: IndicatorSnapshot, result: ScoredSource) -> None:
    rsi = snapshot.rsi
    if rsi > RSI_OVERBOUGHT:
        result.score -= 15
        result.reasoning.append(f"RSI overbought (>{RSI_OVERBOUGHT})")
        result.signals.append(f"RSI overbought ({rsi:.1f}) - reversal risk")
    elif rsi < RSI_OVERSOLD:
        result.score += 15
        result.reasoning.append(f"RSI oversold (<{RSI_OVERSOLD})")
        result.signals.append(f"RSI oversold ({rsi:.1f}) - buying opportunity")
    elif rsi > RSI_BULLISH:
        result.score += 10
        result.reasoning.append("RSI bullish momentum")
        result.signals.append("RSI trending up")
    elif rsi < RSI_BEARISH:
        result.score -= 10
        result.reasoning.append("RSI bearish momentum")
        result.signals.append("RSI trending down")


def _score_macd(snapshot: IndicatorSnapshot, result: ScoredSource) -> None:
    trend = snapshot.macd.trend
    if trend == "bullish_cross":
        result.score += 20
        result.reasoning.append("MACD bullish crossover")
        result.signals.append("MACD golden cross")
    elif trend == "bearish_cross":
        result.score -= 20
        result.reasoning.append("MACD bearish crossover")
        result.signals.append("MACD death cross")
    elif trend == "bullish":
        result.score += 10
        result.reasoning.append("MACD above signal line")
        result.signals.append("MACD bullish")
    elif trend == "bearish":
        result.score -= 10
        result.reasoning.append("MACD below signal line")
        result.signals.append("MACD bearish")


def _score_trend(snapshot: IndicatorSnapshot, result: ScoredSource) -> None:
    if snapshot.trend == "uptrend":
        result.score += 15
        result.reasoning.append("Price in uptrend")
        result.signals.append("Uptrend confirmed")
    elif snapshot.trend == "downtrend":
        result.score -= 15
        result.reasoning.append("Price in downtrend")
        result.signals.append("Downtrend confirmed")


def _score_strength(snapshot: IndicatorSnapshot, result: ScoredSource) -> None:
    strength = snapshot.strength
    if strength >= STRONG_MARKET:
        result.score += 10
        result.reasoning.append(f"Strong momentum ({strength})")
    elif strength <= WEAK_MARKET:
        result.score -= 10
        result.reasoning.append(f"Weak momentum ({strength})")


def _technical_view(snapshot: IndicatorSnapshot, result: ScoredSource) -> None:
    """Technical-only recommendation kept in details; does not move the score."""
    recommendation, confidence = "HOLD", 50
    if snapshot.macd.trend == "bullish_cross":
        recommendation, confidence = "BUY", CROSS_CONFIDENCE
    elif snapshot.macd.trend == "bearish_cross":
        recommendation, confidence = "SELL", CROSS_CONFIDENCE

    if snapshot.trend == "uptrend" and snapshot.strength >= STRONG_MARKET:
        recommendation = "BUY"
        confidence = min(MAX_VIEW_CONFIDENCE, confidence + 10)
        result.reasoning.append("Strong uptrend")
    elif snapshot.trend == "downtrend" and snapshot.strength <= WEAK_MARKET:
        recommendation = "SELL"
        confidence = min(MAX_VIEW_CONFIDENCE, confidence + 10)
        result.reasoning.append("Strong downtrend")

    result.details["recommendation"] = recommendation
    result.details["recommendation_confidence"] = confidence
