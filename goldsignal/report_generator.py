"""Rationale renderer for fused signals.

Produces a structured, multi-section text from the three scored sources
and the final decision. Deterministic template rendering only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .signals.signal_types import ScoredSource

if TYPE_CHECKING:
    from .fusion_engine import Thresholds, TradeLevels

# A factor within this distance of 50 reads as neutral in the HOLD rationale
_NEUTRAL_BAND = 10


class ReportGenerator:
    """Render the human-readable summary attached to every Signal."""

    def __init__(self, thresholds: Thresholds) -> None:
        self.thresholds = thresholds

    def generate(
        self,
        action: str,
        confidence: int,
        overall: int,
        price: float,
        technical: ScoredSource,
        news: ScoredSource,
        macro: ScoredSource,
        levels: TradeLevels,
    ) -> str:
        sections = [
            self._technical_section(technical),
            self._news_section(news),
            self._macro_section(macro),
            self._recommendation_section(
                action, confidence, overall, price, technical, news, macro, levels,
            ),
            self._risk_section(),
        ]
        return "\n\n".join(sections)

    def _technical_section(self, technical: ScoredSource) -> str:
        d = technical.details
        lines = ["## Technical Analysis"]
        if "close" in d:
            lines.append(
                f"- Price: ${d['close']:.2f} (H: ${d['high']:.2f} | L: ${d['low']:.2f})"
            )

        rsi = d.get("rsi")
        if rsi is not None:
            if rsi > 65:
                lines.append(f"- RSI {rsi}: overbought zone, selling pressure may appear")
            elif rsi < 35:
                lines.append(f"- RSI {rsi}: oversold zone, good area to accumulate")
            elif rsi > 55:
                lines.append(f"- RSI {rsi}: positive momentum")
            elif rsi < 45:
                lines.append(f"- RSI {rsi}: negative momentum")
            else:
                lines.append(f"- RSI {rsi}: neutral, waiting for a clearer signal")

        macd_text = {
            "bullish_cross": "golden cross, strong buy signal",
            "bearish_cross": "death cross, strong sell signal",
            "bullish": "holding above the signal line, uptrend continues",
            "bearish": "holding below the signal line, downtrend continues",
        }
        lines.append(f"- MACD: {macd_text.get(d.get('macd'), 'hovering near zero, waiting for a breakout')}")

        trend_text = {
            "uptrend": "UP, favour buying dips",
            "downtrend": "DOWN, favour selling rallies",
        }
        lines.append(f"- Trend: {trend_text.get(d.get('trend'), 'SIDEWAYS, range-bound market')}")

        strength = d.get("strength")
        if strength is not None:
            if strength >= 70:
                label = "very strong"
            elif strength >= 50:
                label = "moderate"
            else:
                label = "weak"
            lines.append(f"- Market strength: {strength}/100 ({label})")

        lines.append(f"> Technical score: {technical.score}/100")
        return "\n".join(lines)

    def _news_section(self, news: ScoredSource) -> str:
        lines = ["## News Analysis (24h)"]
        d = news.details
        count = d.get("count", 0)
        if count == 0:
            lines.append("- No notable news in the last 24 hours")
            lines.append("- No news catalyst for the market")
            lines.append(f"> News score: {news.score}/100 (neutral)")
            return "\n".join(lines)

        positive, negative, neutral = d.get("positive", 0), d.get("negative", 0), d.get("neutral", 0)
        lines.append(
            f"- {count} articles: {positive} positive, {negative} negative, {neutral} neutral"
        )
        if positive > negative:
            lines.append("- Sentiment: POSITIVE for gold")
            degree = "very positive" if positive >= negative * 2 else "moderately positive"
            lines.append(f"- Degree: {degree}")
        elif negative > positive:
            lines.append("- Sentiment: NEGATIVE for gold")
            degree = "very negative" if negative >= positive * 2 else "moderately negative"
            lines.append(f"- Degree: {degree}")
        else:
            lines.append("- Sentiment: NEUTRAL, conflicting headlines")

        if news.signals:
            lines.append(f"- Key factor: {news.signals[0]}")
        lines.append(f"> News score: {news.score}/100")
        return "\n".join(lines)

    def _macro_section(self, macro: ScoredSource) -> str:
        lines = ["## Macro Analysis (7 days)"]
        d = macro.details
        count = d.get("count", 0)
        if count == 0:
            lines.append("- No new economic data in the last 7 days")
            lines.append(f"> Macro score: {macro.score}/100 (no data)")
            return "\n".join(lines)

        positive, negative = d.get("positive", 0), d.get("negative", 0)
        lines.append(f"- {count} indicators: {positive} positive, {negative} negative for gold")
        if positive > negative:
            lines.append("- Environment: SUPPORTIVE (dovish Fed, cooling inflation or slowing growth)")
        elif negative > positive:
            lines.append("- Environment: ADVERSE (hawkish Fed, strong economy or rising yields)")
        else:
            lines.append("- Environment: NEUTRAL, mixed data")

        for release in d.get("releases", [])[:3]:
            lines.append(f"  - {release}")

        if macro.score >= self.thresholds.buy:
            lines.append("- Impact: supportive for the gold price")
        elif macro.score <= self.thresholds.sell:
            lines.append("- Impact: downward pressure on the gold price")
        else:
            lines.append("- Impact: no clear bias")
        lines.append(f"> Macro score: {macro.score}/100")
        return "\n".join(lines)

    def _recommendation_section(
        self,
        action: str,
        confidence: int,
        overall: int,
        price: float,
        technical: ScoredSource,
        news: ScoredSource,
        macro: ScoredSource,
        levels: TradeLevels,
    ) -> str:
        lines = [
            "## Recommendation",
            f"- Overall score: {overall}/100 "
            f"(technical {technical.score}, news {news.score}, macro {macro.score})",
        ]

        if action == "HOLD":
            lines.append("- **HOLD / WAIT**")
            lines.append(f"- Confidence: {confidence}% (no clear signal)")
            if (
                abs(technical.score - 50) <= _NEUTRAL_BAND
                and abs(news.score - 50) <= _NEUTRAL_BAND
            ):
                lines.append("- Reason: all factors are neutral")
            else:
                lines.append("- Reason: factors conflict, no consensus yet")
            lines.append("- Watch for a breakout from the range or a major headline")
            return "\n".join(lines)

        lines.append(f"- **{action} GOLD**")
        lines.append(f"- Confidence: {confidence}% ({_confidence_label(confidence)})")
        lines.append(f"- Main reason: {self._attribution(action, technical, news, macro)}")
        lines.append(
            f"- Entry zone: ${levels.entry_zone[0]:.2f} - ${levels.entry_zone[1]:.2f} "
            f"(around ${price:.2f})"
        )
        lines.append(
            f"- Stop loss: ${levels.stop_loss:.2f} | Take profit: ${levels.take_profit:.2f}"
        )
        if levels.risk_reward_ratio is not None:
            lines.append(f"- Risk/reward: 1:{levels.risk_reward_ratio}")
        return "\n".join(lines)

    def _attribution(
        self,
        action: str,
        technical: ScoredSource,
        news: ScoredSource,
        macro: ScoredSource,
    ) -> str:
        """Name the factor(s) behind a BUY/SELL using the decision thresholds."""
        if action == "BUY":
            def agrees(score: float) -> bool:
                return score >= self.thresholds.buy
            both, tech_only, news_only, macro_only, blended = (
                "both technical and news support a long position",
                "strong technical signal",
                "news flow positive for gold",
                "supportive macro environment",
                "the balance of factors leans positive",
            )
        else:
            def agrees(score: float) -> bool:
                return score <= self.thresholds.sell
            both, tech_only, news_only, macro_only, blended = (
                "both technical and news argue against gold",
                "weak technical picture",
                "news flow negative for gold",
                "adverse macro environment",
                "the balance of factors leans negative",
            )

        if agrees(technical.score) and agrees(news.score):
            return both
        if agrees(technical.score):
            return tech_only
        if agrees(news.score):
            return news_only
        if agrees(macro.score):
            return macro_only
        return blended

    def _risk_section(self) -> str:
        return "\n".join([
            "## Risk Notice",
            "- Gold is volatile: always use a stop loss",
            "- Follow Fed, CPI and geopolitical headlines",
            "- Do not commit more than 5% of the account to a single trade",
        ])


def _confidence_label(confidence: int) -> str:
    if confidence >= 75:
        return "high"
    if confidence >= 60:
        return "medium"
    return "low"
