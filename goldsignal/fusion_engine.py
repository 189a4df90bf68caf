"""Signal fusion engine.

Combines the technical, news and macro scores with fixed weights into one
overall score, derives BUY/SELL/HOLD with confidence and price levels, and
attaches the rendered rationale. Stateless; one call per cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .errors import ValidationError
from .models import Signal
from .report_generator import ReportGenerator
from .signals import aggregate_macro, aggregate_news
from .signals.signal_types import ScoredSource, check_score

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: dict[str, float] = {
    "technical": 0.40,
    "news": 0.35,
    "macro": 0.25,
}

MAX_CONFIDENCE = 85

# Fractions of the signal price
ENTRY_BAND_PCT = 0.003
STOP_LOSS_PCT = 0.015
TAKE_PROFIT_PCT = 0.025


@dataclass(frozen=True)
class Thresholds:
    """Overall-score bounds for BUY (>= buy) and SELL (<= sell)."""

    buy: int = 65
    sell: int = 35


@dataclass(frozen=True)
class TradeLevels:
    entry_zone: list = field(default_factory=list)
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    risk_reward_ratio: Optional[float] = None


class SignalFusionEngine:
    """Fuse three 0-100 gold-impact scores into a trading signal."""

    def __init__(
        self,
        weights: Optional[dict[str, float]] = None,
        thresholds: Thresholds = Thresholds(),
        timeframe: str = "4H",
        report_generator: Optional[ReportGenerator] = None,
    ) -> None:
        self.weights = dict(weights or DEFAULT_WEIGHTS)
        if set(self.weights) != set(DEFAULT_WEIGHTS):
            raise ValidationError(f"weights must cover exactly {sorted(DEFAULT_WEIGHTS)}")
        if abs(sum(self.weights.values()) - 1.0) > 1e-9:
            raise ValidationError(f"weights must sum to 1.0, got {sum(self.weights.values())}")
        self.thresholds = thresholds
        self.timeframe = timeframe
        self.report_generator = report_generator or ReportGenerator(thresholds)

    def overall_score(self, technical: float, news: float, macro: float) -> int:
        """Weighted sum rounded half-up.

        Summed in Decimal so sums such as 71.5 are exact before rounding.
        """
        scores = {"technical": technical, "news": news, "macro": macro}
        total = sum(
            Decimal(str(scores[name])) * Decimal(str(weight))
            for name, weight in self.weights.items()
        )
        return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def decide(self, overall: int) -> tuple[str, int]:
        """Map the overall score to an action and its confidence."""
        if overall >= self.thresholds.buy:
            return "BUY", min(MAX_CONFIDENCE, overall)
        if overall <= self.thresholds.sell:
            return "SELL", min(MAX_CONFIDENCE, 100 - overall)
        # The closer to 50, the more confident the HOLD
        return "HOLD", 100 - abs(overall - 50) * 2

    def trade_levels(self, action: str, price: float) -> TradeLevels:
        """Entry band, stop and target rounded to cents; R:R uses the rounded levels."""
        if action == "HOLD":
            return TradeLevels()

        entry_zone = [
            round(price * (1 - ENTRY_BAND_PCT), 2),
            round(price * (1 + ENTRY_BAND_PCT), 2),
        ]
        if action == "BUY":
            stop_loss = round(price * (1 - STOP_LOSS_PCT), 2)
            take_profit = round(price * (1 + TAKE_PROFIT_PCT), 2)
        else:
            stop_loss = round(price * (1 + STOP_LOSS_PCT), 2)
            take_profit = round(price * (1 - TAKE_PROFIT_PCT), 2)

        if not min(stop_loss, take_profit) < price < max(stop_loss, take_profit):
            raise ValidationError(
                f"price {price} too small for cent-rounded stop and target levels"
            )

        risk = abs(stop_loss - price)
        reward = abs(take_profit - price)
        risk_reward = round(reward / risk, 2)
        return TradeLevels(entry_zone, stop_loss, take_profit, risk_reward)

    def fuse(
        self,
        technical: ScoredSource,
        news: Optional[ScoredSource],
        macro: Optional[ScoredSource],
        price: float,
    ) -> Signal:
        """Produce the Signal for this cycle.

        Missing news or macro inputs count as neutral 50 so the fixed
        weighting stays intact.
        """
        if price <= 0:
            raise ValidationError(f"price must be positive, got {price}")
        for source in (technical, news, macro):
            if source is not None:
                check_score(source.name, source.score)
        news = news if news is not None else aggregate_news([])
        macro = macro if macro is not None else aggregate_macro([])

        overall = self.overall_score(technical.score, news.score, macro.score)
        action, confidence = self.decide(overall)
        levels = self.trade_levels(action, price)

        summary = self.report_generator.generate(
            action=action,
            confidence=confidence,
            overall=overall,
            price=price,
            technical=technical,
            news=news,
            macro=macro,
            levels=levels,
        )

        logger.info(
            "Fused signal: %s (%d%%) overall=%d [tech=%s news=%s macro=%s]",
            action, confidence, overall, technical.score, news.score, macro.score,
        )

        return Signal(
            timeframe=self.timeframe,
            action=action,
            confidence=confidence,
            price_at_signal=price,
            technical_score=technical.score,
            news_score=news.score,
            macro_score=macro.score,
            overall_score=overall,
            entry_zone=levels.entry_zone,
            stop_loss=levels.stop_loss,
            take_profit=levels.take_profit,
            risk_reward_ratio=levels.risk_reward_ratio,
            reasoning=technical.reasoning + news.reasoning + macro.reasoning,
            signals=technical.signals + news.signals + macro.signals,
            summary=summary,
        )
