"""Record types exchanged between the collectors, the scorers and the fusion engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional

from .errors import ValidationError

MacdTrend = Literal["bullish", "bearish", "bullish_cross", "bearish_cross", "neutral"]
Trend = Literal["uptrend", "downtrend", "sideways"]
Impact = Literal["positive", "negative", "neutral"]
Action = Literal["BUY", "SELL", "HOLD"]

IMPORTANCE_LEVELS = ("low", "medium", "high")


# ---------------------------------------------------------------------------
# Price data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OhlcCandle:
    """A single OHLC bar. Rejected on construction if high/low do not bracket the body."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        if self.low > min(self.open, self.close) or self.high < max(self.open, self.close):
            raise ValidationError(
                f"Invalid candle at {self.timestamp}: "
                f"O={self.open} H={self.high} L={self.low} C={self.close}"
            )


@dataclass(frozen=True)
class MacdResult:
    """Latest MACD values with the trend classification of the last bar."""

    macd: float
    signal: float
    histogram: float
    trend: MacdTrend = "neutral"


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator state computed from the latest candle window."""

    timestamp: datetime
    price: OhlcCandle
    rsi: float
    macd: MacdResult
    ema20: float
    ema50: float
    ema200: Optional[float]
    trend: Trend
    support_resistance: dict
    volatility: float
    strength: float
    candle_count: int = 0
    data_source: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# News and macro inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NewsItem:
    """A news article as delivered by a news source."""

    title: str
    content: str
    published_at: datetime
    source: str
    url: str = ""

    @property
    def text(self) -> str:
        return f"{self.title} {self.content}".strip()


@dataclass(frozen=True)
class EconomicObservation:
    """Latest and previous value of one economic series."""

    series_id: str
    current_value: float
    previous_value: Optional[float]
    importance: str = "medium"
    release_date: Optional[datetime] = None
    name: str = ""

    def __post_init__(self) -> None:
        if self.importance not in IMPORTANCE_LEVELS:
            raise ValidationError(
                f"importance must be one of {IMPORTANCE_LEVELS}, got {self.importance!r}"
            )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Signal:
    """The fused trading recommendation emitted once per fusion cycle."""

    timeframe: str
    action: Action
    confidence: float
    price_at_signal: float
    technical_score: float
    news_score: float
    macro_score: float
    overall_score: int
    entry_zone: list = field(default_factory=list)
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    risk_reward_ratio: Optional[float] = None
    reasoning: list = field(default_factory=list)
    signals: list = field(default_factory=list)
    summary: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def __post_init__(self) -> None:
        if self.action not in ("BUY", "SELL", "HOLD"):
            raise ValidationError(f"Unknown action {self.action!r}")
        if not 0 <= self.confidence <= 100:
            raise ValidationError(f"confidence must be within [0, 100], got {self.confidence}")
        has_levels = bool(self.entry_zone) and self.stop_loss is not None and self.take_profit is not None
        if self.action == "HOLD":
            if self.entry_zone or self.stop_loss is not None or self.take_profit is not None:
                raise ValidationError("HOLD signals must not carry entry/stop/target levels")
        elif not has_levels:
            raise ValidationError(f"{self.action} signals require entry zone, stop loss and take profit")

    def to_dict(self) -> dict:
        return asdict(self)
