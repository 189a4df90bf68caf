"""Technical indicators: RSI, EMA, MACD, pivots, volatility, market strength.

Pure functions over close/candle sequences, no I/O. Every period-based
indicator raises ``InsufficientDataError`` when handed fewer values than
its period needs.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .errors import InsufficientDataError
from .models import IndicatorSnapshot, MacdResult, OhlcCandle

logger = logging.getLogger(__name__)

# Minimum history for a usable technical cycle, and for the EMA200 trend rule
MIN_CANDLES = 50
LONG_TREND_CANDLES = 200

# Candles fed to the pivot calculation
_SR_LOOKBACK = 50


def _require(values: Sequence, needed: int, label: str) -> None:
    if len(values) < needed:
        raise InsufficientDataError(
            f"Need at least {needed} values for {label}, got {len(values)}"
        )


# ---------------------------------------------------------------------------
# RSI (Wilder smoothing)
# ---------------------------------------------------------------------------

def calculate_rsi(closes: Sequence[float], period: int = 14) -> float:
    """Return the latest Wilder RSI, rounded to 2 decimals.

    The first average gain/loss is the simple mean of the first *period*
    deltas; later deltas are folded in with
    ``avg = (avg * (period - 1) + current) / period``. Returns 100.0 when
    the smoothed average loss is exactly zero.
    """
    _require(closes, period + 1, f"RSI({period})")

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return round(100.0 - 100.0 / (1.0 + rs), 2)


# ---------------------------------------------------------------------------
# EMA
# ---------------------------------------------------------------------------

def ema_series(values: Sequence[float], period: int) -> list[Optional[float]]:
    """Return the EMA series aligned with *values*.

    Seeded with the SMA of the first *period* values; entries before the
    seed are ``None``. Uses ``k = 2 / (period + 1)``.
    """
    _require(values, period, f"EMA({period})")

    k = 2.0 / (period + 1)
    series: list[Optional[float]] = [None] * len(values)
    ema = sum(values[:period]) / period
    series[period - 1] = ema
    for i in range(period, len(values)):
        ema += (values[i] - ema) * k
        series[i] = ema
    return series


def calculate_ema(closes: Sequence[float], period: int) -> float:
    """Return the latest EMA value."""
    return ema_series(closes, period)[-1]


# ---------------------------------------------------------------------------
# MACD
# ---------------------------------------------------------------------------

def _classify_macd_bar(
    prev: Optional[tuple[float, float]], macd: float, signal: float
) -> str:
    histogram = macd - signal
    if prev is not None:
        prev_macd, prev_signal = prev
        if prev_macd <= prev_signal and macd > signal:
            return "bullish_cross"
        if prev_macd >= prev_signal and macd < signal:
            return "bearish_cross"
    if macd > signal and histogram > 0:
        return "bullish"
    if macd < signal and histogram < 0:
        return "bearish"
    return "neutral"


def macd_trend_series(
    macd_line: Sequence[float], signal_line: Sequence[float]
) -> list[str]:
    """Classify every bar of aligned MACD/signal series.

    A single pass carrying the previous bar's (macd, signal) pair, so a
    cross is reported only on the bar where the relative position flips.
    """
    trends: list[str] = []
    prev: Optional[tuple[float, float]] = None
    for macd, signal in zip(macd_line, signal_line):
        trends.append(_classify_macd_bar(prev, macd, signal))
        prev = (macd, signal)
    return trends


def calculate_macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdResult:
    """Return the latest MACD, signal and histogram with the bar's trend.

    Requires ``slow + signal`` closes so that at least two signal-line
    values exist for cross detection.
    """
    if fast >= slow:
        raise ValueError(f"fast period ({fast}) must be shorter than slow period ({slow})")
    _require(closes, slow + signal, f"MACD({fast},{slow},{signal})")

    fast_ema = ema_series(closes, fast)
    slow_ema = ema_series(closes, slow)
    macd_line = [fast_ema[i] - slow_ema[i] for i in range(slow - 1, len(closes))]
    signal_line = ema_series(macd_line, signal)

    macd_tail = macd_line[signal - 1:]
    signal_tail = signal_line[signal - 1:]
    trend = macd_trend_series(macd_tail[-2:], signal_tail[-2:])[-1]

    macd = macd_tail[-1]
    sig = signal_tail[-1]
    return MacdResult(
        macd=round(macd, 3),
        signal=round(sig, 3),
        histogram=round(macd - sig, 3),
        trend=trend,
    )


# ---------------------------------------------------------------------------
# Trend, levels, volatility, strength
# ---------------------------------------------------------------------------

def determine_trend_by_strategy(
    price: float,
    ema20: float,
    ema50: float,
    ema200: Optional[float] = None,
) -> str:
    """Classify the trend from price and EMAs.

    With EMA200 available: uptrend needs ema50 > ema200 and price above
    both ema50 and ema20 (downtrend mirrors it). Without EMA200 the rule
    falls back to the EMA20/EMA50 stack: price > ema20 > ema50 or the
    reverse.
    """
    if ema200 is not None:
        if ema50 > ema200 and price > ema50 and price > ema20:
            return "uptrend"
        if ema50 < ema200 and price < ema50 and price < ema20:
            return "downtrend"
        return "sideways"

    if price > ema20 > ema50:
        return "uptrend"
    if price < ema20 < ema50:
        return "downtrend"
    return "sideways"


def calculate_support_resistance(
    candles: Sequence[OhlcCandle], period: int = 20
) -> dict:
    """Classic floor-trader pivots over the last *period* candles.

    Returns ``{"support": [s1, s2], "resistance": [r1, r2]}`` with support
    sorted descending and resistance ascending.
    """
    _require(candles, period, f"support/resistance({period})")

    recent = candles[-period:]
    recent_high = max(c.high for c in recent)
    recent_low = min(c.low for c in recent)
    current_close = recent[-1].close

    pivot = (recent_high + recent_low + current_close) / 3
    price_range = recent_high - recent_low

    resistance = [2 * pivot - recent_low, pivot + price_range]
    support = [2 * pivot - recent_high, pivot - price_range]

    return {
        "support": sorted((round(s, 2) for s in support), reverse=True),
        "resistance": sorted(round(r, 2) for r in resistance),
    }


def calculate_volatility(closes: Sequence[float], period: int = 20) -> float:
    """Standard deviation of simple returns over the last *period* closes, in percent."""
    _require(closes, max(period, 2), f"volatility({period})")

    window = np.asarray(closes[-period:], dtype=float)
    returns = np.diff(window) / window[:-1]
    return round(float(np.std(returns)) * 100.0, 2)


def calculate_market_strength(rsi: float, macd: MacdResult, trend: str) -> int:
    """Heuristic 0-100 market strength from RSI, MACD and trend."""
    strength = 50

    if rsi > 70:
        strength += 5
    elif rsi > 60:
        strength += 15
    elif rsi > 50:
        strength += 10
    elif rsi < 30:
        strength -= 15
    elif rsi < 40:
        strength -= 10
    else:
        strength -= 5

    if macd.trend == "bullish_cross":
        strength += 20
    elif macd.trend == "bearish_cross":
        strength -= 20
    elif macd.trend == "bullish":
        strength += 10
    elif macd.trend == "bearish":
        strength -= 10

    if trend == "uptrend":
        strength += 15
    elif trend == "downtrend":
        strength -= 15

    if abs(macd.histogram) > 0.5:
        strength += 5 if macd.histogram > 0 else -5

    return max(0, min(100, strength))


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

def build_snapshot(
    candles: Sequence[OhlcCandle], data_source: str = ""
) -> IndicatorSnapshot:
    """Compute every indicator from a candle window and return a snapshot.

    Candles are sorted ascending first. EMA200 is only computed with at
    least 200 candles; below that the trend uses the EMA20/EMA50 rule.
    """
    _require(candles, MIN_CANDLES, "a technical analysis cycle")

    ordered = sorted(candles, key=lambda c: c.timestamp)
    closes = [c.close for c in ordered]
    latest = ordered[-1]

    rsi = calculate_rsi(closes, 14)
    macd = calculate_macd(closes, 12, 26, 9)
    ema20 = calculate_ema(closes, 20)
    ema50 = calculate_ema(closes, 50)
    ema200: Optional[float] = None
    if len(closes) >= LONG_TREND_CANDLES:
        ema200 = calculate_ema(closes, 200)
    else:
        logger.debug(
            "Only %d candles, EMA200 skipped; using EMA20/50 trend rule",
            len(closes),
        )

    trend = determine_trend_by_strategy(latest.close, ema20, ema50, ema200)
    strength = calculate_market_strength(rsi, macd, trend)

    snapshot = IndicatorSnapshot(
        timestamp=latest.timestamp,
        price=latest,
        rsi=rsi,
        macd=macd,
        ema20=round(ema20, 2),
        ema50=round(ema50, 2),
        ema200=round(ema200, 2) if ema200 is not None else None,
        trend=trend,
        support_resistance=calculate_support_resistance(ordered[-_SR_LOOKBACK:], 20),
        volatility=calculate_volatility(closes, 20),
        strength=strength,
        candle_count=len(ordered),
        data_source=data_source,
    )
    logger.info(
        "Technical snapshot: close=%.2f trend=%s RSI=%.1f strength=%d",
        latest.close, trend, rsi, strength,
    )
    return snapshot
