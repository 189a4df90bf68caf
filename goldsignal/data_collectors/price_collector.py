"""Gold OHLC price collector.

Twelve Data's ``time_series`` endpoint is used when an API key is
configured; otherwise hourly ``GC=F`` futures bars from yfinance are
resampled to the requested interval. Either way the result is ascending
by time. There is no synthetic fallback: failures raise
``ExternalFetchError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import pandas as pd
import requests
import yfinance as yf

from ..errors import ExternalFetchError, ValidationError
from ..models import OhlcCandle

logger = logging.getLogger(__name__)

TWELVEDATA_URL = "https://api.twelvedata.com/time_series"

YFINANCE_TICKER = "GC=F"

# Hourly history is the finest yfinance granularity that reaches back far
# enough for 250 four-hour bars
_YF_BASE_INTERVAL = "1h"
_YF_PERIOD = "180d"

# Requested interval -> pandas resample rule (None keeps hourly bars)
_RESAMPLE_RULES: dict[str, Optional[str]] = {
    "1h": None,
    "2h": "2h",
    "4h": "4h",
    "1day": "1D",
}

_OHLC_AGG = {
    "Open": "first",
    "High": "max",
    "Low": "min",
    "Close": "last",
    "Volume": "sum",
}


def data_source_for(api_key: str) -> str:
    """Name of the adapter ``fetch_ohlc`` will use for this key."""
    return "twelvedata" if api_key else "yfinance"


def fetch_ohlc(
    symbol: str = "XAU/USD",
    interval: str = "4h",
    count: int = 250,
    api_key: str = "",
    timeout: float = 10.0,
) -> list[OhlcCandle]:
    """Return up to ``count`` candles for ``symbol``, oldest first."""
    if count <= 0:
        raise ValidationError(f"count must be positive, got {count}")
    if api_key:
        candles = _fetch_twelvedata(symbol, interval, count, api_key, timeout)
    else:
        candles = _fetch_yfinance(interval, count)
    if not candles:
        raise ExternalFetchError(f"No price data returned for {symbol} ({interval})")
    logger.info(
        "Fetched %d %s candles from %s, latest close %.2f",
        len(candles), interval, data_source_for(api_key), candles[-1].close,
    )
    return candles


# ---------------------------------------------------------------------------
# Twelve Data
# ---------------------------------------------------------------------------

def _fetch_twelvedata(
    symbol: str, interval: str, count: int, api_key: str, timeout: float,
) -> list[OhlcCandle]:
    params = {
        "symbol": symbol,
        "interval": interval,
        "outputsize": count,
        "timezone": "UTC",
        "format": "JSON",
        "apikey": api_key,
    }
    try:
        resp = requests.get(TWELVEDATA_URL, params=params, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise ExternalFetchError(f"Twelve Data request failed: {exc}") from exc

    # Errors come back as HTTP 200 with a code/message body
    if payload.get("code") or payload.get("status") == "error":
        raise ExternalFetchError(
            f"Twelve Data error {payload.get('code')}: {payload.get('message', 'unknown')}"
        )
    return parse_twelvedata_values(payload.get("values") or [])


def parse_twelvedata_values(values: list[dict]) -> list[OhlcCandle]:
    """Convert newest-first Twelve Data rows into ascending candles."""
    candles = []
    for row in values:
        try:
            timestamp = datetime.fromisoformat(row["datetime"]).replace(tzinfo=timezone.utc)
            candle = OhlcCandle(
                timestamp=timestamp,
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                volume=float(row.get("volume") or 0),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalFetchError(f"Malformed Twelve Data row {row!r}") from exc
        candles.append(candle)
    candles.reverse()
    return candles


# ---------------------------------------------------------------------------
# yfinance
# ---------------------------------------------------------------------------

def _fetch_yfinance(interval: str, count: int) -> list[OhlcCandle]:
    if interval not in _RESAMPLE_RULES:
        raise ValidationError(
            f"Unsupported interval {interval!r} for yfinance; use one of {sorted(_RESAMPLE_RULES)}"
        )
    try:
        hist = yf.Ticker(YFINANCE_TICKER).history(
            period=_YF_PERIOD, interval=_YF_BASE_INTERVAL,
        )
    except Exception as exc:
        raise ExternalFetchError(f"yfinance download failed for {YFINANCE_TICKER}: {exc}") from exc

    if hist is None or hist.empty:
        raise ExternalFetchError(f"yfinance returned no history for {YFINANCE_TICKER}")

    bars = resample_ohlc(hist, _RESAMPLE_RULES[interval])
    return frame_to_candles(bars.tail(count))


def resample_ohlc(hist: pd.DataFrame, rule: Optional[str]) -> pd.DataFrame:
    """Aggregate hourly bars to ``rule``; empty buckets (weekends) are dropped."""
    frame = hist[list(_OHLC_AGG)]
    if rule is None:
        return frame.dropna(subset=["Open", "High", "Low", "Close"])
    return frame.resample(rule).agg(_OHLC_AGG).dropna(subset=["Open", "High", "Low", "Close"])


def frame_to_candles(frame: pd.DataFrame) -> list[OhlcCandle]:
    """Convert an OHLCV frame to candles, skipping bars with an inconsistent range."""
    candles = []
    for ts, row in frame.iterrows():
        timestamp = pd.Timestamp(ts)
        if timestamp.tzinfo is None:
            timestamp = timestamp.tz_localize("UTC")
        try:
            candles.append(OhlcCandle(
                timestamp=timestamp.tz_convert("UTC").to_pydatetime(),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=float(row.get("Volume", 0) or 0),
            ))
        except ValidationError as exc:
            logger.warning("Skipping bar: %s", exc)
    return candles
