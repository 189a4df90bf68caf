"""FRED economic data collector.

Turns the latest two observations of each tracked series into an
``EconomicObservation``. Individual series failures are logged and
skipped so partial data is still returned.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

import pandas as pd
from fredapi import Fred

from ..errors import ExternalFetchError
from ..models import EconomicObservation
from ..signals.macro_signal import FRED_INDICATORS

logger = logging.getLogger(__name__)


def make_client(api_key: str) -> Fred:
    if not api_key:
        raise ExternalFetchError("FRED_API_KEY is not set")
    return Fred(api_key=api_key)


def parse_observations(series: pd.Series, limit: int = 5) -> list[tuple[datetime, float]]:
    """Most-recent-first ``(date, value)`` pairs; "." / NaN / non-numeric values dropped."""
    values = pd.to_numeric(series, errors="coerce").dropna()
    values = values.sort_index(ascending=False).head(limit)
    result = []
    for ts, value in values.items():
        stamp = pd.Timestamp(ts)
        if stamp.tzinfo is None:
            stamp = stamp.tz_localize("UTC")
        result.append((stamp.to_pydatetime(), float(value)))
    return result


def fetch_series(fred: Fred, series_id: str, limit: int = 5) -> list[tuple[datetime, float]]:
    """Fetch ``series_id`` and return up to ``limit`` valid observations, newest first."""
    try:
        series = fred.get_series(series_id)
    except Exception as exc:
        raise ExternalFetchError(f"FRED request failed for {series_id}: {exc}") from exc
    if series is None or len(series) == 0:
        return []
    observations = parse_observations(series, limit)
    logger.debug("FRED %s: %d valid observations", series_id, len(observations))
    return observations


def collect_observations(
    fred: Optional[Fred] = None,
    api_key: str = "",
    series_ids: Optional[Iterable[str]] = None,
) -> list[EconomicObservation]:
    """Latest release of each tracked series with the prior value for comparison."""
    fred = fred or make_client(api_key)
    observations = []
    for series_id in series_ids or FRED_INDICATORS:
        indicator = FRED_INDICATORS.get(series_id)
        try:
            points = fetch_series(fred, series_id, limit=2)
        except ExternalFetchError:
            logger.warning("Failed to fetch %s from FRED", series_id, exc_info=True)
            continue
        if not points:
            logger.info("No valid observations for %s", series_id)
            continue

        release_date, current = points[0]
        previous = points[1][1] if len(points) > 1 else None
        observations.append(EconomicObservation(
            series_id=series_id,
            current_value=current,
            previous_value=previous,
            importance=indicator.importance if indicator else "medium",
            release_date=release_date,
            name=indicator.name if indicator else series_id,
        ))
    logger.info("Collected %d FRED observations", len(observations))
    return observations
