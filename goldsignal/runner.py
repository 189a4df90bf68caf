"""Runner entry point for the gold signal engine.

Usage:
    python -m goldsignal.runner
    python -m goldsignal.runner --skip-news --skip-macro -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import Config, load_config
from .data_collectors import fred_collector, news_collector, price_collector
from .errors import GoldSignalError
from .fusion_engine import SignalFusionEngine
from .indicators import build_snapshot
from .models import IMPORTANCE_LEVELS, IndicatorSnapshot
from .sentiment import SentimentAnalyzer
from .signals import (
    ScoredSource,
    aggregate_macro,
    aggregate_news,
    analyze_article,
    extract_technical,
    map_macro_impact,
)

logger = logging.getLogger(__name__)

MAX_NEWS_ITEMS = 10
MAX_MACRO_ITEMS = 5


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _failure(error: str) -> dict:
    return {"success": False, "error": error, "timestamp": _now()}


# ---------------------------------------------------------------------------
# Per-source updates
# ---------------------------------------------------------------------------

def update_technical(config: Config) -> dict:
    """Fetch candles and compute the indicator snapshot and technical score."""
    try:
        candles = price_collector.fetch_ohlc(
            symbol=config.gold_symbol,
            interval=config.price_interval,
            count=config.candle_count,
            api_key=config.twelvedata_api_key,
            timeout=config.http_timeout,
        )
        snapshot = build_snapshot(
            candles, data_source=price_collector.data_source_for(config.twelvedata_api_key),
        )
    except GoldSignalError as exc:
        logger.error("Technical update failed: %s", exc)
        return _failure(str(exc))

    technical = extract_technical(snapshot)
    return {
        "success": True,
        "snapshot": snapshot,
        "technical": technical,
        "timestamp": _now(),
    }


def update_news(
    config: Config,
    analyzer: Optional[SentimentAnalyzer] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Fetch the news window, classify each article and aggregate the news score."""
    now = now or _now()
    analyzer = analyzer or SentimentAnalyzer.from_api_key(
        config.huggingface_api_key, config.http_timeout,
    )
    try:
        items = news_collector.fetch_recent_articles(
            window_hours=config.news_window_hours,
            news_api_key=config.news_api_key,
            gnews_api_key=config.gnews_api_key,
            timeout=config.http_timeout,
            limit=MAX_NEWS_ITEMS,
            now=now,
        )
    except GoldSignalError as exc:
        logger.error("News update failed: %s", exc)
        return _failure(str(exc))

    since = now - timedelta(hours=config.news_window_hours)
    analyses = []
    for item in items:
        if item.published_at < since:
            continue
        analysis = analyze_article(item, analyzer, config.min_sentiment_confidence)
        if analysis is not None:
            analyses.append(analysis)

    analyses.sort(key=lambda a: (a.item.published_at, a.confidence), reverse=True)
    analyses = analyses[:MAX_NEWS_ITEMS]
    logger.info("Analyzed %d of %d articles", len(analyses), len(items))
    return {
        "success": True,
        "analyses": analyses,
        "news": aggregate_news(analyses),
        "timestamp": now,
    }


def update_macro(config: Config, fred=None, now: Optional[datetime] = None) -> dict:
    """Collect FRED releases inside the macro window and aggregate the macro score."""
    now = now or _now()
    try:
        observations = fred_collector.collect_observations(fred=fred, api_key=config.fred_api_key)
    except GoldSignalError as exc:
        logger.error("Macro update failed: %s", exc)
        return _failure(str(exc))

    since = now - timedelta(days=config.macro_window_days)
    recent = [
        obs for obs in observations
        if obs.release_date is not None and obs.release_date >= since
    ]
    recent.sort(
        key=lambda obs: (obs.release_date, IMPORTANCE_LEVELS.index(obs.importance)),
        reverse=True,
    )
    analyses = [map_macro_impact(obs) for obs in recent[:MAX_MACRO_ITEMS]]
    logger.info(
        "%d of %d economic releases fall inside the last %d days",
        len(recent), len(observations), config.macro_window_days,
    )
    return {
        "success": True,
        "analyses": analyses,
        "macro": aggregate_macro(analyses),
        "timestamp": now,
    }


# ---------------------------------------------------------------------------
# Fusion
# ---------------------------------------------------------------------------

def generate_signal(
    snapshot: Optional[IndicatorSnapshot],
    technical: Optional[ScoredSource] = None,
    news: Optional[ScoredSource] = None,
    macro: Optional[ScoredSource] = None,
    engine: Optional[SignalFusionEngine] = None,
) -> dict:
    """Fuse the latest scores; news and macro fall back to neutral when absent."""
    if snapshot is None:
        return _failure("No technical data available")

    engine = engine or SignalFusionEngine()
    technical = technical or extract_technical(snapshot)
    try:
        signal = engine.fuse(technical, news, macro, snapshot.price.close)
    except GoldSignalError as exc:
        logger.error("Signal generation failed: %s", exc)
        return _failure(str(exc))
    return {"success": True, "signal": signal, "timestamp": signal.created_at}


def analyze(
    config: Optional[Config] = None,
    skip_news: bool = False,
    skip_macro: bool = False,
) -> dict:
    """Full cycle: candles, news and macro -> fused signal."""
    config = config or load_config()

    tech_result = update_technical(config)
    if not tech_result["success"]:
        return _failure("No technical data available")

    news = None
    if not skip_news:
        news_result = update_news(config)
        if news_result["success"]:
            news = news_result["news"]
        else:
            logger.warning("Continuing with neutral news score: %s", news_result["error"])

    macro = None
    if not skip_macro:
        macro_result = update_macro(config)
        if macro_result["success"]:
            macro = macro_result["macro"]
        else:
            logger.warning("Continuing with neutral macro score: %s", macro_result["error"])

    return generate_signal(tech_result["snapshot"], tech_result["technical"], news, macro)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Gold signal engine - technical, news and macro fusion for XAU/USD"
    )
    parser.add_argument(
        "--skip-news",
        action="store_true",
        help="Do not fetch news; the news score stays neutral",
    )
    parser.add_argument(
        "--skip-macro",
        action="store_true",
        help="Do not fetch FRED data; the macro score stays neutral",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    config = load_config()
    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = analyze(config, skip_news=args.skip_news, skip_macro=args.skip_macro)
    if not result["success"]:
        sys.stderr.write(f"Signal generation failed: {result['error']}\n")
        sys.exit(1)

    signal = result["signal"]
    sys.stdout.write(f"{signal.action} XAU/USD @ {signal.price_at_signal:.2f} ({signal.confidence}%)\n\n")
    sys.stdout.write(signal.summary)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
