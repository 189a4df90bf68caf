"""Gold signal engine configuration.

Loads .env variables into a typed config object. Every API key is optional:
a missing key disables the matching collector instead of failing startup.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    twelvedata_api_key: str
    news_api_key: str
    gnews_api_key: str
    huggingface_api_key: str
    fred_api_key: str
    gold_symbol: str
    price_interval: str
    candle_count: int
    news_window_hours: int
    macro_window_days: int
    min_sentiment_confidence: float
    http_timeout: float
    log_level: str

    @property
    def has_news_source(self) -> bool:
        return bool(self.news_api_key or self.gnews_api_key)


def _get_number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(
            f"Environment variable {name} must be numeric, got {raw!r}"
        ) from exc


def _get_key(name: str) -> str:
    # "demo" placeholders are treated as unset
    value = os.environ.get(name, "").strip()
    return "" if value == "demo" else value


def load_config(env_path: Optional[str] = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` naming the variable when a numeric setting
    cannot be parsed.
    """
    load_dotenv(dotenv_path=env_path)

    return Config(
        twelvedata_api_key=_get_key("TWELVEDATA_API_KEY"),
        news_api_key=_get_key("NEWS_API_KEY"),
        gnews_api_key=_get_key("GNEWS_API_KEY"),
        huggingface_api_key=_get_key("HUGGINGFACE_API_KEY"),
        fred_api_key=_get_key("FRED_API_KEY"),
        gold_symbol=os.environ.get("GOLD_SYMBOL", "XAU/USD"),
        price_interval=os.environ.get("PRICE_INTERVAL", "4h"),
        candle_count=_get_number("CANDLE_COUNT", "250", int),
        news_window_hours=_get_number("NEWS_WINDOW_HOURS", "24", int),
        macro_window_days=_get_number("MACRO_WINDOW_DAYS", "7", int),
        min_sentiment_confidence=_get_number("MIN_SENTIMENT_CONFIDENCE", "60", float),
        http_timeout=_get_number("HTTP_TIMEOUT", "10", float),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
