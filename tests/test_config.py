"""Tests for goldsignal.config: environment variable loading and validation."""

import os

import pytest

from goldsignal.config import load_config

_VARS = [
    "TWELVEDATA_API_KEY",
    "NEWS_API_KEY",
    "GNEWS_API_KEY",
    "HUGGINGFACE_API_KEY",
    "FRED_API_KEY",
    "GOLD_SYMBOL",
    "PRICE_INTERVAL",
    "CANDLE_COUNT",
    "NEWS_WINDOW_HOURS",
    "MACRO_WINDOW_DAYS",
    "MIN_SENTIMENT_CONFIDENCE",
    "HTTP_TIMEOUT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure engine env vars are cleared between tests."""
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)
    yield
    # load_dotenv writes os.environ directly, outside monkeypatch's bookkeeping
    for var in _VARS:
        os.environ.pop(var, None)


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_config()
        assert cfg.gold_symbol == "XAU/USD"
        assert cfg.price_interval == "4h"
        assert cfg.candle_count == 250
        assert cfg.news_window_hours == 24
        assert cfg.macro_window_days == 7
        assert cfg.min_sentiment_confidence == 60.0
        assert cfg.http_timeout == 10.0
        assert cfg.log_level == "INFO"

    def test_keys_are_optional(self):
        cfg = load_config()
        assert cfg.twelvedata_api_key == ""
        assert cfg.fred_api_key == ""
        assert not cfg.has_news_source

    def test_reads_keys(self, monkeypatch):
        monkeypatch.setenv("NEWS_API_KEY", "news-123")
        monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf-abc")
        cfg = load_config()
        assert cfg.news_api_key == "news-123"
        assert cfg.huggingface_api_key == "hf-abc"
        assert cfg.has_news_source

    def test_demo_placeholder_is_unset(self, monkeypatch):
        monkeypatch.setenv("TWELVEDATA_API_KEY", "demo")
        assert load_config().twelvedata_api_key == ""

    def test_numeric_overrides(self, monkeypatch):
        monkeypatch.setenv("CANDLE_COUNT", "120")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        cfg = load_config()
        assert cfg.candle_count == 120
        assert cfg.http_timeout == 2.5

    def test_bad_number_names_variable(self, monkeypatch):
        monkeypatch.setenv("CANDLE_COUNT", "many")
        with pytest.raises(ValueError, match="CANDLE_COUNT"):
            load_config()

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("GOLD_SYMBOL=XAU/EUR\nNEWS_WINDOW_HOURS=12\n")
        cfg = load_config(str(env_file))
        assert cfg.gold_symbol == "XAU/EUR"
        assert cfg.news_window_hours == 12

    def test_config_is_frozen(self):
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.gold_symbol = "XAG/USD"
