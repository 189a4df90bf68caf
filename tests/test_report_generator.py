"""Tests for the rationale renderer (goldsignal.report_generator)."""

import pytest

from goldsignal.fusion_engine import SignalFusionEngine, Thresholds
from goldsignal.report_generator import ReportGenerator
from goldsignal.signals import ScoredSource, aggregate_macro, aggregate_news


def _technical(score: float = 50, **details) -> ScoredSource:
    base = {
        "rsi": 50.0,
        "macd": "neutral",
        "trend": "sideways",
        "strength": 50,
        "close": 2012.0,
        "high": 2015.0,
        "low": 2005.0,
    }
    base.update(details)
    return ScoredSource(name="technical", score=score, details=base)


def _news(score: float, positive: int = 0, negative: int = 0, neutral: int = 0) -> ScoredSource:
    return ScoredSource(
        name="news",
        score=score,
        signals=["News sentiment bullish for gold"],
        details={
            "count": positive + negative + neutral,
            "positive": positive,
            "negative": negative,
            "neutral": neutral,
        },
    )


def _macro(score: float, positive: int = 0, negative: int = 0) -> ScoredSource:
    return ScoredSource(
        name="macro",
        score=score,
        details={
            "count": positive + negative,
            "positive": positive,
            "negative": negative,
            "neutral": 0,
            "releases": ["Unemployment rose 0.40 -> gold up"],
        },
    )


@pytest.fixture
def engine():
    return SignalFusionEngine()


def _render(engine, action, technical, news, macro, price=2000.0):
    overall = engine.overall_score(technical.score, news.score, macro.score)
    confidence = engine.decide(overall)[1]
    return ReportGenerator(Thresholds()).generate(
        action=action,
        confidence=confidence,
        overall=overall,
        price=price,
        technical=technical,
        news=news,
        macro=macro,
        levels=engine.trade_levels(action, price),
    )


class TestLayout:
    def test_sections_in_order(self, engine):
        text = _render(engine, "HOLD", _technical(), aggregate_news([]), aggregate_macro([]))
        sections = text.split("\n\n")
        assert [s.splitlines()[0] for s in sections] == [
            "## Technical Analysis",
            "## News Analysis (24h)",
            "## Macro Analysis (7 days)",
            "## Recommendation",
            "## Risk Notice",
        ]

    def test_deterministic(self, engine):
        args = (engine, "BUY", _technical(80), _news(70, positive=2), _macro(60, positive=1))
        assert _render(*args) == _render(*args)


class TestTechnicalSection:
    def test_price_and_bands(self, engine):
        text = _render(
            engine, "HOLD",
            _technical(70, rsi=68.2, macd="bullish_cross", trend="uptrend", strength=75),
            aggregate_news([]), aggregate_macro([]),
        )
        assert "- Price: $2012.00 (H: $2015.00 | L: $2005.00)" in text
        assert "RSI 68.2: overbought zone" in text
        assert "golden cross" in text
        assert "- Trend: UP" in text
        assert "75/100 (very strong)" in text
        assert "> Technical score: 70/100" in text


class TestNewsAndMacroSections:
    def test_no_data_variants(self, engine):
        text = _render(engine, "HOLD", _technical(), aggregate_news([]), aggregate_macro([]))
        assert "No notable news in the last 24 hours" in text
        assert "No new economic data in the last 7 days" in text

    def test_news_degree(self, engine):
        text = _render(engine, "HOLD", _technical(), _news(70, positive=4, negative=2), _macro(50))
        assert "6 articles: 4 positive, 2 negative, 0 neutral" in text
        assert "very positive" in text
        assert "Key factor: News sentiment bullish for gold" in text

    def test_macro_impact_uses_thresholds(self, engine):
        text = _render(engine, "HOLD", _technical(), _news(50), _macro(66, positive=1))
        assert "Environment: SUPPORTIVE" in text
        assert "supportive for the gold price" in text
        assert "Unemployment rose 0.40 -> gold up" in text


class TestRecommendation:
    def test_buy_both_factors(self, engine):
        text = _render(engine, "BUY", _technical(80), _news(70, positive=2), _macro(60))
        assert "**BUY GOLD**" in text
        assert "both technical and news support" in text
        assert "Confidence: 72% (medium)" in text
        assert "Entry zone: $1994.00 - $2006.00" in text
        assert "Stop loss: $1970.00 | Take profit: $2050.00" in text
        assert "Risk/reward: 1:1.67" in text

    def test_buy_technical_only(self, engine):
        text = _render(engine, "BUY", _technical(90), _news(60, positive=1), _macro(60))
        assert "strong technical signal" in text

    def test_buy_macro_only(self, engine):
        text = _render(engine, "BUY", _technical(60), _news(60, positive=1), _macro(90, positive=1))
        assert "supportive macro environment" in text

    def test_sell_both_factors(self, engine):
        text = _render(engine, "SELL", _technical(20), _news(30, negative=2), _macro(40))
        assert "**SELL GOLD**" in text
        assert "both technical and news argue against gold" in text

    def test_hold_neutral(self, engine):
        text = _render(engine, "HOLD", _technical(55), _news(45, negative=1), _macro(50))
        assert "**HOLD / WAIT**" in text
        assert "all factors are neutral" in text
        assert "Entry zone" not in text

    def test_hold_conflicting(self, engine):
        text = _render(engine, "HOLD", _technical(80), _news(20, negative=3), _macro(50))
        assert "factors conflict" in text
