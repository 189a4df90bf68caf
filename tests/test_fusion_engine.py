"""Tests for goldsignal.fusion_engine: weighted score, decision bands,
trade levels and the fused Signal record.
"""

import pytest

from goldsignal.errors import ValidationError
from goldsignal.fusion_engine import (
    DEFAULT_WEIGHTS,
    SignalFusionEngine,
    Thresholds,
    TradeLevels,
)
from goldsignal.models import Signal
from goldsignal.signals import ScoredSource


def _source(name: str, score: float, reason: str = None) -> ScoredSource:
    return ScoredSource(
        name=name,
        score=score,
        reasoning=[reason or f"{name} reason"],
        signals=[f"{name} signal"],
        details={"count": 1},
    )


@pytest.fixture
def engine():
    return SignalFusionEngine()


# ── Overall score ────────────────────────────────────────────────────────


class TestOverallScore:
    def test_default_weights(self):
        assert DEFAULT_WEIGHTS == {"technical": 0.40, "news": 0.35, "macro": 0.25}

    def test_half_rounds_up(self, engine):
        # 80*0.40 + 70*0.35 + 60*0.25 = 71.5
        assert engine.overall_score(80, 70, 60) == 72

    def test_bearish_combination(self, engine):
        # 20*0.40 + 30*0.35 + 40*0.25 = 28.5
        assert engine.overall_score(20, 30, 40) == 29

    def test_all_neutral(self, engine):
        assert engine.overall_score(50, 50, 50) == 50

    def test_weights_must_cover_all_sources(self):
        with pytest.raises(ValidationError):
            SignalFusionEngine(weights={"technical": 0.5, "news": 0.5})

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            SignalFusionEngine(weights={"technical": 0.5, "news": 0.3, "macro": 0.3})

    def test_custom_weights(self):
        engine = SignalFusionEngine(weights={"technical": 0.5, "news": 0.3, "macro": 0.2})
        assert engine.overall_score(80, 50, 50) == 65

    def test_fractional_percent_weights_are_exact(self):
        engine = SignalFusionEngine(weights={"technical": 0.405, "news": 0.345, "macro": 0.25})
        assert engine.overall_score(100, 100, 100) == 100
        assert engine.overall_score(0, 0, 0) == 0


# ── Decision ─────────────────────────────────────────────────────────────


class TestDecide:
    @pytest.mark.parametrize("overall, expected", [
        (72, ("BUY", 72)),
        (65, ("BUY", 65)),
        (95, ("BUY", 85)),
        (29, ("SELL", 71)),
        (35, ("SELL", 65)),
        (5, ("SELL", 85)),
        (50, ("HOLD", 100)),
        (64, ("HOLD", 72)),
        (36, ("HOLD", 72)),
    ])
    def test_bands(self, engine, overall, expected):
        assert engine.decide(overall) == expected

    def test_custom_thresholds(self):
        engine = SignalFusionEngine(thresholds=Thresholds(buy=60, sell=40))
        assert engine.decide(61)[0] == "BUY"
        assert engine.decide(40)[0] == "SELL"


# ── Trade levels ─────────────────────────────────────────────────────────


class TestTradeLevels:
    def test_buy_levels(self, engine):
        levels = engine.trade_levels("BUY", 2000.0)
        assert levels.entry_zone == [1994.0, 2006.0]
        assert levels.stop_loss == 1970.0
        assert levels.take_profit == 2050.0
        assert levels.risk_reward_ratio == 1.67

    def test_sell_levels(self, engine):
        levels = engine.trade_levels("SELL", 2000.0)
        assert levels.entry_zone == [1994.0, 2006.0]
        assert levels.stop_loss == 2030.0
        assert levels.take_profit == 1950.0
        assert levels.risk_reward_ratio == 1.67

    def test_levels_bracket_price(self, engine):
        price = 2347.81
        buy = engine.trade_levels("BUY", price)
        assert buy.stop_loss < buy.entry_zone[0] < price < buy.entry_zone[1] < buy.take_profit
        sell = engine.trade_levels("SELL", price)
        assert sell.take_profit < sell.entry_zone[0] < price < sell.entry_zone[1] < sell.stop_loss

    def test_hold_has_no_levels(self, engine):
        assert engine.trade_levels("HOLD", 2000.0) == TradeLevels()

    @pytest.mark.parametrize("action", ["BUY", "SELL"])
    def test_price_too_small_for_cent_levels(self, engine, action):
        with pytest.raises(ValidationError):
            engine.trade_levels(action, 0.2)


# ── Fuse ─────────────────────────────────────────────────────────────────


class TestFuse:
    def test_buy_signal(self, engine):
        signal = engine.fuse(
            _source("technical", 80), _source("news", 70), _source("macro", 60), 2000.0,
        )
        assert signal.action == "BUY"
        assert signal.confidence == 72
        assert signal.overall_score == 72
        assert signal.timeframe == "4H"
        assert signal.price_at_signal == 2000.0
        assert (signal.technical_score, signal.news_score, signal.macro_score) == (80, 70, 60)
        assert signal.stop_loss == 1970.0
        assert signal.reasoning == ["technical reason", "news reason", "macro reason"]
        assert signal.signals == ["technical signal", "news signal", "macro signal"]
        assert "## Technical Analysis" in signal.summary
        assert "**BUY GOLD**" in signal.summary

    def test_sell_signal(self, engine):
        signal = engine.fuse(
            _source("technical", 20), _source("news", 30), _source("macro", 40), 2000.0,
        )
        assert signal.action == "SELL"
        assert signal.confidence == 71
        assert signal.take_profit == 1950.0

    def test_hold_signal_has_no_levels(self, engine):
        signal = engine.fuse(
            _source("technical", 50), _source("news", 50), _source("macro", 50), 2000.0,
        )
        assert signal.action == "HOLD"
        assert signal.confidence == 100
        assert signal.entry_zone == []
        assert signal.stop_loss is None
        assert signal.take_profit is None
        assert signal.risk_reward_ratio is None

    def test_missing_news_and_macro_are_neutral(self, engine):
        # 80*0.40 + 50*0.35 + 50*0.25 = 62
        signal = engine.fuse(_source("technical", 80), None, None, 2000.0)
        assert signal.news_score == 50
        assert signal.macro_score == 50
        assert signal.overall_score == 62
        assert signal.action == "HOLD"
        assert "No recent news available" in signal.reasoning

    def test_non_positive_price_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.fuse(_source("technical", 80), None, None, 0.0)

    def test_out_of_range_score_rejected(self, engine):
        technical = _source("technical", 80)
        technical.score = 250
        with pytest.raises(ValidationError, match="technical"):
            engine.fuse(technical, _source("news", 50), _source("macro", 50), 2000.0)

    def test_to_dict(self, engine):
        data = engine.fuse(_source("technical", 80), None, None, 2000.0).to_dict()
        assert data["action"] == "HOLD"
        assert data["overall_score"] == 62


# ── Score range ──────────────────────────────────────────────────────────


class TestScoredSourceRange:
    @pytest.mark.parametrize("score", [-1, 100.5, 250])
    def test_rejects_out_of_range(self, score):
        with pytest.raises(ValidationError):
            ScoredSource(name="news", score=score)

    @pytest.mark.parametrize("score", [0, 50, 100])
    def test_accepts_bounds(self, score):
        assert ScoredSource(name="news", score=score).score == score


# ── Signal record ────────────────────────────────────────────────────────


def _make_signal(**overrides) -> Signal:
    fields = dict(
        timeframe="4H",
        action="BUY",
        confidence=72,
        price_at_signal=2000.0,
        technical_score=80,
        news_score=70,
        macro_score=60,
        overall_score=72,
        entry_zone=[1994.0, 2006.0],
        stop_loss=1970.0,
        take_profit=2050.0,
        risk_reward_ratio=1.67,
    )
    fields.update(overrides)
    return Signal(**fields)


class TestSignalRecord:
    def test_valid_buy(self):
        assert _make_signal().action == "BUY"

    def test_valid_hold_without_levels(self):
        signal = _make_signal(
            action="HOLD", entry_zone=[], stop_loss=None, take_profit=None,
            risk_reward_ratio=None,
        )
        assert signal.stop_loss is None

    @pytest.mark.parametrize("levels", [
        {"entry_zone": [1994.0, 2006.0], "stop_loss": None, "take_profit": None},
        {"entry_zone": [], "stop_loss": 1970.0, "take_profit": None},
        {"entry_zone": [], "stop_loss": None, "take_profit": 2050.0},
    ])
    def test_hold_with_levels_rejected(self, levels):
        with pytest.raises(ValidationError):
            _make_signal(action="HOLD", **levels)

    @pytest.mark.parametrize("action", ["BUY", "SELL"])
    @pytest.mark.parametrize("missing", ["entry_zone", "stop_loss", "take_profit"])
    def test_directional_without_levels_rejected(self, action, missing):
        empty = [] if missing == "entry_zone" else None
        with pytest.raises(ValidationError):
            _make_signal(action=action, **{missing: empty})

    @pytest.mark.parametrize("confidence", [-1, 101])
    def test_confidence_out_of_range_rejected(self, confidence):
        with pytest.raises(ValidationError):
            _make_signal(confidence=confidence)
