"""Tests for goldsignal.signals.news_signal: gold-impact mapping,
per-article analysis and the news window aggregate.
"""

from datetime import datetime, timezone

import pytest

from goldsignal.models import NewsItem
from goldsignal.sentiment import SentimentResult, patterns
from goldsignal.signals import aggregate_news, analyze_article
from goldsignal.signals.news_signal import (
    ArticleAnalysis,
    categorize,
    extract_keywords,
    is_gold_related,
    map_gold_impact,
)

_PUBLISHED = datetime(2026, 3, 2, 9, tzinfo=timezone.utc)


def _make_item(title: str, content: str = "") -> NewsItem:
    return NewsItem(title=title, content=content, published_at=_PUBLISHED, source="Wire")


def _make_analysis(impact: str, confidence: float) -> ArticleAnalysis:
    return ArticleAnalysis(
        item=_make_item("Gold update"),
        sentiment_label="NEUTRAL",
        confidence=confidence,
        model="stub",
        impact_on_gold=impact,
        gold_sentiment="neutral",
        impact_score=0,
    )


class _StubAnalyzer:
    def __init__(self, label: str, confidence: float):
        self.result = SentimentResult(label, confidence, "stub")
        self.texts = []

    def analyze(self, text):
        self.texts.append(text)
        return self.result


# ── Impact mapping ───────────────────────────────────────────────────────


class TestMapGoldImpact:
    def test_dovish_fed_is_positive(self):
        impact = map_gold_impact("POSITIVE", "Fed signals rate cut as inflation cools")
        assert impact.impact == "positive"
        assert impact.gold_sentiment == "dovish_usd"
        assert impact.context_score == 5
        assert impact.total_score == 6
        assert impact.reasons == ["Fed dovish policy", "Lower inflation"]

    def test_hawkish_fed_is_negative(self):
        impact = map_gold_impact("NEGATIVE", "Fed hints at further rate hike")
        assert impact.impact == "negative"
        assert impact.gold_sentiment == "hawkish_usd"
        assert impact.total_score == -4

    def test_strong_economy_is_risk_on(self):
        impact = map_gold_impact(
            "NEGATIVE", "Jobs beat expectations as economic expansion continues",
        )
        assert impact.impact == "negative"
        assert impact.gold_sentiment == "risk_on"

    def test_risk_off_without_fed_narrative(self):
        impact = map_gold_impact("NEUTRAL", "Geopolitical tension lifts safe haven demand")
        assert impact.impact == "positive"
        assert impact.gold_sentiment == "risk_off"
        assert impact.total_score == 6

    def test_sentiment_alone_is_neutral(self):
        impact = map_gold_impact("POSITIVE", "Gold trades flat")
        assert impact.impact == "neutral"
        assert impact.gold_sentiment == "neutral"
        assert impact.total_score == 1

    def test_custom_pattern_table(self):
        import re

        table = [(re.compile("bullion", re.IGNORECASE), 2, "Bullion demand")]
        impact = map_gold_impact("NEUTRAL", "Bullion buying", impact_patterns=table)
        assert impact.impact == "positive"
        assert impact.gold_sentiment == "bullish_gold"


class TestTopicHelpers:
    def test_is_gold_related(self):
        assert is_gold_related("Gold hits record high")
        assert is_gold_related("Powell testimony today")
        assert not is_gold_related("Apple launches new phone")

    def test_extract_keywords_in_table_order(self):
        assert extract_keywords("Gold and the dollar rally as Fed pauses") == [
            "gold", "fed", "dollar",
        ]

    def test_categorize_first_match_wins(self):
        assert categorize("Powell speaks after FOMC meeting") == "fed_policy"
        assert categorize("CPI comes in hot") == "inflation"
        assert categorize("Oil output rises") == "other"


# ── Per-article analysis ─────────────────────────────────────────────────


class TestAnalyzeArticle:
    def test_confident_article_is_mapped(self):
        item = _make_item("Fed signals rate cut", "Officials see inflation cooling")
        analyzer = _StubAnalyzer("POSITIVE", 80)
        analysis = analyze_article(item, analyzer)

        assert analysis is not None
        assert analyzer.texts == ["Officials see inflation cooling"]
        assert analysis.impact_on_gold == "positive"
        assert analysis.gold_sentiment == "dovish_usd"
        assert analysis.category == "fed_policy"
        assert analysis.model == "stub"
        assert analysis.summary.startswith("Fed easing -> weaker USD -> GOLD UP (80%)")

    def test_title_used_when_no_content(self):
        analyzer = _StubAnalyzer("NEUTRAL", 70)
        analyze_article(_make_item("Gold steady ahead of CPI"), analyzer)
        assert analyzer.texts == ["Gold steady ahead of CPI"]

    def test_low_confidence_is_dropped(self):
        item = _make_item("Fed signals rate cut")
        assert analyze_article(item, _StubAnalyzer("POSITIVE", 59)) is None

    def test_threshold_is_inclusive(self):
        item = _make_item("Fed signals rate cut")
        assert analyze_article(item, _StubAnalyzer("POSITIVE", 60)) is not None


# ── Aggregate ────────────────────────────────────────────────────────────


class TestNewsAggregate:
    def test_empty_window_is_neutral(self):
        result = aggregate_news([])
        assert result.score == 50
        assert result.reasoning == ["No recent news available"]
        assert result.details["count"] == 0
        assert not result.has_data

    def test_confidence_weighted_mean(self):
        result = aggregate_news([
            _make_analysis("positive", 80),
            _make_analysis("positive", 80),
            _make_analysis("negative", 60),
        ])
        # (80*0.8 + 80*0.8 + 30*0.6) / 2.2 = 66.36
        assert result.score == 66
        assert result.reasoning == ["2 positive vs 1 negative news"]
        assert result.signals == ["News sentiment bullish for gold"]
        assert result.details == {"count": 3, "positive": 2, "negative": 1, "neutral": 0}
        assert result.has_data

    def test_all_neutral_is_50(self):
        result = aggregate_news([_make_analysis("neutral", 70), _make_analysis("neutral", 90)])
        assert result.score == 50
        assert result.reasoning == ["Mixed news sentiment"]

    @pytest.mark.parametrize("impact, expected", [("positive", 85), ("negative", 15)])
    def test_single_article_extremes(self, impact, expected):
        assert aggregate_news([_make_analysis(impact, 90)]).score == expected


class TestPatternTables:
    @pytest.mark.parametrize("table", [
        patterns.SENTIMENT_CONTEXT_RULES,
        patterns.GOLD_IMPACT_PATTERNS,
        patterns.NEWS_CATEGORIES,
    ])
    def test_tables_are_immutable(self, table):
        assert isinstance(table, tuple)
        assert all(isinstance(row, tuple) for row in table)

    def test_gold_impact_table_size(self):
        assert len(patterns.GOLD_IMPACT_PATTERNS) == 20
