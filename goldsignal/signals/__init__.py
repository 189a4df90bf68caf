"""Per-source scorers feeding the fusion engine."""

from .signal_types import NEUTRAL_SCORE, ScoredSource
from .technical_signal import extract as extract_technical
from .news_signal import ArticleAnalysis, aggregate as aggregate_news, analyze_article
from .macro_signal import MacroAnalysis, aggregate as aggregate_macro, map_macro_impact

__all__ = [
    "NEUTRAL_SCORE",
    "ScoredSource",
    "ArticleAnalysis",
    "MacroAnalysis",
    "extract_technical",
    "aggregate_news",
    "aggregate_macro",
    "analyze_article",
    "map_macro_impact",
]
