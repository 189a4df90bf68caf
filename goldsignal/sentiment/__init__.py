"""Sentiment classification for news text."""

from .classifier import (
    HuggingFaceClassifier,
    RuleBasedClassifier,
    SentimentAnalyzer,
    SentimentResult,
)

__all__ = [
    "HuggingFaceClassifier",
    "RuleBasedClassifier",
    "SentimentAnalyzer",
    "SentimentResult",
]
