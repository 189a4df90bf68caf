"""Three-class sentiment classification with a primary -> backup -> rule-based chain.

Every classifier exposes ``classify(text) -> SentimentResult`` and raises
``ExternalFetchError`` when it cannot answer. ``SentimentAnalyzer`` tries
them in order and always ends with the rule-based classifier, so valid
text always gets a sentiment.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import requests

from ..errors import ExternalFetchError, ValidationError
from ..signals.signal_types import round_half_up
from . import patterns

logger = logging.getLogger(__name__)

LABELS = ("NEGATIVE", "NEUTRAL", "POSITIVE")

# Inference endpoints cap the useful input length
MAX_TEXT_CHARS = 500

PRIMARY_MODEL_URL = (
    "https://api-inference.huggingface.co/models/cardiffnlp/twitter-roberta-base-sentiment"
)
BACKUP_MODEL_URL = (
    "https://api-inference.huggingface.co/models/nlptown/bert-base-multilingual-uncased-sentiment"
)


@dataclass(frozen=True)
class SentimentResult:
    """A sentiment label with a 0-100 confidence."""

    label: str
    confidence: float
    model: str = ""

    def __post_init__(self) -> None:
        if self.label not in LABELS:
            raise ValidationError(f"Unknown sentiment label {self.label!r}")
        if not 0 <= self.confidence <= 100:
            raise ValidationError(f"confidence must be within [0, 100], got {self.confidence}")


# ---------------------------------------------------------------------------
# Label schemes
# ---------------------------------------------------------------------------

_ROBERTA_LABELS = {
    "label_0": "NEGATIVE",
    "label_1": "NEUTRAL",
    "label_2": "POSITIVE",
    "negative": "NEGATIVE",
    "neutral": "NEUTRAL",
    "positive": "POSITIVE",
}


def map_roberta_label(label: str) -> str:
    """Map the twitter-roberta scheme (LABEL_0/1/2 or names) onto LABELS."""
    try:
        return _ROBERTA_LABELS[label.strip().lower()]
    except KeyError as exc:
        raise ExternalFetchError(f"Unexpected model label {label!r}") from exc


def map_star_label(label: str) -> str:
    """Map the 1-5 star scheme: 1-2 negative, 4-5 positive, otherwise neutral."""
    if "1 star" in label or "2 star" in label:
        return "NEGATIVE"
    if "4 star" in label or "5 star" in label:
        return "POSITIVE"
    return "NEUTRAL"


# ---------------------------------------------------------------------------
# Remote classifiers
# ---------------------------------------------------------------------------

class HuggingFaceClassifier:
    """Sentiment classifier backed by a hosted HuggingFace inference model."""

    def __init__(
        self,
        model_url: str,
        label_mapper: Callable[[str], str],
        model_name: str,
        api_key: str = "",
        timeout: float = 10.0,
    ) -> None:
        self.model_url = model_url
        self.label_mapper = label_mapper
        self.model_name = model_name
        self.api_key = api_key
        self.timeout = timeout

    def classify(self, text: str) -> SentimentResult:
        if not self.api_key:
            raise ExternalFetchError(f"{self.model_name}: no API key configured")

        try:
            resp = requests.post(
                self.model_url,
                json={"inputs": text[:MAX_TEXT_CHARS]},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ExternalFetchError(f"{self.model_name} request failed: {exc}") from exc

        best = self._best_candidate(payload)
        label = self.label_mapper(str(best["label"]))
        confidence = round_half_up(float(best["score"]) * 100)
        logger.debug("%s: %s (%d%%)", self.model_name, label, confidence)
        return SentimentResult(label=label, confidence=confidence, model=self.model_name)

    def _best_candidate(self, payload: object) -> dict:
        """Pick the highest-scoring {label, score} entry of ``[[...]]`` or ``[...]``."""
        candidates = payload
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], list):
            candidates = candidates[0]
        if not isinstance(candidates, list) or not candidates:
            raise ExternalFetchError(f"{self.model_name}: malformed response {payload!r:.200}")
        try:
            return max(candidates, key=lambda c: float(c["score"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalFetchError(f"{self.model_name}: malformed response entry") from exc


def primary_classifier(api_key: str, timeout: float = 10.0) -> HuggingFaceClassifier:
    return HuggingFaceClassifier(
        PRIMARY_MODEL_URL, map_roberta_label, "twitter-roberta", api_key, timeout,
    )


def backup_classifier(api_key: str, timeout: float = 10.0) -> HuggingFaceClassifier:
    return HuggingFaceClassifier(
        BACKUP_MODEL_URL, map_star_label, "multilingual-bert", api_key, timeout,
    )


# ---------------------------------------------------------------------------
# Rule-based fallback
# ---------------------------------------------------------------------------

def _make_keyword_pattern(keywords: Sequence[str]) -> re.Pattern[str]:
    escaped = [re.escape(kw) for kw in sorted(keywords)]
    return re.compile(r"\b(" + "|".join(escaped) + r")\b", re.IGNORECASE)


class RuleBasedClassifier:
    """Deterministic finance-vocabulary classifier; never raises."""

    model_name = "fallback"

    def __init__(
        self,
        positive_words: Sequence[str] = patterns.POSITIVE_WORDS,
        negative_words: Sequence[str] = patterns.NEGATIVE_WORDS,
        neutral_words: Sequence[str] = patterns.NEUTRAL_WORDS,
        context_rules: Sequence[tuple[re.Pattern[str], str, int]] = patterns.SENTIMENT_CONTEXT_RULES,
    ) -> None:
        self._buckets = {
            "POSITIVE": _make_keyword_pattern(positive_words),
            "NEGATIVE": _make_keyword_pattern(negative_words),
            "NEUTRAL": _make_keyword_pattern(neutral_words),
        }
        self._context_rules = list(context_rules)

    def counts(self, text: str) -> dict[str, int]:
        """Return per-bucket word counts including context bonuses."""
        counts = {label: len(rx.findall(text)) for label, rx in self._buckets.items()}
        for pattern, bucket, bonus in self._context_rules:
            if pattern.search(text):
                counts[bucket] += bonus
        return counts

    def classify(self, text: str) -> SentimentResult:
        counts = self.counts(text)
        total = sum(counts.values())
        if total == 0:
            return SentimentResult(label="NEUTRAL", confidence=50, model=self.model_name)

        top = max(counts.values())
        confidence = min(85, max(55, round_half_up(top / total * 100 + 20)))

        # Ties resolve positive, then negative
        if counts["POSITIVE"] == top:
            label = "POSITIVE"
        elif counts["NEGATIVE"] == top:
            label = "NEGATIVE"
        else:
            label = "NEUTRAL"
        return SentimentResult(label=label, confidence=confidence, model=self.model_name)


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------

class SentimentAnalyzer:
    """Try each classifier in order; the rule-based classifier always answers last."""

    def __init__(
        self,
        classifiers: Sequence = (),
        fallback: Optional[RuleBasedClassifier] = None,
    ) -> None:
        self.classifiers = list(classifiers)
        self.fallback = fallback or RuleBasedClassifier()

    @classmethod
    def from_api_key(cls, api_key: str, timeout: float = 10.0) -> SentimentAnalyzer:
        """Build the standard primary -> backup -> rule-based chain."""
        if not api_key:
            logger.info("No HuggingFace API key; sentiment uses the rule-based classifier only")
            return cls()
        return cls([primary_classifier(api_key, timeout), backup_classifier(api_key, timeout)])

    def analyze(self, text: str) -> SentimentResult:
        for classifier in self.classifiers:
            name = getattr(classifier, "model_name", type(classifier).__name__)
            try:
                return classifier.classify(text[:MAX_TEXT_CHARS])
            except Exception as exc:
                logger.warning("Sentiment classifier %s failed: %s", name, exc)
        logger.info("Using rule-based sentiment fallback")
        return self.fallback.classify(text)
