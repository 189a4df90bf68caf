"""Gold-related news collector.

Queries NewsAPI first and GNews as the second source, keeps articles that
mention gold or its macro drivers and were published inside the window,
and returns them newest first.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from ..errors import ExternalFetchError
from ..models import NewsItem
from ..signals.news_signal import is_gold_related

logger = logging.getLogger(__name__)

NEWSAPI_URL = "https://newsapi.org/v2/everything"
GNEWS_URL = "https://gnews.io/api/v4/search"

DEFAULT_TOPIC = 'gold OR fed OR "federal reserve" OR inflation OR "interest rate"'

MAX_ARTICLES = 10
_PAGE_SIZE = 20


def fetch_recent_articles(
    topic: str = DEFAULT_TOPIC,
    window_hours: int = 24,
    news_api_key: str = "",
    gnews_api_key: str = "",
    timeout: float = 10.0,
    limit: int = MAX_ARTICLES,
    now: Optional[datetime] = None,
) -> list[NewsItem]:
    """Fetch gold-related articles from the first source that answers.

    Returns an empty list when no source is configured. Raises
    ``ExternalFetchError`` when every configured source fails.
    """
    now = now or datetime.now(tz=timezone.utc)
    since = now - timedelta(hours=window_hours)

    sources = []
    if news_api_key:
        sources.append(("NewsAPI", lambda: _fetch_newsapi(topic, since, news_api_key, timeout)))
    if gnews_api_key:
        sources.append(("GNews", lambda: _fetch_gnews(topic, since, gnews_api_key, timeout)))
    if not sources:
        logger.info("No news API key configured; skipping news collection")
        return []

    errors = []
    for name, fetch in sources:
        try:
            items = fetch()
        except ExternalFetchError as exc:
            logger.warning("%s fetch failed: %s", name, exc)
            errors.append(str(exc))
            continue
        selected = select_articles(items, since, limit)
        logger.info("%s: %d articles, %d gold-related in window", name, len(items), len(selected))
        return selected

    raise ExternalFetchError("All news sources failed: " + "; ".join(errors))


def select_articles(items: list[NewsItem], since: datetime, limit: int = MAX_ARTICLES) -> list[NewsItem]:
    """Keep unique gold-related items published at or after ``since``, newest first."""
    seen = set()
    kept = []
    for item in sorted(items, key=lambda i: i.published_at, reverse=True):
        key = item.title.strip().lower()
        if key in seen or item.published_at < since:
            continue
        if not is_gold_related(item.text):
            continue
        seen.add(key)
        kept.append(item)
    return kept[:limit]


# ---------------------------------------------------------------------------
# Source adapters
# ---------------------------------------------------------------------------

def _get_json(url: str, params: dict, timeout: float, source: str) -> dict:
    try:
        resp = requests.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise ExternalFetchError(f"{source} request failed: {exc}") from exc


def _fetch_newsapi(topic: str, since: datetime, api_key: str, timeout: float) -> list[NewsItem]:
    payload = _get_json(
        NEWSAPI_URL,
        {
            "q": topic,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": _PAGE_SIZE,
            "from": since.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "apiKey": api_key,
        },
        timeout,
        "NewsAPI",
    )
    if payload.get("status") != "ok":
        raise ExternalFetchError(f"NewsAPI error: {payload.get('message', payload.get('code'))}")
    return parse_articles(payload.get("articles") or [])


def _fetch_gnews(topic: str, since: datetime, api_key: str, timeout: float) -> list[NewsItem]:
    payload = _get_json(
        GNEWS_URL,
        {
            "q": topic,
            "lang": "en",
            "country": "us",
            "max": _PAGE_SIZE,
            "from": since.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "apikey": api_key,
        },
        timeout,
        "GNews",
    )
    if "articles" not in payload:
        raise ExternalFetchError(f"GNews error: {payload.get('errors', 'no articles field')}")
    return parse_articles(payload["articles"])


def parse_articles(articles: list[dict]) -> list[NewsItem]:
    """Convert NewsAPI/GNews article dicts; entries without title or date are skipped."""
    items = []
    for article in articles:
        title = (article.get("title") or "").strip()
        published = article.get("publishedAt")
        if not title or not published:
            continue
        try:
            published_at = datetime.fromisoformat(published.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable publishedAt %r for %.50s", published, title)
            continue
        if published_at.tzinfo is None:
            published_at = published_at.replace(tzinfo=timezone.utc)
        items.append(NewsItem(
            title=title,
            content=article.get("content") or article.get("description") or "",
            published_at=published_at,
            source=(article.get("source") or {}).get("name") or "unknown",
            url=article.get("url") or "",
        ))
    return items
