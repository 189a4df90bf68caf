"""Keyword and regex tables used by the rule-based classifier and the news mappers.

Kept as plain ordered data so callers can pass their own tables and tests
can enumerate them. Every regex is case-insensitive.
"""

from __future__ import annotations

import re


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# ---------------------------------------------------------------------------
# Rule-based sentiment vocabularies
# ---------------------------------------------------------------------------

POSITIVE_WORDS: tuple[str, ...] = (
    "positive", "good", "increase", "growth", "strong", "up", "rise", "gain",
    "bullish", "optimistic", "confident", "surge", "boost", "improve", "recovery",
    "dovish", "stimulus", "cut", "lower", "ease", "support", "rally",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "negative", "bad", "decrease", "fall", "weak", "down", "drop", "decline",
    "bearish", "pessimistic", "concern", "crisis", "crash", "fear", "uncertainty",
    "hawkish", "tight", "raise", "hike", "inflation", "pressure", "sell", "dump",
)

NEUTRAL_WORDS: tuple[str, ...] = (
    "neutral", "stable", "unchanged", "maintain", "hold", "steady", "flat",
    "sideways", "pause", "wait",
)

# (pattern, bucket, bonus) applied once per text on top of the word counts
SENTIMENT_CONTEXT_RULES: tuple[tuple[re.Pattern[str], str, int], ...] = (
    (_compile(r"fed.*(pause|cut)|dovish|stimulus"), "POSITIVE", 2),
    (_compile(r"fed.*(hike|raise)|hawkish|tight"), "NEGATIVE", 2),
    (_compile(r"crisis|war|uncertainty|geopolitical"), "POSITIVE", 1),  # safe haven
    (_compile(r"(strong|robust).*economy"), "NEGATIVE", 1),
)


# ---------------------------------------------------------------------------
# Gold impact context
# ---------------------------------------------------------------------------

REASON_FED_DOVISH = "Fed dovish policy"
REASON_FED_HAWKISH = "Fed hawkish policy"
REASON_LOW_INFLATION = "Lower inflation"
REASON_STRONG_ECONOMY = "Strong economy"
REASON_RISK_OFF = "Risk-off sentiment"
REASON_RISK_ON = "Risk-on sentiment"

# (pattern, weight, reason); each pattern contributes at most once per text
GOLD_IMPACT_PATTERNS: tuple[tuple[re.Pattern[str], int, str], ...] = (
    (_compile(r"fed.*(pause|cut|lower|dovish|ease)"), 3, REASON_FED_DOVISH),
    (_compile(r"powell.*(dovish|pause|cut)"), 3, REASON_FED_DOVISH),
    (_compile(r"fomc.*(hold|pause|maintain)"), 3, REASON_FED_DOVISH),
    (_compile(r"(stimulus|quantitative.easing|qe)"), 3, REASON_FED_DOVISH),
    (_compile(r"fed.*(hike|raise|higher|hawkish|tight)"), -3, REASON_FED_HAWKISH),
    (_compile(r"powell.*(hawkish|aggressive|hike)"), -3, REASON_FED_HAWKISH),
    (_compile(r"fomc.*(increase|raise)"), -3, REASON_FED_HAWKISH),
    (_compile(r"(taper|reduce.*(stimulus|qe))"), -3, REASON_FED_HAWKISH),
    (_compile(r"cpi.*(lower|below|decrease)"), 2, REASON_LOW_INFLATION),
    (_compile(r"inflation.*(cool|slow|ease)"), 2, REASON_LOW_INFLATION),
    (_compile(r"ppi.*(drop|fall)"), 2, REASON_LOW_INFLATION),
    (_compile(r"gdp.*(strong|robust|exceed)"), -2, REASON_STRONG_ECONOMY),
    (_compile(r"employment.*(strong|beat)"), -2, REASON_STRONG_ECONOMY),
    (_compile(r"jobs.*(exceed|beat)"), -2, REASON_STRONG_ECONOMY),
    (_compile(r"(war|conflict|tension|crisis)"), 2, REASON_RISK_OFF),
    (_compile(r"(uncertainty|fear|safe.haven)"), 2, REASON_RISK_OFF),
    (_compile(r"(geopolitical|instability)"), 2, REASON_RISK_OFF),
    (_compile(r"(recovery|optimism|confidence)"), -1, REASON_RISK_ON),
    (_compile(r"(risk.appetite|bull.market)"), -1, REASON_RISK_ON),
    (_compile(r"(growth|expansion)"), -1, REASON_RISK_ON),
)


# ---------------------------------------------------------------------------
# Topic filtering and categorization
# ---------------------------------------------------------------------------

GOLD_KEYWORDS: tuple[str, ...] = (
    "gold", "fed", "federal reserve", "interest rate", "inflation", "cpi",
    "dxy", "dollar", "usd", "powell", "fomc", "unemployment", "jobs",
    "treasury", "yield", "geopolitical", "war", "crisis", "recession",
    "gdp", "ppi", "nonfarm payrolls", "retail sales",
)

# First match wins
NEWS_CATEGORIES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("fed_policy", _compile(r"fed|federal.reserve|powell|fomc|monetary.policy")),
    ("inflation", _compile(r"cpi|ppi|inflation|deflation|price.index|core.inflation")),
    ("employment", _compile(r"employment|jobs|unemployment|nonfarm.payrolls|jobless|labor.market")),
    ("economic_growth", _compile(r"gdp|economic.growth|recession|expansion|contraction")),
    ("consumer_data", _compile(r"retail.sales|consumer.spending|consumer.confidence|personal.income")),
    ("geopolitical", _compile(r"war|conflict|tension|crisis|geopolitical|sanctions|trade.war")),
    ("central_bank", _compile(r"ecb|boe|boj|pboc|central.bank|interest.rate")),
    ("market_sentiment", _compile(r"sentiment|market|trading|investor|bulls|bears|volatility")),
    ("currency", _compile(r"dollar|dxy|currency|forex|exchange.rate")),
    ("commodities", _compile(r"gold|precious.metals|commodities|mining")),
)
