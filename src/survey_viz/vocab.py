from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


# Word-frequency stop words (fallback word cloud).
STOP_WORDS: frozenset[str] = frozenset(
    """
    a about above after again against all am an and any are aren't as at be because
    been before being below between both but by can't cannot could couldn't did didn't
    do does doesn't doing don't down during each few for from further had hadn't has
    hasn't have haven't having he he'd he'll he's her here here's hers herself him
    himself his how how's i i'd i'll i'm i've if in into is isn't it it's its itself
    let's me more most mustn't my myself no nor not of off on once only or other ought
    our ours ourselves out over own same shan't she she'd she'll she's should shouldn't
    so some such than that that's the their theirs them themselves then there there's
    these they they'd they'll they're they've this those through to too under until up
    very was wasn't we we'd we'll we're we've were weren't what what's when when's where
    where's which while who who's whom why why's with won't would wouldn't you you'd
    you'll you're you've your yours yourself yourselves
    """.split()
)

# Words ignored when comparing question texts for thematic grouping.
THEME_STOP_WORDS: frozenset[str] = frozenset(
    {"what", "when", "where", "which", "this", "that", "these", "those", "with", "your"}
)


@dataclass(frozen=True)
class Vocabulary:
    """Word tables consulted by the classifier, the text detectors and the selector.

    Every table is plain data so callers can substitute alternate vocabularies
    (another survey language, a different rating scale) without touching the
    engine.
    """

    stop_words: frozenset[str] = STOP_WORDS
    theme_stop_words: frozenset[str] = THEME_STOP_WORDS

    # Question classifier
    skip_column_substrings: tuple[str, ...] = ("id", "timestamp", "time_stamp")
    rating_tokens: tuple[str, ...] = ("1", "2", "3", "4", "5", "1-5", "1-10")

    # Visualization selector (question phrasing)
    ranking_keywords: tuple[str, ...] = ("rank", "order", "preference", "importance", "순위", "선호도", "중요도")
    comparison_keywords: tuple[str, ...] = ("compare", "difference", "versus", "vs", "비교")
    time_keywords: tuple[str, ...] = (
        "trend",
        "over time",
        "timeline",
        "weekly",
        "monthly",
        "yearly",
        "quarter",
        "시간",
        "연도",
        "년도",
        "월별",
        "분기별",
        "시계열",
        "추세",
        "추이",
    )
    distribution_keywords: tuple[str, ...] = ("distribution", "spread", "range", "분포")
    proportion_keywords: tuple[str, ...] = ("proportion", "composition", "percentage", "percent", "비율", "구성", "퍼센트")
    sentiment_keywords: tuple[str, ...] = ("satisfaction", "opinion", "sentiment", "만족도", "의견", "감정")
    temporal_numeric_keywords: tuple[str, ...] = (
        "time",
        "period",
        "date",
        "year",
        "month",
        "day",
        "시간",
        "기간",
        "날짜",
        "연도",
        "월",
        "일",
    )

    # Text pattern detectors
    comparison_connectives: tuple[str, ...] = (
        "compared to",
        "versus",
        "vs",
        "higher than",
        "lower than",
        "more than",
        "less than",
        "greater than",
        "better than",
        "worse than",
    )
    comparison_up_words: tuple[str, ...] = ("higher", "more", "greater", "better")
    comparison_down_words: tuple[str, ...] = ("lower", "less", "worse")
    trend_words: tuple[str, ...] = (
        "increase",
        "decrease",
        "growth",
        "decline",
        "trend",
        "grew",
        "rate",
        "rose",
        "fell",
        "dropped",
    )
    respondent_nouns: tuple[str, ...] = ("respondents", "participants", "users", "customers", "people")
    response_verbs: tuple[str, ...] = (
        "selected",
        "chose",
        "reported",
        "identified",
        "said",
        "mentioned",
        "preferred",
    )
    ranking_words: tuple[str, ...] = (
        "top",
        "ranked",
        "ranking",
        "score",
        "rating",
        "most",
        "highest",
        "first",
        "second",
        "third",
        "fourth",
        "fifth",
    )
    top_phrases: tuple[str, ...] = (
        "top",
        "highest",
        "most",
        "best",
        "leading",
        "primary",
        "key",
        "major",
        "significant",
        "important",
    )


DEFAULT_VOCABULARY = Vocabulary()


def terms_pattern(terms: Iterable[str], *, whole_word: bool = False) -> re.Pattern[str]:
    """Case-insensitive alternation anchored at a word start.

    With `whole_word` the match must also end on a word boundary; otherwise
    inflected forms match too ("rank" finds "ranking").
    """
    alts = "|".join(re.escape(t) for t in sorted(set(terms), key=len, reverse=True))
    tail = r"\b" if whole_word else ""
    return re.compile(rf"\b(?:{alts}){tail}", re.IGNORECASE)
