# src/content/catalog.py
# Pure helpers over article lists: slugs, reading time, filtering and tags.

import math
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from src.schemas.content import Article

WORDS_PER_MINUTE = 200

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9-]")


def slugify(title: str) -> str:
    """'The $10K Test' -> 'the-10k-test'"""
    return _NON_SLUG.sub("", _WHITESPACE.sub("-", title.strip().lower()))


def word_count(content: str) -> int:
    return len(content.split())


def reading_time(content: str) -> int:
    """Minutes at 200 words per minute, rounded up."""
    return math.ceil(word_count(content) / WORDS_PER_MINUTE)


def in_read_time_bucket(minutes: Optional[int], bucket: str) -> bool:
    # short: under 5 minutes, medium: 5 to 10, long: over 10
    if minutes is None:
        return False
    if bucket == "short":
        return minutes < 5
    if bucket == "medium":
        return 5 <= minutes <= 10
    if bucket == "long":
        return minutes > 10
    return True


def filter_articles(
    articles: Iterable[Article],
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    read_time: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
) -> List[Article]:
    """Keeps articles matching every given filter; ``tags`` matches when any tag is shared."""
    selected = []
    for article in articles:
        if category and article.category != category:
            continue
        if difficulty and article.difficulty_level != difficulty:
            continue
        if read_time and not in_read_time_bucket(article.reading_time, read_time):
            continue
        if tags and not any(tag in article.tags for tag in tags):
            continue
        selected.append(article)
    return selected


def all_tags(articles: Iterable[Article]) -> List[str]:
    return sorted({tag for article in articles for tag in article.tags})


def popular_tags(articles: Iterable[Article], limit: int = 10) -> List[str]:
    """Most used tags first; equal counts keep first-appearance order."""
    counts = Counter(tag for article in articles for tag in article.tags)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [tag for tag, _ in ranked[:limit]]


def related_articles(article: Article, candidates: Iterable[Article], limit: int = 3) -> List[Article]:
    """
    Explicitly linked articles first (in link order), then the candidates
    sharing the most tags with ``article``.
    """
    pool = [candidate for candidate in candidates if candidate.slug != article.slug]
    by_slug = {candidate.slug: candidate for candidate in pool}

    related = [by_slug[slug] for slug in article.related_slugs if slug in by_slug]
    chosen = {candidate.slug for candidate in related}

    own_tags = set(article.tags)
    scored = [
        (len(own_tags.intersection(candidate.tags)), index, candidate)
        for index, candidate in enumerate(pool)
        if candidate.slug not in chosen
    ]
    scored.sort(key=lambda item: (-item[0], item[1]))
    related.extend(candidate for shared, _, candidate in scored if shared > 0)
    return related[:limit]
