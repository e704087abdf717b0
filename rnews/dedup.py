"""Cross-source title deduplication for a single category run."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Set

from .models import NewsItem
from .utils import HAN_REGEX

WORD_REGEX = re.compile(r"[a-z]{3,}")

DEFAULT_SIMILARITY_THRESHOLD = 0.5


def extract_tokens(title: str) -> Set[str]:
    """Return every Han character plus every lowercase ASCII word of 3+ letters."""
    if not title:
        return set()
    tokens: Set[str] = set(HAN_REGEX.findall(title))
    tokens.update(WORD_REGEX.findall(title.lower()))
    return tokens


def jaccard_similarity(a: Set[str], b: Set[str]) -> float:
    """|A∩B| / |A∪B|; any empty side yields 0.0."""
    if not a or not b:
        return 0.0
    intersection = len(a & b)
    return intersection / (len(a) + len(b) - intersection)


@dataclass(slots=True)
class DedupRecord:
    """Token set and link of an accepted item."""

    token_set: Set[str]
    link: str


@dataclass
class TitleDeduplicator:
    """Drop items whose link was already accepted or whose title is too similar to an accepted one.

    One instance covers one category: construct a fresh deduplicator per
    category and feed it each source's items in configured order, so the
    earliest source wins ties.
    """

    threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    records: List[DedupRecord] = field(default_factory=list)
    _links: Set[str] = field(default_factory=set, repr=False)

    def is_duplicate(self, item: NewsItem) -> bool:
        """Return True if *item* duplicates an accepted item; otherwise accept it."""
        if item.link in self._links:
            return True

        tokens = extract_tokens(item.title)
        for record in self.records:
            if jaccard_similarity(record.token_set, tokens) >= self.threshold:
                return True

        self.records.append(DedupRecord(token_set=tokens, link=item.link))
        self._links.add(item.link)
        return False

    def filter(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        return [item for item in items if not self.is_duplicate(item)]
