"""Data models shared across sources, pipeline stages and webhooks."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime


@dataclass(frozen=True, slots=True)
class NewsExtra:
    """Optional per-source metadata (GitHub Trending fills all of it, hot lists only ``description``)."""

    stars: int | None = None
    today_stars: int | None = None
    description: str | None = None
    language: str | None = None


@dataclass(frozen=True, slots=True)
class NewsItem:
    """A single headline produced by a source.

    Items are immutable; stages that change a title produce a new instance via
    :meth:`with_title` / :meth:`with_description`. ``link`` is the identity key.
    """

    title: str
    link: str
    source: str
    published_at: datetime | None = None
    extra: NewsExtra | None = None

    def with_title(self, title: str) -> "NewsItem":
        return replace(self, title=title)

    def with_description(self, description: str) -> "NewsItem":
        extra = self.extra or NewsExtra()
        return replace(self, extra=replace(extra, description=description))


@dataclass(slots=True)
class SourceGroup:
    """One source's contribution to a category, rendered as one subsection."""

    name: str
    items: list[NewsItem] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Message:
    """A finished Markdown message for one category."""

    text: str
    continuation: bool = False

    def __str__(self) -> str:
        return self.text
