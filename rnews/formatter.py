"""Markdown rendering of category output into length-bounded messages."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Sequence

from .models import Message, NewsItem, SourceGroup
from .utils import format_local_time

MAX_SOURCES_PER_MESSAGE = 3
MAX_MESSAGE_CHARS = 4500
# 页脚之外额外预留的余量
FOOTER_SLACK = 30
CONTINUATION_SUFFIX = "（续）"
SECTION_SEPARATOR = "\n\n"


def format_stars(stars: int) -> str:
    """Abbreviate star counts: 12345 -> ``12.3k``."""
    if stars >= 1000:
        return f"{stars / 1000:.1f}k"
    return str(stars)


def format_source_section(group: SourceGroup) -> str:
    """Render one group as ``### name`` followed by a numbered Markdown link list."""
    lines = [f"### {group.name}", ""]
    for index, item in enumerate(group.items, start=1):
        lines.append(f"{index}. [{item.title}]({item.link})")
    return "\n".join(lines)


def _category_header(category_name: str, continuation: bool) -> str:
    suffix = CONTINUATION_SUFFIX if continuation else ""
    return f"## {category_name}{suffix}"


def _footer(now: datetime | None, tz: tzinfo | None) -> str:
    return f"\n\n> 更新时间：{format_local_time(now, tz)}"


def format_news_messages(
    category_name: str,
    groups: Sequence[SourceGroup],
    max_sources_per_message: int = MAX_SOURCES_PER_MESSAGE,
    max_chars: int = MAX_MESSAGE_CHARS,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Message]:
    """Split a category's groups into one or more Markdown messages.

    A new message starts when the next section would push the running total
    past ``max_chars`` (minus footer and slack), or when the current message
    already holds ``max_sources_per_message`` sections. A section is never
    split, even when it alone exceeds the budget.
    """
    non_empty = [group for group in groups if group.items]
    if not non_empty:
        return [Message(text=f"## {category_name}\n\n暂无新闻数据。")]

    footer = _footer(now, tz)
    budget = max_chars - len(footer) - FOOTER_SLACK
    messages: list[Message] = []
    current: list[str] = []
    current_length = 0

    def flush() -> None:
        continuation = bool(messages)
        header = _category_header(category_name, continuation)
        text = header + "\n" + SECTION_SEPARATOR.join(current) + footer
        messages.append(Message(text=text, continuation=continuation))

    for group in non_empty:
        section = format_source_section(group)
        section_length = len(section) + len(SECTION_SEPARATOR)
        exceeds_chars = current_length + section_length > budget
        exceeds_count = len(current) >= max_sources_per_message

        if current and (exceeds_chars or exceeds_count):
            flush()
            current = []
            current_length = 0

        current.append(section)
        current_length += section_length

    if current:
        flush()

    return messages


def format_github_markdown(
    category_name: str,
    items: Sequence[NewsItem],
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Message:
    """Render trending repositories as one flat list with description, language and star metadata."""
    if not items:
        return Message(text=f"## {category_name}\n\n暂无 Trending 数据。")

    lines = [f"## {category_name}", ""]
    for index, item in enumerate(items, start=1):
        extra = item.extra
        description = f" - {extra.description}" if extra and extra.description else ""

        meta: list[str] = []
        if extra and extra.language:
            meta.append(extra.language)
        if extra and extra.stars:
            meta.append(f"{format_stars(extra.stars)} stars")
        if extra and extra.today_stars:
            meta.append(f"+{extra.today_stars} today")
        meta_text = f" (*{', '.join(meta)}*)" if meta else ""

        lines.append(f"{index}. [{item.title}]({item.link}){description}{meta_text}")

    lines.append("")
    lines.append("> 来源：GitHub Trending")
    lines.append(f"> 更新时间：{format_local_time(now, tz)}")
    return Message(text="\n".join(lines))
