"""Tests for Markdown rendering and message splitting."""

from datetime import datetime, timezone

from rnews.formatter import (
    format_github_markdown,
    format_news_messages,
    format_source_section,
    format_stars,
)
from rnews.models import NewsExtra, NewsItem, SourceGroup

NOW = datetime(2026, 3, 1, 0, 30, tzinfo=timezone.utc)


def _group(name: str, count: int, title_length: int = 20) -> SourceGroup:
    items = [
        NewsItem(
            title=f"{name}-{index}-" + "x" * title_length,
            link=f"https://{name.lower()}.example/{index}",
            source=name,
        )
        for index in range(count)
    ]
    return SourceGroup(name=name, items=items)


def test_source_section_rendering():
    group = SourceGroup(
        name="Hacker News",
        items=[
            NewsItem(title="First", link="https://a.example/1", source="hn"),
            NewsItem(title="Second", link="https://a.example/2", source="hn"),
        ],
    )
    assert format_source_section(group) == (
        "### Hacker News\n\n1. [First](https://a.example/1)\n2. [Second](https://a.example/2)"
    )


def test_single_message_layout():
    messages = format_news_messages("科技", [_group("A", 2)], now=NOW)

    assert len(messages) == 1
    text = messages[0].text
    assert text.startswith("## 科技\n### A\n\n1. [")
    assert text.endswith("\n\n> 更新时间：2026-03-01 08:30")
    assert messages[0].continuation is False


def test_split_on_character_budget():
    groups = [_group("A", 10, 180), _group("B", 10, 180), _group("C", 10, 180)]
    messages = format_news_messages("Foo", groups, now=NOW)

    assert len(messages) >= 2
    assert messages[0].text.startswith("## Foo\n")
    for message in messages[1:]:
        assert message.text.startswith("## Foo（续）\n")
        assert message.continuation is True
    for group in groups:
        section = format_source_section(group)
        assert sum(section in message.text for message in messages) == 1


def test_split_on_section_count():
    groups = [_group(name, 1) for name in ("A", "B", "C", "D")]
    messages = format_news_messages("Foo", groups, now=NOW)

    assert len(messages) == 2
    assert "### C" in messages[0].text
    assert "### D" in messages[1].text
    assert messages[1].text.startswith("## Foo（续）")


def test_oversized_section_is_not_split():
    group = _group("Huge", 30, 300)
    messages = format_news_messages("Foo", [group], now=NOW)

    assert len(messages) == 1
    assert format_source_section(group) in messages[0].text


def test_every_message_carries_footer():
    groups = [_group(name, 1) for name in ("A", "B", "C", "D", "E", "F", "G")]
    messages = format_news_messages("Foo", groups, now=NOW)

    assert len(messages) == 3
    assert all(m.text.endswith("> 更新时间：2026-03-01 08:30") for m in messages)


def test_empty_groups_yield_placeholder():
    messages = format_news_messages("Foo", [SourceGroup(name="A", items=[])], now=NOW)
    assert [m.text for m in messages] == ["## Foo\n\n暂无新闻数据。"]


def test_format_stars():
    assert format_stars(12345) == "12.3k"
    assert format_stars(1000) == "1.0k"
    assert format_stars(999) == "999"


def test_github_markdown_metadata():
    items = [
        NewsItem(
            title="owner/repo",
            link="https://github.com/owner/repo",
            source="GitHub Trending",
            extra=NewsExtra(stars=12345, today_stars=321, description="A tool", language="Python"),
        ),
        NewsItem(title="bare/repo", link="https://github.com/bare/repo", source="GitHub Trending"),
    ]

    message = format_github_markdown("GitHub 热门", items, now=NOW)

    assert message.text.splitlines() == [
        "## GitHub 热门",
        "",
        "1. [owner/repo](https://github.com/owner/repo) - A tool (*Python, 12.3k stars, +321 today*)",
        "2. [bare/repo](https://github.com/bare/repo)",
        "",
        "> 来源：GitHub Trending",
        "> 更新时间：2026-03-01 08:30",
    ]


def test_github_markdown_empty():
    assert format_github_markdown("GitHub", []).text == "## GitHub\n\n暂无 Trending 数据。"
