"""rNews command line: ``push`` fetches and delivers categories, ``list`` shows the configuration."""

from __future__ import annotations

import argparse
import asyncio
import re
from typing import Sequence

from .config import AppConfig, SourceConfig, load_config
from .exceptions import ConfigError
from .pipeline import dispatch
from .utils import setup_logger

KEY_MASK_PATTERN = re.compile(r"key=([^&]{6})[^&]*")
SOURCE_LABELS = {
    "rss": "RSS",
    "github-trending": "GitHub Trending",
    "baidu-hot": "百度热搜",
    "toutiao-hot": "今日头条",
    "bilibili-hot": "B站热搜",
}


def mask_webhook_url(url: str) -> str:
    """Keep the first 6 characters of the ``key=`` query value and hide the rest."""
    return KEY_MASK_PATTERN.sub(r"key=\1...", url)


def resolve_categories(config: AppConfig, selector: str) -> list[str]:
    if selector.strip() == "all":
        return list(config.categories)
    return [part.strip() for part in selector.split(",") if part.strip()]


def _describe_source(source: SourceConfig) -> str:
    label = SOURCE_LABELS.get(source.type, source.type)
    if source.type == "github-trending":
        return f"[{label}] {source.language or '所有语言'} / {source.since or 'daily'}"
    if source.type == "rss":
        return f"[{label}] {source.name}"
    return f"[{label}] {source.name or '实时热搜'}"


def render_config_listing(config: AppConfig) -> str:
    rule = "─" * 50
    lines = ["", "📋 Webhook 列表:", rule]
    for name, webhook in config.webhooks.items():
        lines.append(f"  {name}")
        lines.append(f"    类型: {webhook.type}")
        lines.append(f"    地址: {mask_webhook_url(webhook.url)}")

    lines.extend(["", "📰 新闻类别:", rule])
    for category_id, category in config.categories.items():
        lines.append(f"  {category_id}: {category.name}")
        lines.append(f"    数量: {category.count} 条")
        lines.append(f"    推送到: {', '.join(category.webhooks)}")
        lines.append(f"    数据源: {len(category.sources)} 个")
        for source in category.sources:
            lines.append(f"      - {_describe_source(source)}")

    if config.schedule:
        lines.extend(["", "⏰ 定时规则:", rule])
        for schedule_rule in config.schedule:
            lines.append(f"  {schedule_rule.cron} → {', '.join(schedule_rule.categories)}")

    lines.append("")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rnews",
        description="个人新闻聚合推送工具 - 从 RSS/API 抓取新闻，通过 Webhook 推送",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    push = subparsers.add_parser("push", help="抓取新闻并推送到 Webhook")
    push.add_argument(
        "-c",
        "--category",
        default="all",
        help='要推送的类别，逗号分隔（如: ai,politics）或 "all"',
    )
    push.add_argument("--config", default=None, help="配置文件路径，默认: config.yaml")

    listing = subparsers.add_parser("list", help="列出所有配置的类别和 Webhook")
    listing.add_argument("--config", default=None, help="配置文件路径，默认: config.yaml")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger("rnews")

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("❌ 错误: %s", exc)
        return 1

    if args.command == "list":
        print(render_config_listing(config))
        return 0

    category_ids = resolve_categories(config, args.category)
    logger.info("🚀 rNews 开始推送")
    logger.info("   类别: %s", ", ".join(category_ids))
    logger.info("   Webhook 数量: %d", len(config.webhooks))

    asyncio.run(dispatch(config, category_ids))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
