"""Per-category dispatch: fetch → keyword filter → dedup → translate → format → deliver."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ..config import AppConfig, CategoryConfig, load_local_filter
from ..dedup import TitleDeduplicator
from ..formatter import format_github_markdown, format_news_messages
from ..models import Message, SourceGroup
from ..pacing import SleepFunc
from ..sources import BaseSource, build_source
from ..translator import Translator, build_translator
from ..utils import apply_keyword_filter
from ..webhooks.dispatcher import DeliveryReport, WebhookDispatcher

logger = logging.getLogger(__name__)

SourceFactory = Callable[..., BaseSource]


@dataclass(slots=True)
class DispatchReport:
    """Outcome of one ``dispatch`` run."""

    processed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    messages: int = 0
    delivery: DeliveryReport = field(default_factory=DeliveryReport)

    @property
    def sent(self) -> int:
        return self.delivery.sent

    @property
    def failed(self) -> int:
        return self.delivery.failed


async def _build_trending_messages(
    config: AppConfig,
    category: CategoryConfig,
    blocked_keywords: Sequence[str],
    translator: Translator,
    source_factory: SourceFactory,
) -> list[Message]:
    source_config = next(s for s in category.sources if s.type == "github-trending")
    source = source_factory(source_config)

    items = await source.fetch(category.count)
    items = apply_keyword_filter(items, blocked_keywords)
    if not items:
        return []

    logger.info("   抓取到 %d 条", len(items))
    if config.settings.translate:
        items = await translator.translate_items(items, field="description")
    return [format_github_markdown(category.name, items, tz=config.settings.tzinfo)]


async def _build_news_messages(
    config: AppConfig,
    category: CategoryConfig,
    blocked_keywords: Sequence[str],
    translator: Translator,
    source_factory: SourceFactory,
) -> list[Message]:
    groups: list[SourceGroup] = []
    deduplicator = TitleDeduplicator()

    for source_config in category.sources:
        source = source_factory(source_config)
        items = await source.fetch(category.count)
        if not items:
            logger.warning("⚠️ %s: 未获取到数据", source.name)
            continue

        items = apply_keyword_filter(items, blocked_keywords)
        if not items:
            continue

        unique = deduplicator.filter(items)
        removed = len(items) - len(unique)
        if removed:
            logger.info("   %s: %d 条，去重 %d 条", source.name, len(items), removed)
        else:
            logger.info("   %s: %d 条", source.name, len(items))
        if not unique:
            continue

        if config.settings.translate and source.translatable:
            unique = await translator.translate_items(unique)
        groups.append(SourceGroup(name=source.name, items=unique))

    if not groups:
        return []
    return format_news_messages(category.name, groups, tz=config.settings.tzinfo)


async def dispatch(
    config: AppConfig,
    category_ids: Sequence[str],
    *,
    blocked_keywords: Sequence[str] | None = None,
    translator: Translator | None = None,
    webhook_dispatcher: WebhookDispatcher | None = None,
    source_factory: SourceFactory | None = None,
    sleep: SleepFunc | None = None,
) -> DispatchReport:
    """Process each requested category in order and deliver its messages.

    Unknown categories are skipped with a warning; source, translation and
    delivery failures are absorbed so one bad category never stops the run.
    """
    if blocked_keywords is None:
        blocked_keywords = load_local_filter(config.base_dir)
    if translator is None:
        translator = build_translator(enabled=config.settings.translate, sleep=sleep)
    if webhook_dispatcher is None:
        webhook_dispatcher = WebhookDispatcher.from_config(config.webhooks, sleep=sleep)
    if source_factory is None:
        source_factory = build_source

    report = DispatchReport()
    for category_id in category_ids:
        category = config.categories.get(category_id)
        if category is None:
            logger.warning("⚠️ 未知的类别: %s，跳过", category_id)
            report.skipped.append(category_id)
            continue

        logger.info("📰 正在抓取: %s ...", category.name)
        if category.is_trending:
            messages = await _build_trending_messages(
                config, category, blocked_keywords, translator, source_factory
            )
        else:
            messages = await _build_news_messages(
                config, category, blocked_keywords, translator, source_factory
            )

        if not messages:
            logger.warning("⚠️ %s: 未抓取到任何新闻，跳过推送", category.name)
            report.skipped.append(category_id)
            continue

        if len(messages) > 1:
            logger.info("   消息拆分为 %d 条发送", len(messages))

        report.messages += len(messages)
        report.delivery.merge(await webhook_dispatcher.deliver(category.webhooks, messages))
        report.processed.append(category_id)

    logger.info("✅ 所有类别推送完成: 成功 %d 条，失败 %d 条", report.sent, report.failed)
    return report
