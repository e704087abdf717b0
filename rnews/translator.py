"""Headline translator: appends a Chinese rendering to foreign-language titles.

Each provider in the chain is tried in order (primary, then fallback). A
batch stops calling providers once ``max_consecutive_failures`` items in a
row got no translation from any provider, so a provider outage cannot hold
up delivery.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Literal, Sequence

from .models import NewsItem
from .pacing import Pacer, SleepFunc
from .translation_providers import (
    DEFAULT_TIMEOUT_SECONDS,
    BaseTranslationProvider,
    TranslationProviderError,
    build_provider,
)
from .utils import count_cjk

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS: tuple[str, ...] = ("qvqa", "52vmy")
THROTTLE_SECONDS = 0.3
MAX_CONSECUTIVE_FAILURES = 2
CJK_RATIO_THRESHOLD = 0.3

TranslateField = Literal["title", "description"]


def _is_meaningful(ch: str) -> bool:
    if ch.isspace() or "0" <= ch <= "9":
        return False
    return unicodedata.category(ch)[0] not in {"P", "S"}


def needs_translation(text: str) -> bool:
    """Return True when less than 30% of the meaningful characters are CJK.

    Whitespace, ASCII digits, punctuation and symbols are not counted. Text
    with no meaningful characters never needs translation.
    """
    meaningful = sum(1 for ch in text or "" if _is_meaningful(ch))
    if meaningful == 0:
        return False
    return count_cjk(text) / meaningful < CJK_RATIO_THRESHOLD


def compose_bilingual(original: str, translated: str) -> str:
    return f"{original}（{translated}）"


@dataclass(slots=True)
class TranslationState:
    """Per-batch counters; a new instance is created for every ``translate_items`` call."""

    translated_count: int = 0
    consecutive_failures: int = 0
    aborted: bool = False


class Translator:
    """Translate headlines through a provider chain with pacing and a failure circuit breaker."""

    def __init__(
        self,
        *,
        enabled: bool,
        providers: Sequence[BaseTranslationProvider],
        target_language: str = "zh",
        source_language: str = "en",
        throttle_seconds: float = THROTTLE_SECONDS,
        max_consecutive_failures: int = MAX_CONSECUTIVE_FAILURES,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.enabled = enabled and bool(providers)
        self._providers = list(providers)
        self._target_language = target_language
        self._source_language = source_language
        self._pacer = Pacer(throttle_seconds, sleep=sleep)
        self._max_failures = max(1, max_consecutive_failures)

    async def translate_text(self, text: str) -> str | None:
        """Return the first non-empty provider translation, or None when every provider fails."""
        last_errors: list[str] = []
        for provider in self._providers:
            try:
                result = await provider.translate(text, self._source_language, self._target_language)
            except TranslationProviderError as exc:
                last_errors.append(f"{provider.name}: {exc}")
                continue
            except Exception as exc:  # pylint: disable=broad-except
                last_errors.append(f"{provider.name}: {exc}")
                continue

            translated = (result.text or "").strip()
            if translated:
                return translated
            last_errors.append(f"{provider.name}: translated text empty")

        logger.warning("⚠️ 翻译失败: \"%s...\" - %s", text[:40], "; ".join(last_errors) or "无可用翻译服务")
        return None

    async def translate_items(
        self,
        items: Sequence[NewsItem],
        *,
        field: TranslateField = "title",
    ) -> list[NewsItem]:
        """Return *items* with foreign-language titles (or descriptions) made bilingual.

        Always returns one item per input item, in order. Untranslated items are
        returned as the same objects.
        """
        if not self.enabled:
            return list(items)

        state = TranslationState()
        results: list[NewsItem] = []

        for item in items:
            if state.aborted:
                results.append(item)
                continue

            original = self._target_text(item, field)
            if not original or not needs_translation(original):
                results.append(item)
                continue

            if state.translated_count > 0:
                await self._pacer.pause()

            translated = await self.translate_text(original)
            if translated is None:
                state.consecutive_failures += 1
                results.append(item)
            elif translated != original:
                results.append(self._apply(item, field, compose_bilingual(original, translated)))
                state.translated_count += 1
                state.consecutive_failures = 0
            else:
                results.append(item)

            if state.consecutive_failures >= self._max_failures:
                logger.warning("⚠️ 翻译连续 %d 次失败，跳过剩余翻译直接推送", state.consecutive_failures)
                state.aborted = True

        if state.translated_count:
            logger.info("🌐 翻译了 %d 条英文标题", state.translated_count)
        return results

    @staticmethod
    def _target_text(item: NewsItem, field: TranslateField) -> str:
        if field == "description":
            return (item.extra.description or "") if item.extra else ""
        return item.title

    @staticmethod
    def _apply(item: NewsItem, field: TranslateField, value: str) -> NewsItem:
        if field == "description":
            return item.with_description(value)
        return item.with_title(value)


def build_translator(
    *,
    enabled: bool = True,
    provider_names: Sequence[str] = DEFAULT_PROVIDERS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    sleep: SleepFunc | None = None,
) -> Translator:
    """Factory helper that instantiates the named providers in priority order."""

    providers: list[BaseTranslationProvider] = []
    for name in provider_names:
        try:
            providers.append(build_provider(name, timeout))
        except TranslationProviderError as exc:
            logger.warning("翻译服务 %s 初始化失败: %s", name, exc)

    if enabled and not providers:
        logger.warning("未找到可用翻译服务，将继续使用原文")

    return Translator(enabled=enabled, providers=providers, sleep=sleep)
