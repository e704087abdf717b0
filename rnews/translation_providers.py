"""Translation provider implementations and helpers."""

from __future__ import annotations

import abc
import asyncio
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

DEFAULT_TIMEOUT_SECONDS = 5.0


class TranslationProviderError(RuntimeError):
    """Raised when a translation provider fails irrecoverably."""


@dataclass(slots=True)
class ProviderResult:
    """Container for provider translation responses."""

    text: str
    provider: str | None = None


class BaseTranslationProvider(abc.ABC):
    """Abstract translation provider interface."""

    name: str

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    @abc.abstractmethod
    async def translate(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
    ) -> ProviderResult:
        """Translate *text* into *target_language* optionally using *source_language*."""

    async def _get_json(self, endpoint: str, params: Mapping[str, Any]) -> Any:
        try:
            # httpx 的 timeout 只约束单次读写，整体请求另设总时限
            response = await asyncio.wait_for(self._fetch(endpoint, params), timeout=self._timeout)
        except asyncio.CancelledError:
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise TranslationProviderError(f"{self.name} 请求超时 ({self._timeout}s)") from exc
        except httpx.HTTPError as exc:
            raise TranslationProviderError(f"{self.name} 请求失败: {exc}") from exc
        if response.status_code >= 400:
            raise TranslationProviderError(f"{self.name} 错误: {response.status_code} {response.text[:200]}")
        try:
            return response.json()
        except ValueError as exc:
            raise TranslationProviderError(f"{self.name} 返回非 JSON 响应") from exc

    async def _fetch(self, endpoint: str, params: Mapping[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(endpoint, params=params)


class QvqaTranslateProvider(BaseTranslationProvider):
    """简心翻译 (api.qvqa.cn), the primary free provider."""

    name = "qvqa"

    def __init__(self, endpoint: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        super().__init__(timeout)
        self._endpoint = endpoint or "https://api.qvqa.cn/api/fanyi"

    async def translate(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
    ) -> ProviderResult:
        params = {
            "text": text,
            "source": source_language or "en",
            "target": target_language,
        }
        data = await self._get_json(self._endpoint, params)
        payload = data.get("data") if isinstance(data, dict) else None
        translated = payload.get("targetText") if isinstance(payload, dict) else None
        if not translated:
            raise TranslationProviderError("简心翻译返回空结果")
        return ProviderResult(text=str(translated), provider=self.name)


class Vmy52TranslateProvider(BaseTranslationProvider):
    """api.52vmy.cn free translation API, used as the fallback provider."""

    name = "52vmy"

    def __init__(self, endpoint: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        super().__init__(timeout)
        self._endpoint = endpoint or "https://api.52vmy.cn/api/query/fanyi"

    async def translate(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
    ) -> ProviderResult:
        data = await self._get_json(self._endpoint, {"msg": text})
        if not isinstance(data, dict) or data.get("code") != 200:
            code = data.get("code") if isinstance(data, dict) else None
            raise TranslationProviderError(f"52vmy 翻译错误码: {code}")
        payload = data.get("data")
        translated = payload.get("target") if isinstance(payload, dict) else None
        if not translated:
            raise TranslationProviderError("52vmy 翻译返回空结果")
        return ProviderResult(text=str(translated), provider=self.name)


def build_provider(
    name: str,
    timeout: float,
    credentials: Mapping[str, Any] | None = None,
) -> BaseTranslationProvider:
    """Instantiate a provider by name with optional *credentials* (e.g. a custom ``endpoint``)."""

    normalized = name.strip().lower()
    try:
        builder = _PROVIDER_BUILDERS[normalized]
    except KeyError as exc:
        raise TranslationProviderError(f"未知翻译提供商: {name}") from exc
    return builder(timeout=timeout, **dict(credentials or {}))


def _builder_from_cls(cls: type[BaseTranslationProvider]):
    def _builder(*, timeout: float, **kwargs: Any) -> BaseTranslationProvider:
        return cls(timeout=timeout, **kwargs)

    return _builder


_PROVIDER_BUILDERS: dict[str, Any] = {
    "qvqa": _builder_from_cls(QvqaTranslateProvider),
    "52vmy": _builder_from_cls(Vmy52TranslateProvider),
}
