from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest

from rnews.models import NewsExtra, NewsItem


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class MockResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: str = "",
        content: bytes | None = None,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content if content is not None else text.encode("utf-8")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")


class MockHttp:
    """Scripted replacement for ``httpx.AsyncClient``.

    Queued responses are consumed in order; the last one repeats. An exception
    instance in the queue is raised instead of returned.
    """

    def __init__(self) -> None:
        self.requests: List[Dict[str, Any]] = []
        self.client_kwargs: List[Dict[str, Any]] = []
        self._responses: List[Any] = []

    def queue(self, *responses: Any) -> None:
        self._responses.extend(responses)

    def _respond(self) -> Any:
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, BaseException):
            raise response
        return response

    def client_class(self):
        http = self

        class _MockAsyncClient:
            def __init__(self, *args, **kwargs):
                http.client_kwargs.append(kwargs)

            async def __aenter__(self):
                return self

            async def __aexit__(self, exc_type, exc, tb):
                return False

            async def get(self, url: str, params: Dict[str, Any] | None = None, **kwargs):
                http.requests.append({"method": "GET", "url": url, "params": dict(params or {})})
                return http._respond()

            async def post(self, url: str, json: Any = None, **kwargs):
                http.requests.append({"method": "POST", "url": url, "json": json})
                return http._respond()

        return _MockAsyncClient


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def mock_http(monkeypatch) -> MockHttp:
    http = MockHttp()
    monkeypatch.setattr(httpx, "AsyncClient", http.client_class())
    return http


def make_item(title: str, link: str | None = None, source: str = "test", description: str | None = None) -> NewsItem:
    extra = NewsExtra(description=description) if description is not None else None
    return NewsItem(title=title, link=link or f"https://example.com/{abs(hash(title))}", source=source, extra=extra)
