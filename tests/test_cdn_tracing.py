"""Tests for dispatch tracing spans.

Spans must carry the provider name and hashed URLs only; raw object URLs
never appear in span attributes.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator

import pytest

from cdnrouter.models import UploadOptions, UploadResult
from cdnrouter.observability.tracing import (
    CDN_OTEL_ENABLED_ENV,
    CDN_OTEL_TEST_CAPTURE_ENV,
    clear_test_spans,
    configure_tracing,
    get_test_spans,
)
from cdnrouter.provider import CDNProvider
from cdnrouter.service import CDNService

SECRET_URL = "https://cdn.example.com/private/report.pdf?sig=abc123"


class _EchoProvider(CDNProvider):
    async def upload(self, data: bytes, options: UploadOptions | None = None) -> UploadResult:
        return UploadResult(url=SECRET_URL)

    async def exists(self, url: str) -> bool:
        return True


@pytest.fixture(autouse=True)
def tracing_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv(CDN_OTEL_ENABLED_ENV, "1")
    monkeypatch.setenv(CDN_OTEL_TEST_CAPTURE_ENV, "1")
    assert configure_tracing() is True
    clear_test_spans()
    yield
    clear_test_spans()


@pytest.fixture
def service() -> CDNService:
    svc = CDNService()
    svc.register_provider("echo", _EchoProvider(), activate=True)
    return svc


def _spans_named(name: str) -> list:
    return [s for s in get_test_spans() if s.name == name]


class TestDispatchSpans:
    @pytest.mark.asyncio
    async def test_upload_span_attributes(self, service: CDNService) -> None:
        await service.upload_named("echo", b"12345")

        spans = _spans_named("cdn.dispatch.upload")
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["cdn.provider"] == "echo"
        assert attrs["cdn.payload_size_bytes"] == 5
        assert attrs["cdn.result_url_sha256"] == hashlib.sha256(SECRET_URL.encode()).hexdigest()

    @pytest.mark.asyncio
    async def test_exists_span_hashes_url(self, service: CDNService) -> None:
        await service.exists(SECRET_URL)

        spans = _spans_named("cdn.dispatch.exists")
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["cdn.provider"] == "<active>"
        assert attrs["cdn.url_sha256"] == hashlib.sha256(SECRET_URL.encode()).hexdigest()
        assert attrs["cdn.exists"] is True

    @pytest.mark.asyncio
    async def test_raw_url_never_exported(self, service: CDNService) -> None:
        await service.upload(b"x")
        await service.exists_named("echo", SECRET_URL)

        for span in get_test_spans():
            for value in (span.attributes or {}).values():
                assert "sig=abc123" not in str(value)
                assert "cdn.example.com" not in str(value)

    @pytest.mark.asyncio
    async def test_error_span_marked(self, service: CDNService) -> None:
        from cdnrouter.errors import UnsupportedOperationError

        with pytest.raises(UnsupportedOperationError):
            await service.delete_named("echo", SECRET_URL)

        spans = _spans_named("cdn.dispatch.delete")
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["error"] is True
        assert attrs["error.type"] == "UnsupportedOperationError"

    @pytest.mark.asyncio
    async def test_no_spans_when_disabled(
        self, service: CDNService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(CDN_OTEL_ENABLED_ENV)
        await service.upload(b"x")
        assert _spans_named("cdn.dispatch.upload") == []


class TestConfigureTracing:
    def test_disabled_returns_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CDN_OTEL_ENABLED_ENV)
        assert configure_tracing() is False

    @pytest.mark.asyncio
    async def test_repeated_configure_keeps_capturing(self, service: CDNService) -> None:
        assert configure_tracing() is True
        assert configure_tracing() is True

        await service.upload(b"x")
        assert len(_spans_named("cdn.dispatch.upload")) == 1
