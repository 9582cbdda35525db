"""Pytest configuration and fixtures for cdnrouter tests."""

from __future__ import annotations

import pytest

from cdnrouter.config import (
    CDN_ACTIVE_PROVIDER_ENV,
    CDN_HTTP_FOLLOW_REDIRECTS_ENV,
    CDN_HTTP_TIMEOUT_SECONDS_ENV,
)
from cdnrouter.observability.tracing import CDN_OTEL_ENABLED_ENV, CDN_REQUIRE_OTEL_ENV


@pytest.fixture(autouse=True)
def isolate_cdn_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CDN_* settings inherited from the host environment.

    Tests that need a variable set it explicitly with monkeypatch.
    """
    for key in (
        CDN_ACTIVE_PROVIDER_ENV,
        CDN_HTTP_TIMEOUT_SECONDS_ENV,
        CDN_HTTP_FOLLOW_REDIRECTS_ENV,
        CDN_OTEL_ENABLED_ENV,
        CDN_REQUIRE_OTEL_ENV,
    ):
        monkeypatch.delenv(key, raising=False)
