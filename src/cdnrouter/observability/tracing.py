"""OpenTelemetry tracing configuration for cdnrouter.

Environment Variables:
    CDN_OTEL_ENABLED: Set to "1" to enable tracing (default: disabled)
    CDN_REQUIRE_OTEL: Set to "1" to fail if tracing cannot initialize
    CDN_OTEL_SERVICE_NAME: Service name for spans (default: "cdnrouter")
    CDN_OTEL_EXPORTER: Exporter type - "otlp" or "console" (default: "otlp")
    CDN_OTEL_EXPORTER_OTLP_ENDPOINT: OTLP/HTTP endpoint URL (optional)
    CDN_OTEL_TEST_CAPTURE: Set to "1" to use in-memory exporter for tests

Span attributes never carry raw object URLs or payload bytes.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from cdnrouter.errors import CDNError

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan, TracerProvider

logger = logging.getLogger(__name__)

CDN_OTEL_ENABLED_ENV = "CDN_OTEL_ENABLED"
CDN_REQUIRE_OTEL_ENV = "CDN_REQUIRE_OTEL"
CDN_OTEL_TEST_CAPTURE_ENV = "CDN_OTEL_TEST_CAPTURE"

_tracer_provider: TracerProvider | None = None
_test_exporter: Any = None


class TracingConfigError(CDNError):
    """Raised when tracing configuration fails and CDN_REQUIRE_OTEL=1."""


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    return default


def _get_env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default).strip()


def is_tracing_enabled() -> bool:
    """Check if OpenTelemetry tracing is enabled."""
    return _get_env_bool(CDN_OTEL_ENABLED_ENV, False)


def _create_otlp_exporter(endpoint: str | None) -> Any:
    """Create an OTLP/HTTP exporter (requires the ``otlp`` extra)."""
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    kwargs: dict[str, Any] = {}
    if endpoint:
        kwargs["endpoint"] = endpoint
    return OTLPSpanExporter(**kwargs)


def configure_tracing() -> bool:
    """Configure OpenTelemetry tracing.

    Idempotent - safe to call multiple times. The global TracerProvider
    cannot be replaced once set, so only the first successful call installs
    an exporter.

    Returns:
        True if tracing is enabled and configured, False otherwise.

    Raises:
        TracingConfigError: If CDN_REQUIRE_OTEL=1 and configuration fails.
    """
    global _tracer_provider, _test_exporter

    enabled = is_tracing_enabled()
    require_otel = _get_env_bool(CDN_REQUIRE_OTEL_ENV, False)
    test_capture = _get_env_bool(CDN_OTEL_TEST_CAPTURE_ENV, False)

    if not enabled:
        logger.debug("OpenTelemetry tracing disabled (%s not set)", CDN_OTEL_ENABLED_ENV)
        return False

    if _tracer_provider is not None:
        return True

    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        service_name = _get_env_str("CDN_OTEL_SERVICE_NAME", "cdnrouter")
        exporter_type = _get_env_str("CDN_OTEL_EXPORTER", "otlp")
        endpoint = _get_env_str("CDN_OTEL_EXPORTER_OTLP_ENDPOINT", "")

        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

        if test_capture:
            from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
                InMemorySpanExporter,
            )

            _test_exporter = InMemorySpanExporter()
            provider.add_span_processor(SimpleSpanProcessor(_test_exporter))
        elif exporter_type == "console":
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        else:
            provider.add_span_processor(BatchSpanProcessor(_create_otlp_exporter(endpoint or None)))

        trace.set_tracer_provider(provider)
        _tracer_provider = provider

        logger.info(
            "OpenTelemetry tracing configured: service=%s, exporter=%s",
            service_name,
            exporter_type if not test_capture else "in-memory",
        )
        return True

    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        if require_otel:
            raise TracingConfigError(
                f"OpenTelemetry tracing required but configuration failed: {e}"
            ) from e
        return False


def get_tracer() -> trace.Tracer:
    """Return the tracer used for dispatch spans."""
    return trace.get_tracer("cdnrouter")


def get_test_spans() -> list[ReadableSpan]:
    """Get captured spans from in-memory exporter (for testing)."""
    if _test_exporter is not None:
        return list(_test_exporter.get_finished_spans())
    return []


def clear_test_spans() -> None:
    """Clear captured spans from in-memory exporter (for testing)."""
    if _test_exporter is not None:
        _test_exporter.clear()

