"""Tracing decorator for CDN dispatch operations.

Span attributes are limited to safe identifiers:
    - provider name (or "<active>")
    - SHA256 of the object URL, never the URL itself
    - payload size for uploads
"""

from __future__ import annotations

import functools
import hashlib
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

from opentelemetry.trace import Span

from cdnrouter.models import DeleteResult, UploadResult
from cdnrouter.observability.tracing import get_tracer, is_tracing_enabled

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

ACTIVE_PROVIDER_LABEL = "<active>"


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def traced_dispatch(operation: str) -> Callable[[F], F]:
    """Decorator to trace a dispatch coroutine with OpenTelemetry.

    The decorated coroutine must take ``(self, name, target, ...)`` where
    ``name`` is the provider name (None for the active provider) and
    ``target`` is the payload bytes for uploads or the object URL otherwise.

    Args:
        operation: Operation name ("upload", "download", "exists", "delete").

    Returns:
        Decorated coroutine that emits a span when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(
            self: Any, name: str | None, target: Any, *args: Any, **kwargs: Any
        ) -> Any:
            if not is_tracing_enabled():
                return await func(self, name, target, *args, **kwargs)

            with get_tracer().start_as_current_span(f"cdn.dispatch.{operation}") as span:
                span.set_attribute("cdn.operation", operation)
                span.set_attribute(
                    "cdn.provider", name if name is not None else ACTIVE_PROVIDER_LABEL
                )
                if isinstance(target, bytes):
                    span.set_attribute("cdn.payload_size_bytes", len(target))
                elif isinstance(target, str):
                    span.set_attribute("cdn.url_sha256", _sha256(target))

                try:
                    result = await func(self, name, target, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Span, result: Any) -> None:
    """Add result-based attributes to span safely."""
    if isinstance(result, UploadResult):
        span.set_attribute("cdn.result_url_sha256", _sha256(result.url))
    elif isinstance(result, DeleteResult):
        span.set_attribute("cdn.delete_success", result.success)
    elif isinstance(result, bool):
        span.set_attribute("cdn.exists", result)
    elif isinstance(result, bytes):
        span.set_attribute("cdn.payload_size_bytes", len(result))
