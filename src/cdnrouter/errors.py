"""CDN dispatch error types.

Provides the caller-facing error taxonomy for provider resolution and
dispatch. Errors raised inside a provider's own operations are never wrapped
in these types; they propagate to the caller unchanged.
"""

from __future__ import annotations


class CDNError(Exception):
    """Base exception for CDN dispatch failures.

    Attributes:
        message: Human-readable error message.
        provider_name: Provider name associated with the failure (if any).
    """

    def __init__(self, message: str, *, provider_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider_name = provider_name

    def __str__(self) -> str:
        return self.message


class ProviderNotFoundError(CDNError, LookupError):
    """Raised when a requested provider name is not in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"CDN provider {name!r} not found. "
            "Register it first with register_provider(name, provider).",
            provider_name=name,
        )
        self.name = name


class NoActiveProviderError(CDNError, LookupError):
    """Raised when a name-omitting call is made with no active provider."""

    def __init__(self, message: str = "No active CDN provider is selected") -> None:
        super().__init__(message)


class UnsupportedOperationError(CDNError, NotImplementedError):
    """Raised when a provider lacks a capability the call requires.

    Covers a provider without ``delete`` and a structurally-typed provider
    that does not define ``upload``.
    """

    def __init__(
        self,
        operation: str,
        *,
        provider_name: str | None = None,
        message: str | None = None,
    ) -> None:
        if message is None and provider_name is None:
            message = f"Active CDN provider does not support {operation!r}"
        elif message is None:
            message = f"CDN provider {provider_name!r} does not support {operation!r}"
        super().__init__(message, provider_name=provider_name)
        self.operation = operation


class DownloadFailedError(CDNError):
    """Raised by the default HTTP download on a non-success response.

    Attributes:
        status: Reason phrase of the response, verbatim (e.g. "Not Found").
        status_code: HTTP status code of the response.
        url: URL that was requested.
    """

    def __init__(
        self,
        status: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"Failed to download file: {status}")
        self.status = status
        self.status_code = status_code
        self.url = url


class CDNConfigError(CDNError):
    """Raised when CDN environment configuration is malformed."""
