"""CDN provider capability contract.

Every backend supplies ``upload``. ``download`` and ``exists`` fall back to
plain HTTP against the uploaded URL unless overridden. ``delete`` is absent
unless a backend defines it; dispatch checks for it with ``supports_delete``.

Backends either subclass CDNProvider or satisfy CDNProviderProtocol
structurally. A structural backend that omits ``download`` or ``exists`` gets
the same HTTP defaults from the dispatch service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

import httpx

from cdnrouter.config import CDNSettings, load_settings
from cdnrouter.http_defaults import http_download, http_exists
from cdnrouter.models import UploadOptions, UploadResult


@runtime_checkable
class CDNProviderProtocol(Protocol):
    """Structural contract for CDN providers.

    ``delete`` is deliberately not part of the protocol: it is optional and
    detected with ``supports_delete``.
    """

    async def upload(self, data: bytes, options: UploadOptions | None = None) -> UploadResult:
        """Store ``data`` and return its locator."""
        ...

    async def download(self, url: str) -> bytes:
        """Return the bytes stored at ``url``."""
        ...

    async def exists(self, url: str) -> bool:
        """Return True if an object is stored at ``url``."""
        ...


class CDNProvider(ABC):
    """Base class for CDN backends.

    Subclasses must implement ``upload``. ``download`` and ``exists`` default
    to HTTP GET/HEAD on the URL. Define ``async def delete(self, url)``
    returning a DeleteResult to support deletion.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        settings: CDNSettings | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            http_client: Optional httpx.AsyncClient used by the default
                download/exists behaviors (dependency injection for testing).
            settings: Optional settings supplying HTTP timeout and redirect
                behavior. Loaded from the environment if None.

        Raises:
            CDNConfigError: If environment settings are malformed.
        """
        if settings is None:
            settings = load_settings()
        self._http_client = http_client
        self._http_timeout_seconds = settings.http_timeout_seconds
        self._http_follow_redirects = settings.http_follow_redirects

    @abstractmethod
    async def upload(self, data: bytes, options: UploadOptions | None = None) -> UploadResult:
        """Store ``data`` and return a locator usable by this provider.

        Args:
            data: Raw payload.
            options: Optional filename, content type and metadata.

        Returns:
            UploadResult whose ``url`` is valid input to download/exists/delete.
        """
        ...

    async def download(self, url: str) -> bytes:
        """Fetch the object at ``url`` over HTTP.

        Raises:
            DownloadFailedError: If the response status is not 2xx.
        """
        return await http_download(
            url,
            client=self._http_client,
            timeout_seconds=self._http_timeout_seconds,
            follow_redirects=self._http_follow_redirects,
        )

    async def exists(self, url: str) -> bool:
        """Probe the object at ``url`` with HEAD. Never raises."""
        return await http_exists(
            url,
            client=self._http_client,
            timeout_seconds=self._http_timeout_seconds,
            follow_redirects=self._http_follow_redirects,
        )


def supports_upload(provider: Any) -> bool:
    """Return True if ``provider`` exposes a callable ``upload``."""
    return callable(getattr(provider, "upload", None))


def supports_download(provider: Any) -> bool:
    """Return True if ``provider`` exposes a callable ``download``."""
    return callable(getattr(provider, "download", None))


def supports_exists(provider: Any) -> bool:
    """Return True if ``provider`` exposes a callable ``exists``."""
    return callable(getattr(provider, "exists", None))


def supports_delete(provider: Any) -> bool:
    """Return True if ``provider`` exposes a callable ``delete``."""
    return callable(getattr(provider, "delete", None))
