"""CDN dispatch service.

The single entry point for CDN operations. Each operation resolves a provider
and forwards the call:

1. Resolve the provider: by explicit name (``*_named``) or the active
   selection (``*_active``). The combined forms take a keyword-only
   ``provider`` and pick the path on whether it is None.
2. Normalize input: text payloads are encoded as UTF-8; mapping options are
   validated into UploadOptions.
3. Check capabilities: ``delete`` must exist on the provider; a provider
   without ``download`` or ``exists`` gets the default HTTP behavior.
4. Forward to the provider and return its result unchanged.

Registry failures raise ProviderNotFoundError / NoActiveProviderError, except
``exists``, which returns False when no provider can be resolved. Errors
raised by providers propagate unwrapped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cdnrouter.config import CDNSettings, load_settings
from cdnrouter.errors import (
    NoActiveProviderError,
    ProviderNotFoundError,
    UnsupportedOperationError,
)
from cdnrouter.models import DeleteResult, UploadOptions, UploadResult
from cdnrouter.http_defaults import http_download, http_exists
from cdnrouter.provider import (
    supports_delete,
    supports_download,
    supports_exists,
    supports_upload,
)
from cdnrouter.registry import ProviderRegistry, SingleSelectionProviderRegistry
from cdnrouter.tracing import traced_dispatch

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"

Payload = str | bytes | bytearray | memoryview
OptionsInput = UploadOptions | Mapping[str, Any] | None


def normalize_payload(data: Payload) -> bytes:
    """Convert an upload payload to bytes.

    Text is encoded as UTF-8; bytes-like objects are copied to ``bytes``.

    Raises:
        TypeError: If ``data`` is neither text nor bytes-like.
    """
    if isinstance(data, str):
        return data.encode(TEXT_ENCODING)
    if isinstance(data, bytes):
        return data
    if isinstance(data, bytearray | memoryview):
        return bytes(data)
    raise TypeError(f"Upload data must be str or bytes-like, got {type(data).__name__}")


def normalize_options(options: OptionsInput) -> UploadOptions | None:
    """Validate upload options into an UploadOptions instance (or None)."""
    if options is None or isinstance(options, UploadOptions):
        return options
    return UploadOptions.model_validate(dict(options))


class CDNService:
    """Uniform facade over named CDN providers.

    Owns its registry; there is no process-wide singleton. Providers may be
    added at any time, but registration is expected during startup.
    """

    name = "CDNService"
    description = "Uniform interface for CDN upload, download, delete and existence checks"

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        *,
        settings: CDNSettings | None = None,
    ) -> None:
        """Initialize the CDN service.

        Args:
            registry: Provider registry. Defaults to a new
                SingleSelectionProviderRegistry. A plain ProviderRegistry
                disables the active-provider call forms.
            settings: HTTP settings for providers without their own
                download/exists. Loaded from the environment on first use if None.
        """
        self._registry = registry if registry is not None else SingleSelectionProviderRegistry()
        self._settings = settings

    @property
    def registry(self) -> ProviderRegistry:
        """The underlying provider registry."""
        return self._registry

    # -- provider management ---------------------------------------------

    def register_provider(self, name: str, provider: Any, *, activate: bool = False) -> None:
        """Register ``provider`` under ``name``, replacing any existing entry.

        Args:
            name: Unique, case-sensitive provider name.
            provider: Object implementing the provider contract.
            activate: Also mark the provider active.

        Raises:
            UnsupportedOperationError: If ``activate`` is set and the registry
                has no active selection. Nothing is registered in that case.
        """
        selection = self._selection_registry() if activate else None
        self._registry.register(name, provider)
        if selection is not None:
            selection.set_active(name)

    def unregister_provider(self, name: str) -> Any:
        """Remove the provider registered under ``name`` and return it."""
        return self._registry.unregister(name)

    def get_provider_by_name(self, name: str) -> Any:
        """Return the provider registered under ``name``.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
        """
        return self._registry.get_by_name(name)

    def get_active_provider(self) -> Any:
        """Return the active provider.

        Raises:
            NoActiveProviderError: If no provider is active, or the registry
                does not support an active selection.
        """
        if not isinstance(self._registry, SingleSelectionProviderRegistry):
            raise NoActiveProviderError("Registry does not support an active CDN provider")
        return self._registry.get_active()

    def set_active_provider(self, name: str) -> None:
        """Mark ``name`` as the active provider.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
            UnsupportedOperationError: If the registry has no active selection.
        """
        self._selection_registry().set_active(name)

    @property
    def active_provider_name(self) -> str | None:
        """Name of the active provider, or None."""
        if isinstance(self._registry, SingleSelectionProviderRegistry):
            return self._registry.active_name
        return None

    def supports_delete(self, name: str | None = None) -> bool:
        """Return True if the named (or active) provider implements delete."""
        provider = self._resolve(name)
        return supports_delete(provider)

    def list_providers(self) -> list[dict[str, Any]]:
        """List registered providers with their capabilities.

        Returns:
            List of provider descriptor dicts in registration order.
        """
        active = self.active_provider_name
        descriptors = []
        for provider_name in self._registry.list_names():
            provider = self._registry.get_by_name(provider_name)
            descriptors.append(
                {
                    "name": provider_name,
                    "type": type(provider).__name__,
                    "active": provider_name == active,
                    "supports_delete": supports_delete(provider),
                }
            )
        return descriptors

    # -- upload ----------------------------------------------------------

    async def upload(
        self,
        data: Payload,
        options: OptionsInput = None,
        *,
        provider: str | None = None,
    ) -> UploadResult:
        """Upload ``data`` to ``provider``, or to the active provider if None."""
        if provider is None:
            return await self.upload_active(data, options)
        return await self.upload_named(provider, data, options)

    async def upload_active(self, data: Payload, options: OptionsInput = None) -> UploadResult:
        """Upload ``data`` to the active provider.

        Raises:
            NoActiveProviderError: If no provider is active.
        """
        return await self._upload(None, normalize_payload(data), normalize_options(options))

    async def upload_named(
        self, name: str, data: Payload, options: OptionsInput = None
    ) -> UploadResult:
        """Upload ``data`` to the provider registered under ``name``.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
        """
        return await self._upload(name, normalize_payload(data), normalize_options(options))

    @traced_dispatch("upload")
    async def _upload(
        self, name: str | None, data: bytes, options: UploadOptions | None
    ) -> UploadResult:
        provider = self._resolve(name)
        if not supports_upload(provider):
            raise UnsupportedOperationError("upload", provider_name=name)
        result: UploadResult = await provider.upload(data, options)
        logger.info(
            "Uploaded %d bytes via CDN provider %s: %s",
            len(data),
            self._label(name),
            result.url,
        )
        return result

    # -- download --------------------------------------------------------

    async def download(self, url: str, *, provider: str | None = None) -> bytes:
        """Download ``url`` from ``provider``, or from the active provider if None."""
        if provider is None:
            return await self.download_active(url)
        return await self.download_named(provider, url)

    async def download_active(self, url: str) -> bytes:
        """Download ``url`` from the active provider.

        Raises:
            NoActiveProviderError: If no provider is active.
            DownloadFailedError: If the default HTTP download gets a non-2xx response.
        """
        return await self._download(None, url)

    async def download_named(self, name: str, url: str) -> bytes:
        """Download ``url`` from the provider registered under ``name``.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
            DownloadFailedError: If the default HTTP download gets a non-2xx response.
        """
        return await self._download(name, url)

    @traced_dispatch("download")
    async def _download(self, name: str | None, url: str) -> bytes:
        provider = self._resolve(name)
        if supports_download(provider):
            return await provider.download(url)
        return await http_download(url, **self._http_options())

    # -- exists ----------------------------------------------------------

    async def exists(self, url: str, *, provider: str | None = None) -> bool:
        """Check ``url`` on ``provider``, or on the active provider if None."""
        if provider is None:
            return await self.exists_active(url)
        return await self.exists_named(provider, url)

    async def exists_active(self, url: str) -> bool:
        """Check ``url`` on the active provider. False if none is active."""
        return await self._exists(None, url)

    async def exists_named(self, name: str, url: str) -> bool:
        """Check ``url`` on the provider registered under ``name``.

        False if ``name`` is not registered.
        """
        return await self._exists(name, url)

    @traced_dispatch("exists")
    async def _exists(self, name: str | None, url: str) -> bool:
        try:
            provider = self._resolve(name)
        except (ProviderNotFoundError, NoActiveProviderError) as exc:
            logger.debug("Existence check for %s not dispatched: %s", url, exc)
            return False
        if supports_exists(provider):
            return await provider.exists(url)
        return await http_exists(url, **self._http_options())

    # -- delete ----------------------------------------------------------

    async def delete(self, url: str, *, provider: str | None = None) -> DeleteResult:
        """Delete ``url`` from ``provider``, or from the active provider if None."""
        if provider is None:
            return await self.delete_active(url)
        return await self.delete_named(provider, url)

    async def delete_active(self, url: str) -> DeleteResult:
        """Delete ``url`` from the active provider.

        Raises:
            NoActiveProviderError: If no provider is active.
            UnsupportedOperationError: If the provider does not implement delete.
        """
        return await self._delete(None, url)

    async def delete_named(self, name: str, url: str) -> DeleteResult:
        """Delete ``url`` from the provider registered under ``name``.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
            UnsupportedOperationError: If the provider does not implement delete.
        """
        return await self._delete(name, url)

    @traced_dispatch("delete")
    async def _delete(self, name: str | None, url: str) -> DeleteResult:
        provider = self._resolve(name)
        if not supports_delete(provider):
            raise UnsupportedOperationError("delete", provider_name=name)
        result: DeleteResult = await provider.delete(url)
        if result.success:
            logger.info("Deleted via CDN provider %s: %s", self._label(name), url)
        else:
            logger.info(
                "Delete via CDN provider %s failed for %s: %s",
                self._label(name),
                url,
                result.message,
            )
        return result

    # -- helpers ---------------------------------------------------------

    def _selection_registry(self) -> SingleSelectionProviderRegistry:
        if not isinstance(self._registry, SingleSelectionProviderRegistry):
            raise UnsupportedOperationError(
                "set_active",
                message="Registry does not support an active CDN provider",
            )
        return self._registry

    def _http_options(self) -> dict[str, Any]:
        if self._settings is None:
            self._settings = load_settings()
        return {
            "timeout_seconds": self._settings.http_timeout_seconds,
            "follow_redirects": self._settings.http_follow_redirects,
        }

    def _resolve(self, name: str | None) -> Any:
        if name is None:
            provider = self.get_active_provider()
        else:
            provider = self._registry.get_by_name(name)
        logger.debug("Resolved CDN provider %s -> %s", self._label(name), type(provider).__name__)
        return provider

    def _label(self, name: str | None) -> str:
        if name is not None:
            return name
        return f"<active:{self.active_provider_name}>"


def create_cdn_service(
    providers: Mapping[str, Any],
    *,
    active: str | None = None,
    settings: CDNSettings | None = None,
) -> CDNService:
    """Create a CDNService with ``providers`` registered.

    Args:
        providers: Mapping of provider name to an already constructed provider.
        active: Name to activate. Falls back to ``settings.active_provider``.
        settings: Settings; loaded from the environment if None.

    Returns:
        Configured CDNService instance.

    Raises:
        ProviderNotFoundError: If the name to activate is not in ``providers``.
        CDNConfigError: If environment settings are malformed.
    """
    if settings is None:
        settings = load_settings()

    service = CDNService(settings=settings)
    for provider_name, provider in providers.items():
        service.register_provider(provider_name, provider)

    active_name = active if active is not None else settings.active_provider
    if active_name is not None:
        service.set_active_provider(active_name)

    return service
