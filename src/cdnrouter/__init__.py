"""cdnrouter: uniform dispatch over named CDN providers.

Lets callers upload, download, delete and probe blobs without knowing which
backend stores them. Providers register under distinct names; one may be
marked active for calls that omit a name.

Components:
- CDNProvider / CDNProviderProtocol: provider capability contract
- ProviderRegistry / SingleSelectionProviderRegistry: named provider maps
- CDNService: dispatch facade with input normalization and error taxonomy

Environment Variables:
    CDN_ACTIVE_PROVIDER: Provider to activate in create_cdn_service
    CDN_HTTP_TIMEOUT_SECONDS: Timeout for the default HTTP behaviors
    CDN_OTEL_ENABLED: Set to "1" to emit dispatch spans
"""

from cdnrouter.config import CDNSettings, load_settings
from cdnrouter.errors import (
    CDNConfigError,
    CDNError,
    DownloadFailedError,
    NoActiveProviderError,
    ProviderNotFoundError,
    UnsupportedOperationError,
)
from cdnrouter.models import DeleteResult, UploadOptions, UploadResult
from cdnrouter.provider import CDNProvider, CDNProviderProtocol
from cdnrouter.registry import ProviderRegistry, SingleSelectionProviderRegistry
from cdnrouter.service import CDNService, create_cdn_service

__all__ = [
    # Provider contract
    "CDNProvider",
    "CDNProviderProtocol",
    # Models
    "UploadOptions",
    "UploadResult",
    "DeleteResult",
    # Registry
    "ProviderRegistry",
    "SingleSelectionProviderRegistry",
    # Service
    "CDNService",
    "create_cdn_service",
    # Config
    "CDNSettings",
    "load_settings",
    # Errors
    "CDNError",
    "CDNConfigError",
    "ProviderNotFoundError",
    "NoActiveProviderError",
    "UnsupportedOperationError",
    "DownloadFailedError",
]
