"""CDN dispatch configuration.

Settings are read from the environment. Backend-specific configuration is
never parsed here: providers arrive already constructed.

Environment Variables:
    CDN_ACTIVE_PROVIDER: Provider name to activate when building a service
        from a provider mapping (default: unset, no active provider)
    CDN_HTTP_TIMEOUT_SECONDS: Timeout for the default HTTP download/exists
        behaviors (default: 30.0)
    CDN_HTTP_FOLLOW_REDIRECTS: "1"/"true"/"yes" or "0"/"false"/"no"
        (default: true)
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field

from cdnrouter.errors import CDNConfigError

logger = logging.getLogger(__name__)

CDN_ACTIVE_PROVIDER_ENV = "CDN_ACTIVE_PROVIDER"
CDN_HTTP_TIMEOUT_SECONDS_ENV = "CDN_HTTP_TIMEOUT_SECONDS"
CDN_HTTP_FOLLOW_REDIRECTS_ENV = "CDN_HTTP_FOLLOW_REDIRECTS"

DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0

_TRUTHY = ("1", "true", "yes")
_FALSY = ("0", "false", "no")


class CDNSettings(BaseModel):
    """Runtime settings for the dispatch layer.

    Attributes:
        active_provider: Name to activate after registering providers.
        http_timeout_seconds: Timeout applied by the default HTTP behaviors.
        http_follow_redirects: Whether default HTTP behaviors follow redirects.
    """

    active_provider: str | None = None
    http_timeout_seconds: float = Field(gt=0, default=DEFAULT_HTTP_TIMEOUT_SECONDS)
    http_follow_redirects: bool = True


def _get_env_str(key: str) -> str | None:
    val = os.environ.get(key, "").strip()
    return val or None


def _get_env_bool(key: str, default: bool) -> bool:
    val = os.environ.get(key, "").strip().lower()
    if not val:
        return default
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    raise CDNConfigError(f"{key} must be one of {_TRUTHY + _FALSY}, got {val!r}")


def _get_env_positive_float(key: str, default: float) -> float:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise CDNConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise CDNConfigError(f"{key} must be positive, got {raw!r}")
    return value


def load_settings() -> CDNSettings:
    """Load settings from the environment.

    Returns:
        CDNSettings populated from environment variables and defaults.

    Raises:
        CDNConfigError: If a variable is present but malformed.
    """
    settings = CDNSettings(
        active_provider=_get_env_str(CDN_ACTIVE_PROVIDER_ENV),
        http_timeout_seconds=_get_env_positive_float(
            CDN_HTTP_TIMEOUT_SECONDS_ENV, DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
        http_follow_redirects=_get_env_bool(CDN_HTTP_FOLLOW_REDIRECTS_ENV, True),
    )
    logger.debug(
        "Loaded CDN settings: active=%s, timeout=%s, follow_redirects=%s",
        settings.active_provider,
        settings.http_timeout_seconds,
        settings.http_follow_redirects,
    )
    return settings
