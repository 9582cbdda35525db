"""cdnrouter observability module.

Provides OpenTelemetry tracing setup for dispatch spans.
"""

from cdnrouter.observability.tracing import TracingConfigError, configure_tracing

__all__ = ["TracingConfigError", "configure_tracing"]
