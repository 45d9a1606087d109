"""OpenTelemetry instrumentation and observability utilities."""

from walkin_pos.observability.config import configure_logging, setup_observability
from walkin_pos.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
