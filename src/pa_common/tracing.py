"""
Tracing hooks with OpenTelemetry.

Spans are always created through the global tracer provider. Until
setup_tracing() installs an SDK provider that is OpenTelemetry's no-op
provider, so instrumented code runs unchanged with tracing disabled.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, Status, StatusCode

logger = logging.getLogger(__name__)

_INSTRUMENTATION_NAME = "planet_auction"

_tracer_provider: TracerProvider | None = None


def setup_tracing(service_name: str, console_export: bool = False) -> TracerProvider:
    """
    Install an SDK tracer provider for the process.

    Args:
        service_name: Resource service name (e.g. "planet-auction-cli")
        console_export: If True, export finished spans to stdout

    Returns:
        The installed provider
    """
    global _tracer_provider  # noqa: PLW0603

    resource = Resource(attributes={SERVICE_NAME: service_name})
    _tracer_provider = TracerProvider(resource=resource)

    if console_export:
        _tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Configured console span exporter")

    trace.set_tracer_provider(_tracer_provider)
    logger.info("Initialized tracing for service: %s", service_name)
    return _tracer_provider


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(_INSTRUMENTATION_NAME)


@contextmanager
def create_span(name: str, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
    """
    Run the enclosed block in a span; exceptions are recorded and re-raised.

    Usage:
        with create_span("auction.settlement_unit", {"player_id": pid}) as span:
            ...
    """
    with get_tracer().start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value if isinstance(value, (bool, int, float)) else str(value))
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


def shutdown_tracing() -> None:
    """Flush pending spans. Safe to call when tracing was never set up."""
    global _tracer_provider  # noqa: PLW0603

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
        logger.info("Tracing shutdown complete")
