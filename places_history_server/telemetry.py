"""Telemetry setup for Arize Phoenix tracing.

This module provides OpenTelemetry instrumentation for the Places History
server. Upstream SPARQL queries and resolver tiers are recorded as spans and
sent to Arize Phoenix when tracing is enabled.

Environment Variables:
    PHOENIX_ENABLED: Set to 'true' to enable tracing (default: false)
    PHOENIX_ENDPOINT: Phoenix collector URL (default: http://localhost:6006)
    PHOENIX_PROJECT_NAME: Project name in Phoenix UI (default: places-history-server)
"""

import os
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

# OpenInference semantic conventions for Phoenix
OPENINFERENCE_SPAN_KIND = "openinference.span.kind"
OPENINFERENCE_PROJECT_NAME = "openinference.project.name"


def is_tracing_enabled() -> bool:
    """Check if tracing is enabled via environment variable."""
    return os.getenv("PHOENIX_ENABLED", "false").lower() == "true"


def get_phoenix_endpoint() -> str:
    """Get the Phoenix collector endpoint."""
    return os.getenv("PHOENIX_ENDPOINT", "http://localhost:6006")


def get_project_name() -> str:
    """Get the project name for Phoenix."""
    return os.getenv("PHOENIX_PROJECT_NAME", "places-history-server")


def span_kind_for(span_name: str) -> str:
    """Map one of our span names to an OpenInference span kind."""
    name = span_name.lower()
    if name.startswith("upstream."):
        return "RETRIEVER"
    if name.startswith("tools/") or "tool" in name:
        return "TOOL"
    return "CHAIN"


class OpenInferenceKindProcessor(SpanProcessor):
    """Span processor that tags spans with an OpenInference kind.

    Mappings:
        - 'upstream.*' spans (SPARQL queries) -> RETRIEVER kind
        - MCP tool spans -> TOOL kind
        - everything else (resolver tiers, requests) -> CHAIN kind
    """

    def on_start(self, span: Any, parent_context: Any = None) -> None:
        """Called when a span starts. Sets OpenInference span kind."""
        if not hasattr(span, "name") or not hasattr(span, "set_attribute"):
            return
        span.set_attribute(OPENINFERENCE_SPAN_KIND, span_kind_for(span.name))

    def on_end(self, span: ReadableSpan) -> None:
        """Called when a span ends. No-op for this processor."""
        pass

    def shutdown(self) -> None:
        """Shutdown the processor."""
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Force flush any buffered spans."""
        return True


_tracer_provider: TracerProvider | None = None


def initialize_tracing() -> TracerProvider | None:
    """Initialize OpenTelemetry tracing for Phoenix.

    Sets up the OTLP exporter to send traces to Phoenix and configures
    the OpenInference span-kind processor.

    Returns:
        TracerProvider if tracing is enabled, None otherwise.
    """
    global _tracer_provider

    if not is_tracing_enabled():
        return None

    if _tracer_provider is not None:
        return _tracer_provider

    # Create OTLP exporter for Phoenix
    endpoint = f"{get_phoenix_endpoint()}/v1/traces"
    exporter = OTLPSpanExporter(endpoint=endpoint)

    resource = Resource.create({OPENINFERENCE_PROJECT_NAME: get_project_name()})
    _tracer_provider = TracerProvider(resource=resource)

    # Add the OpenInference processor first (modifies spans)
    _tracer_provider.add_span_processor(OpenInferenceKindProcessor())

    # Add the batch exporter (sends spans to Phoenix)
    _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(_tracer_provider)
    return _tracer_provider


def get_tracer(name: str = "places-history-server") -> trace.Tracer:
    """Get a tracer instance for manual instrumentation.

    Args:
        name: Name of the tracer (appears in Phoenix UI)

    Returns:
        A Tracer instance (no-op if tracing disabled)
    """
    return trace.get_tracer(name)
