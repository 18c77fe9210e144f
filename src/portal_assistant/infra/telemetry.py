"""OpenTelemetry bootstrap — tracing initialisation and span names.

``init_telemetry`` configures a ``TracerProvider`` with an OTLP HTTP
exporter when ``TracingConfig.enabled`` is set.  When disabled the
module is a no-op and ``tracer`` hands out non-recording spans, so
call sites never need to check.

Usage::

    from portal_assistant.infra.telemetry import SPAN_CONTEXT_FETCH, tracer

    with tracer.start_as_current_span(SPAN_CONTEXT_FETCH) as span:
        ...
"""

from __future__ import annotations

import logging

from opentelemetry import trace

from portal_assistant.configs.system import TracingConfig

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("portal_assistant")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_CONTEXT_FETCH = "context.fetch"
SPAN_COMPLETION_REQUEST = "completion.request"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_CONTEXT_ROLE = "context.role"
ATTR_CONTEXT_STATUS = "context.status"
ATTR_CONTEXT_ASSIGNMENTS = "context.assignment_count"
ATTR_CONTEXT_SUBMISSIONS = "context.submission_count"

ATTR_COMPLETION_MODEL = "completion.model"
ATTR_COMPLETION_HISTORY_LEN = "completion.history_len"
ATTR_COMPLETION_STATUS_CODE = "completion.status_code"


def init_telemetry(app: object | None, settings: TracingConfig) -> bool:
    """Initialise the OTEL ``TracerProvider`` and auto-instrumentations.

    Must run before the application starts serving, since the FastAPI
    instrumentor adds ASGI middleware.  Returns ``True`` when tracing
    was enabled.
    """
    if not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return False

    if not settings.endpoint:
        logger.warning(
            "Tracing enabled but no OTLP endpoint configured; "
            "skipping OpenTelemetry setup."
        )
        return False

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
    )
    trace.set_tracer_provider(provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app, excluded_urls=",".join(settings.excluded_urls)
        )

    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    HTTPXClientInstrumentor().instrument()

    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )
    return True

