"""Prometheus metrics for the assistant.

All metrics use the ``portal_assistant_`` prefix and are served at
``/metrics`` by the application.
"""

from prometheus_client import Counter, Histogram

COMPLETION_REQUESTS_TOTAL = Counter(
    "portal_assistant_completion_requests_total",
    "Completion endpoint calls, by outcome",
    ["outcome"],  # "ok" | "configuration_error" | "transport_error" | "upstream_error"
)

COMPLETION_LATENCY_SECONDS = Histogram(
    "portal_assistant_completion_latency_seconds",
    "Latency of completion endpoint calls",
    buckets=(0.25, 0.5, 1, 2, 5, 10, 30, 60),
)

CONTEXT_FETCH_TOTAL = Counter(
    "portal_assistant_context_fetch_total",
    "Context snapshot fetches, by role and resulting status",
    ["role", "status"],  # status: "complete" | "partial" | "failed"
)

BUSY_REJECTIONS_TOTAL = Counter(
    "portal_assistant_busy_rejections_total",
    "Messages rejected because the session had a request in flight",
)
