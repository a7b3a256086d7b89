import time

from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "violet_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "violet_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

ROUTING_OUTCOMES_TOTAL = get_or_create_metric(
    "violet_routing_outcomes_total",
    "Final state of each routed thought",
    Counter,
    labelnames=["state"],
)

EXTRACTION_FALLBACKS_TOTAL = get_or_create_metric(
    "violet_extraction_fallbacks_total",
    "Event drafts built by the fallback instead of the oracle",
    Counter,
)

INBOX_DEPTH = get_or_create_metric(
    "violet_inbox_depth", "Current items in Touch Later", Gauge
)


def record_request(endpoint: str, status: str, started: float) -> None:
    """Count one request and its latency (best-effort)."""
    try:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - started)
    except Exception:
        pass


def record_routing(result) -> None:
    """Count a routing outcome, and an extraction fallback if one was used."""
    try:
        ROUTING_OUTCOMES_TOTAL.labels(state=result.state.value).inc()
        if result.draft is not None and result.draft.source == "fallback":
            EXTRACTION_FALLBACKS_TOTAL.inc()
    except Exception:
        pass
