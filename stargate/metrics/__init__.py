# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "stargate_requests_total",
    "Total HTTP requests to the duty service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "stargate_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "stargate_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
PEOPLE_CREATED = Counter(
    "stargate_people_created_total",
    "Total people created",
)
DUTIES_CREATED = Counter(
    "stargate_duties_created_total",
    "Total duty assignments recorded",
    ["kind"],
)
DUTIES_REJECTED = Counter(
    "stargate_duties_rejected_total",
    "Duty creation requests rejected by validation",
    ["reason"],
)
DUTY_RETRIES = Counter(
    "stargate_duty_retries_total",
    "Duty transactions retried after a concurrent write conflict",
)
DUTY_CREATE_LATENCY = Histogram(
    "stargate_duty_create_seconds",
    "Time spent recording one duty assignment",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
