"""Monitoring configuration for the bot."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Bot metrics
known_users = Gauge(
    "lexicalgem_known_users",
    "Number of users with an in-memory profile",
)

requests_total = Counter(
    "lexicalgem_requests_total",
    "Total number of commands received",
    ["command"],
)

# Word metrics
words_served = Counter(
    "lexicalgem_words_served_total",
    "Total number of words sent to users",
    ["source"],
)

cycle_resets = Counter(
    "lexicalgem_cycle_resets_total",
    "Total number of no-repeat cycle resets",
)

word_loads = Counter(
    "lexicalgem_word_loads_total",
    "Total number of word list loads",
    ["result"],
)

# Error metrics
error_count = Counter(
    "lexicalgem_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Performance metrics
request_duration = Histogram(
    "lexicalgem_request_duration_seconds",
    "Duration of bot requests in seconds",
    ["handler"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
