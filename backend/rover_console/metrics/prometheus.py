from prometheus_client import Counter, Gauge, Histogram

alerts_logged_total = Counter(
    "alerts_logged_total",
    "Total number of alerts logged locally",
    ["priority"],
)

alert_mutations_total = Counter(
    "alert_mutations_total",
    "Alert status changes and deletions, including rejected ones",
    ["action", "outcome"],
)

detection_fetch_total = Counter(
    "detection_fetch_total",
    "Detection report fetches from the rover API",
    ["outcome"],
)

detection_fetch_latency_seconds = Histogram(
    "detection_fetch_latency_seconds",
    "Latency of fetching detection reports from the rover API",
)

store_errors_total = Counter(
    "store_errors_total",
    "Local database operations that failed",
    ["store", "operation"],
)

board_alerts = Gauge(
    "board_alerts",
    "Alerts currently held by the board",
    ["source"],
)

api_request_latency_seconds = Histogram(
    "api_request_latency_seconds",
    "API request latency in seconds",
    ["route", "method", "status"],
)
