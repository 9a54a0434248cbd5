import logging
import time

import httpx
from celery import Celery
from prometheus_client import CollectorRegistry, Counter, Histogram, push_to_gateway

from worker_config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "rover_console_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

worker_registry = CollectorRegistry()
telemetry_forwarded_total = Counter(
    "telemetry_forwarded_total",
    "Telemetry payloads forwarded to the rover API",
    ["outcome"],
    registry=worker_registry,
)
telemetry_forward_latency_seconds = Histogram(
    "telemetry_forward_latency_seconds",
    "Latency of forwarding telemetry to the rover API",
    registry=worker_registry,
)


def _push_metrics():
    try:
        push_to_gateway(settings.pushgateway_url, job="rover-console-worker", registry=worker_registry)
    except OSError as e:
        logger.debug("pushgateway unavailable: %s", e)


def _http_client() -> httpx.Client:
    return httpx.Client(base_url=settings.rover_api_url.rstrip("/"), timeout=settings.rover_api_timeout)


def _headers() -> dict:
    headers = {"Content-Type": "application/json"}
    if settings.rover_api_token:
        headers["Authorization"] = f"Bearer {settings.rover_api_token}"
    return headers


@celery_app.task(name="forward_telemetry")
def forward_telemetry(payload: dict):
    """POST a telemetry payload to /api/rover/update once. No retry."""
    out = {"ok": False, "status_code": None}
    start = time.perf_counter()
    try:
        with _http_client() as client:
            r = client.post("/api/rover/update", json=payload, headers=_headers())
        out["status_code"] = r.status_code
        if r.status_code >= 400:
            out["error"] = f"HTTP {r.status_code}"
        else:
            out["ok"] = True
    except httpx.HTTPError as e:
        out["error"] = str(e)
    finally:
        telemetry_forward_latency_seconds.observe(time.perf_counter() - start)

    outcome = "ok" if out["ok"] else "error"
    telemetry_forwarded_total.labels(outcome=outcome).inc()
    if not out["ok"]:
        logger.warning("telemetry forward failed: %s", out.get("error"))

    _push_metrics()
    return out
