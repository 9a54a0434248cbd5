from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PayloadError

from rover_console.core.errors import RemoteFetchError
from rover_console.metrics.prometheus import detection_fetch_latency_seconds, detection_fetch_total
from rover_console.schemas.alerts import DetectionReport, RemoteAlert

logger = logging.getLogger(__name__)

REMOTE_ID_PREFIX = "api-"
DETECTION_CATEGORY = "detection"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def priority_from_confidence(confidence: Optional[float]) -> str:
    # the detection feed never reports "critical"
    c = confidence or 0.0
    if c > 90:
        return "high"
    if c > 70:
        return "medium"
    return "low"


def _parse_ts(s: str | None) -> datetime | None:
    if not s:
        return None
    try:
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except ValueError:
        return None


def is_remote_id(alert_id: str) -> bool:
    return alert_id.startswith(REMOTE_ID_PREFIX)


def _fmt_number(value: Optional[float]) -> str:
    if value is None:
        return "?"
    return f"{value:g}"


def map_detection_report(report: DetectionReport) -> RemoteAlert:
    created_at = _parse_ts(report.timestamp)
    if created_at is None:
        logger.debug("detection %s has no usable timestamp: %r", report.id, report.timestamp)
        created_at = EPOCH

    title = f"{report.object_detected} Detected" if report.object_detected else "Detection Event"
    message = (
        f"Confidence: {_fmt_number(report.confidence)}% | "
        f"Distance: {_fmt_number(report.distance)}m | "
        f"Action: {report.action_taken or 'None'}"
    )
    return RemoteAlert(
        id=f"{REMOTE_ID_PREFIX}{report.id}",
        title=title,
        message=message,
        priority=priority_from_confidence(report.confidence),
        category=DETECTION_CATEGORY,
        status="active",
        created_at=created_at,
        updated_at=created_at,
    )


def map_detection_reports(records: list[Any]) -> list[RemoteAlert]:
    alerts: list[RemoteAlert] = []
    for raw in records:
        try:
            report = DetectionReport.model_validate(raw)
        except PayloadError as e:
            logger.warning("skipping malformed detection record %r: %s", raw, e)
            continue
        alerts.append(map_detection_report(report))
    return alerts


class RoverApiClient:
    """Async client for the rover's HTTP API.

    A bearer token is attached when one is configured. A 401 answer drops
    the token so later calls go out unauthenticated until a new one is set.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def clear_token(self) -> None:
        if self.token:
            logger.info("rover API rejected credentials; clearing stored token")
        self.token = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            r = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"{method} {path} failed: {e}") from e
        if r.status_code == 401:
            self.clear_token()
        if r.status_code >= 400:
            raise RemoteFetchError(f"{method} {path} returned HTTP {r.status_code}")
        return r

    async def fetch_detections(self, limit: int = 50) -> list[RemoteAlert]:
        start = time.perf_counter()
        try:
            r = await self._request("GET", "/api/reports", params={"limit": limit})
            try:
                data = r.json()
            except ValueError as e:
                raise RemoteFetchError("detection reports are not valid JSON") from e
            if not isinstance(data, list):
                raise RemoteFetchError("detection reports payload is not a list")
        except RemoteFetchError:
            detection_fetch_total.labels(outcome="error").inc()
            raise
        finally:
            detection_fetch_latency_seconds.observe(time.perf_counter() - start)

        detection_fetch_total.labels(outcome="ok").inc()
        alerts = map_detection_reports(data)
        logger.debug("loaded %d alerts from rover API", len(alerts))
        return alerts

    async def send_telemetry(self, payload: dict[str, Any]) -> Any:
        r = await self._request("POST", "/api/rover/update", json=payload)
        try:
            return r.json()
        except ValueError:
            return None

    async def check_health(self) -> Any:
        r = await self._request("GET", "/")
        try:
            return r.json()
        except ValueError:
            return {"status_code": r.status_code, "body": r.text}

    async def aclose(self) -> None:
        await self._client.aclose()
