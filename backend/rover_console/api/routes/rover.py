from typing import Any

from celery import Celery
from fastapi import APIRouter, Depends, HTTPException

from rover_console.api.deps import get_rover_client
from rover_console.core.config import settings
from rover_console.core.errors import RemoteFetchError
from rover_console.services.detection_feed import RoverApiClient

router = APIRouter(prefix="/rover", tags=["rover"])

celery_app = Celery(
    "rover_console_api",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)


@router.post("/telemetry", status_code=202)
def send_telemetry(payload: dict[str, Any]):
    # forwarded to the rover API by the worker; no response contract upstream
    res = celery_app.send_task("forward_telemetry", args=[payload])
    return {"queued": True, "task_id": getattr(res, "id", None)}


@router.get("/health")
async def rover_health(client: RoverApiClient = Depends(get_rover_client)):
    try:
        upstream = await client.check_health()
    except RemoteFetchError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"status": "ok", "upstream": upstream}
