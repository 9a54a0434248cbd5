import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from rover_console.api.deps import get_board, get_pollers
from rover_console.core.errors import GuardViolation, ValidationError
from rover_console.schemas.alerts import AlertCreate, AlertStatusUpdate, PriorityFilter
from rover_console.services.alert_board import AlertBoard
from rover_console.services.polling import PeriodicRefresh

router = APIRouter(prefix="/alerts", tags=["alerts"])

KEEPALIVE_SECONDS = 15.0


async def _find_or_404(board: AlertBoard, alert_id: str):
    alert = await board.find(alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert


@router.get("")
async def list_alerts(
    priority: PriorityFilter = Query(default="all"),
    board: AlertBoard = Depends(get_board),
):
    return board.view(priority).model_dump(mode="json")


@router.post("", status_code=201)
async def create_alert(body: AlertCreate, board: AlertBoard = Depends(get_board)):
    try:
        alert = await board.add_alert(body.title, body.message, body.priority, body.category)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return alert.model_dump(mode="json")


@router.get("/notices")
async def list_notices(board: AlertBoard = Depends(get_board)):
    return {"notices": [n.model_dump(mode="json") for n in reversed(board.notices)]}


@router.post("/refresh")
async def refresh_alerts(
    board: AlertBoard = Depends(get_board),
    pollers: list[PeriodicRefresh] = Depends(get_pollers),
):
    if pollers:
        await asyncio.gather(*(p.trigger() for p in pollers))
    else:
        await board.refresh()
    return board.view().model_dump(mode="json")


@router.get("/stream")
async def stream_alerts(
    priority: PriorityFilter = Query(default="all"),
    board: AlertBoard = Depends(get_board),
):
    async def events():
        changed = asyncio.Event()
        unsubscribe = board.subscribe(changed.set)
        try:
            while not board.disposed:
                changed.clear()
                yield f"data: {board.view(priority).model_dump_json()}\n\n".encode("utf-8")
                while True:
                    try:
                        await asyncio.wait_for(changed.wait(), timeout=KEEPALIVE_SECONDS)
                        break
                    except asyncio.TimeoutError:
                        if board.disposed:
                            return
                        yield b": keep-alive\n\n"
        finally:
            unsubscribe()

    return StreamingResponse(events(), media_type="text/event-stream")


@router.get("/{alert_id}")
async def get_alert(alert_id: str, board: AlertBoard = Depends(get_board)):
    return (await _find_or_404(board, alert_id)).model_dump(mode="json")


@router.patch("/{alert_id}")
async def update_alert_status(
    alert_id: str,
    body: AlertStatusUpdate,
    board: AlertBoard = Depends(get_board),
):
    alert = await _find_or_404(board, alert_id)
    try:
        updated = await board.update_status(alert, body.status)
    except GuardViolation as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if updated is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return updated.model_dump(mode="json")


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: str,
    confirm: bool = Query(default=False),
    board: AlertBoard = Depends(get_board),
):
    alert = await _find_or_404(board, alert_id)
    if alert.mutable and not confirm:
        raise HTTPException(status_code=400, detail="Deletion must be confirmed with confirm=true")
    try:
        deleted = await board.delete_alert(alert)
    except GuardViolation as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"deleted": True, "id": alert_id}
