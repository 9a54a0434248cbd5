from fastapi import APIRouter, Depends

from rover_console.api.deps import get_board
from rover_console.services.alert_board import AlertBoard

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
async def stats(board: AlertBoard = Depends(get_board)):
    alerts = board.view().alerts

    by_priority: dict[str, int] = {}
    by_status: dict[str, int] = {}
    by_category: dict[str, int] = {}
    by_source: dict[str, int] = {}

    for a in alerts:
        by_priority[a.priority] = by_priority.get(a.priority, 0) + 1
        by_status[a.status] = by_status.get(a.status, 0) + 1
        by_category[a.category] = by_category.get(a.category, 0) + 1
        by_source[a.source] = by_source.get(a.source, 0) + 1

    # last 10 local alerts
    latest = board.local[:10]

    return {
        "totals": {
            "alerts": len(alerts),
            "notices": len(board.notices),
        },
        "by_priority": by_priority,
        "by_status": by_status,
        "by_category": by_category,
        "by_source": by_source,
        "fetch_state": dict(board.fetch_state),
        "latest_local_alerts": [a.model_dump(mode="json") for a in latest],
    }
