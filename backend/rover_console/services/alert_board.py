from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Optional, Union

from starlette.concurrency import run_in_threadpool

from rover_console.core.errors import GuardViolation, RemoteFetchError, StorageError
from rover_console.metrics.prometheus import alert_mutations_total, board_alerts
from rover_console.schemas.alerts import AlertView, LocalAlert, Notice, RemoteAlert
from rover_console.services.alert_store import MAX_ROW_ID, LocalAlertStore
from rover_console.services.alert_view import merge_alerts
from rover_console.services.detection_feed import RoverApiClient, is_remote_id

logger = logging.getLogger(__name__)

READ_ONLY_UPDATE = "API alerts are read-only. Only manually logged alerts can be modified."
READ_ONLY_DELETE = "Cannot delete API alerts. They are synced from the server."
REMOTE_GONE = "This API alert is no longer reported by the server."

Listener = Callable[[], None]
AnyAlert = Union[LocalAlert, RemoteAlert]


class AlertBoard:
    """Latest local and remote alerts, plus everything that changes them.

    Runs on a single event loop. Listeners are called synchronously after
    each change and should only schedule work (e.g. put on a queue).
    """

    def __init__(
        self,
        store: LocalAlertStore,
        feed: RoverApiClient,
        detection_limit: int = 100,
        max_notices: int = 50,
    ) -> None:
        self._store = store
        self._feed = feed
        self._detection_limit = detection_limit
        self.local: list[LocalAlert] = []
        self.remote: list[RemoteAlert] = []
        self.notices: deque[Notice] = deque(maxlen=max_notices)
        self.fetch_state = {"local": "idle", "remote": "idle"}
        self._listeners: list[Listener] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    # -- subscriptions ------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        board_alerts.labels(source="local").set(len(self.local))
        board_alerts.labels(source="api").set(len(self.remote))
        for listener in list(self._listeners):
            listener()

    def notify(self, title: str, message: str, level: str = "info") -> Notice:
        notice = Notice(level=level, title=title, message=message)
        self.notices.append(notice)
        self._changed()
        return notice

    # -- reads --------------------------------------------------------------

    def view(self, priority_filter: str = "all") -> AlertView:
        return merge_alerts(self.local, self.remote, priority_filter)

    async def find(self, alert_id: str) -> Optional[AnyAlert]:
        for remote in self.remote:
            if remote.id == alert_id:
                return remote
        if is_remote_id(alert_id):
            # dropped by the last poll, or never synced
            self.notify("Info", REMOTE_GONE)
            return None
        if not (alert_id.isascii() and alert_id.isdigit()):
            return None
        row_id = int(alert_id)
        if row_id > MAX_ROW_ID:
            return None
        for local in self.local:
            if local.id == alert_id:
                return local
        # the local list may lag behind the database by one poll
        return await run_in_threadpool(self._store.get, row_id)

    # -- refresh ------------------------------------------------------------

    async def refresh_local(self) -> None:
        if self._disposed:
            return
        self.fetch_state["local"] = "fetching"
        try:
            alerts = await run_in_threadpool(self._store.list)
        except StorageError as e:
            if not self._disposed:
                self.notify("Storage Error", str(e), level="error")
            return
        finally:
            self.fetch_state["local"] = "idle"
        self.local = alerts
        self._changed()

    async def refresh_remote(self) -> None:
        if self._disposed:
            return
        self.fetch_state["remote"] = "fetching"
        try:
            alerts = await self._feed.fetch_detections(self._detection_limit)
        except RemoteFetchError as e:
            logger.warning("error loading alerts from rover API: %s", e)
            alerts = []
            if not self._disposed:
                self.notify("API Error", "Failed to fetch detection reports from server", level="error")
        finally:
            self.fetch_state["remote"] = "idle"

        if self._disposed:
            logger.debug("board disposed during fetch; dropping %d remote alerts", len(alerts))
            return
        self.remote = alerts
        self._changed()

    async def refresh(self) -> None:
        await asyncio.gather(self.refresh_remote(), self.refresh_local())

    # -- local mutations ----------------------------------------------------

    async def add_alert(
        self,
        title: str,
        message: str,
        priority: str = "medium",
        category: str = "general",
    ) -> LocalAlert:
        alert = await run_in_threadpool(self._store.add, title, message, priority, category)
        await self.refresh_local()
        return alert

    def _require_local(self, alert: AnyAlert, action: str, notice: str) -> LocalAlert:
        if not alert.mutable:
            alert_mutations_total.labels(action=action, outcome="rejected").inc()
            self.notify("Info", notice)
            raise GuardViolation(notice)
        return alert  # type: ignore[return-value]

    async def update_status(self, alert: AnyAlert, status: str) -> Optional[LocalAlert]:
        local = self._require_local(alert, "update", READ_ONLY_UPDATE)
        updated = await run_in_threadpool(self._store.update_status, local.row_id, status)
        alert_mutations_total.labels(action="update", outcome="ok" if updated else "missing").inc()
        await self.refresh_local()
        return updated

    async def delete_alert(self, alert: AnyAlert) -> bool:
        local = self._require_local(alert, "delete", READ_ONLY_DELETE)
        deleted = await run_in_threadpool(self._store.delete, local.row_id)
        alert_mutations_total.labels(action="delete", outcome="ok" if deleted else "missing").inc()
        await self.refresh_local()
        return deleted

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()
