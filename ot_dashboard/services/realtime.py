"""
Realtime change feed for the work-order tables.

Connected dashboards hold a WebSocket open on ``/api/realtime/work-orders``.
Every committed mutation publishes a small event (table, event type, id,
OT number) and clients react by reloading the full work-order set; events
carry no row data.

Routers schedule ``notifier.broadcast`` through FastAPI ``BackgroundTasks``
so that the send happens on the event loop after the response is produced,
never inside the synchronous service call.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


def build_event(event: str, work_order_id: int | None, ot: str | None = None) -> dict[str, Any]:
    """Return the payload announced for a change to the work-order table.

    Args:
        event: ``"INSERT"``, ``"UPDATE"`` or ``"RESTORE"``.
        work_order_id: Primary key of the changed order (``None`` for a
            whole-table restore).
        ot: Order number, for display only.
    """
    return {
        "table": "work_order",
        "event": event,
        "id": work_order_id,
        "ot": ot,
        "at": datetime.now(timezone.utc).isoformat(),
    }


class ChangeNotifier:
    """Registry of open sockets that receive work-order change events."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.info("realtime: client connected (total=%d)", self.connection_count)

    async def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info("realtime: client disconnected (total=%d)", self.connection_count)

    async def broadcast(self, payload: dict[str, Any]) -> None:
        """Send *payload* to every subscriber, dropping sockets that fail."""
        targets = list(self._connections)

        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_json(payload)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.warning("realtime: dropping subscriber after send error: %s", exc)
                stale.append(websocket)

        self._connections.difference_update(stale)

        logger.debug(
            "realtime: broadcast event=%s id=%s to %d client(s)",
            payload.get("event"), payload.get("id"), len(targets) - len(stale),
        )


notifier = ChangeNotifier()
