"""
Realtime change-notification router.

Mounts under ``/api/realtime`` (prefix set in ``main.py``).

Endpoints:
    WS /work-orders?token=<jwt> — Receive an event for every committed change
                                  to the work-order data.

Browsers cannot set an ``Authorization`` header on a WebSocket handshake, so
the JWT travels as a query parameter.  An invalid token closes the socket
with code 1008 (policy violation) before it is accepted.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from ot_dashboard.database import SessionLocal
from ot_dashboard.services.auth_service import resolve_user_from_token
from ot_dashboard.services.realtime import notifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tiempo real"])


@router.websocket("/work-orders")
async def work_order_changes(
    websocket: WebSocket,
    token: str = Query(default=""),
) -> None:
    db = SessionLocal()
    try:
        user = resolve_user_from_token(db, token) if token else None
        email = user.email if user is not None else None
    finally:
        db.close()

    if email is None:
        logger.warning("realtime: rejected connection with invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notifier.connect(websocket)
    logger.info("realtime: subscribed user=%s", email)
    try:
        while True:
            # Incoming messages are ignored; the loop only detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("realtime: user=%s closed the connection", email)
    finally:
        await notifier.disconnect(websocket)
