import asyncio

import pytest
from fastapi import WebSocketDisconnect

from conftest import token_for

from ot_dashboard.services.realtime import ChangeNotifier, build_event


class _Socket:
    def __init__(self, fail=False):
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


def test_broadcast_reaches_subscribers_and_drops_failed_ones():
    notifier = ChangeNotifier()
    alive, dead = _Socket(), _Socket(fail=True)

    async def scenario():
        await notifier.connect(alive)
        await notifier.connect(dead)
        await notifier.broadcast(build_event("UPDATE", 7, "24-0007"))

    asyncio.run(scenario())

    assert alive.accepted
    assert alive.sent[0]["event"] == "UPDATE"
    assert alive.sent[0]["id"] == 7
    assert alive.sent[0]["table"] == "work_order"
    assert notifier.connection_count == 1


def test_socket_with_invalid_token_is_closed(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/realtime/work-orders?token=basura"):
            pass
    assert exc.value.code == 1008


def test_socket_with_valid_token_is_accepted(client, consulta):
    with client.websocket_connect(f"/api/realtime/work-orders?token={token_for(consulta)}"):
        pass
