import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from pma.api import PmaSettings, create_app
from pma.api.hub import NotificationHub, notifications_socket


class FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_text(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


class BrokenReceiveSocket(FakeSocket):
    def __init__(self, hub):
        super().__init__()
        self.app = SimpleNamespace(state=SimpleNamespace(hub=hub))
        self.query_params = {"username": "carol", "userId": "3"}

    async def accept(self):
        pass

    async def receive(self):
        raise RuntimeError("transport lost")


def _create_client() -> TestClient:
    return TestClient(create_app(PmaSettings(database_url="sqlite+pysqlite:///:memory:")))


def test_join_and_disconnect_prune_groups():
    hub = NotificationHub()
    ws = FakeSocket()
    hub.clients.add(ws)

    assert hub.join(ws, "alice", 7) == ["user_alice", "userid_7"]
    assert hub.join(ws, None, "") == []

    hub.disconnect(ws)
    assert hub.clients == set()
    assert dict(hub.groups) == {}


def test_send_notification_routes_by_target():
    hub = NotificationHub()
    alice, bob = FakeSocket(), FakeSocket()
    hub.clients.update({alice, bob})
    hub.join(alice, "alice", 1)
    hub.join(bob, "bob", 2)

    by_name = asyncio.run(hub.send_notification({"message": "hi", "targetUsernames": ["bob"]}))
    by_id = asyncio.run(hub.send_notification({"message": "yo", "targetUserIds": [1]}))
    everyone = asyncio.run(hub.send_notification({"message": "all", "projectId": 4}))

    assert (by_name, by_id, everyone) == (1, 1, 2)
    assert len(alice.sent) == 2
    assert '"projectId": 4' in bob.sent[-1]


def test_failed_sockets_are_dropped():
    hub = NotificationHub()
    broken = FakeSocket(fail=True)
    hub.clients.add(broken)
    hub.join(broken, "ghost")

    assert asyncio.run(hub.broadcast({"event": "Ping"})) == 0
    assert broken not in hub.clients
    assert "user_ghost" not in hub.groups


def test_socket_authenticate_and_targeted_notification():
    client = _create_client()

    # Entering the client shares one event loop between both sockets.
    with client, client.websocket_connect("/hubs/notifications?username=alice") as alice:
        with client.websocket_connect("/hubs/notifications") as bob:
            bob.send_json({"method": "Authenticate", "username": "bob", "userId": 9})
            assert bob.receive_json() == {"event": "Authenticated", "data": ["user_bob", "userid_9"]}

            alice.send_text("not json")
            assert alice.receive_json() == {"event": "Error", "data": "Invalid JSON"}

            alice.send_json(
                {"method": "SendNotification", "type": "info", "message": "Review ready", "targetUsernames": ["bob"]}
            )
            received = bob.receive_json()

    assert received["event"] == "Notification"
    assert received["data"]["message"] == "Review ready"
    assert received["data"]["type"] == "info"


def test_binary_frame_closes_and_forgets_socket():
    client = _create_client()
    hub = client.app.state.hub

    with client.websocket_connect("/hubs/notifications?username=dana") as dana:
        assert "user_dana" in hub.groups
        dana.send_bytes(b"\x00\x01")
        with pytest.raises(WebSocketDisconnect) as closed:
            dana.receive_text()

    assert closed.value.code == 1003
    assert hub.clients == set()
    assert "user_dana" not in hub.groups


def test_unexpected_receive_error_still_disconnects():
    hub = NotificationHub()
    ws = BrokenReceiveSocket(hub)

    with pytest.raises(RuntimeError, match="transport lost"):
        asyncio.run(notifications_socket(ws))

    assert hub.clients == set()
    assert dict(hub.groups) == {}
