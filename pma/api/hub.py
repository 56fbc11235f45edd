"""Real-time notification hub over WebSocket.

Clients connect to ``/hubs/notifications?username=&userId=`` and are placed in
``user_{username}`` / ``userid_{userId}`` groups. They send JSON frames of the
form ``{"method": "...", ...}``:

- ``Authenticate`` joins extra groups.
- ``SendNotification`` fans the payload out to the named groups, or to every
  connected socket when no target is given.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Any, Iterable, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

__all__ = ["NotificationHub", "router", "user_group", "userid_group"]

logger = logging.getLogger(__name__)

router = APIRouter()


def user_group(username: str) -> str:
    return f"user_{username}"


def userid_group(user_id: Any) -> str:
    return f"userid_{user_id}"


class NotificationHub:
    """Tracks connected sockets and their group membership."""

    def __init__(self) -> None:
        self.clients: set[WebSocket] = set()
        self.groups: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.clients.add(ws)

    def disconnect(self, ws: WebSocket) -> None:
        self.clients.discard(ws)
        for name in list(self.groups):
            members = self.groups[name]
            members.discard(ws)
            if not members:
                del self.groups[name]

    def join(self, ws: WebSocket, username: Optional[str] = None, user_id: Any = None) -> list[str]:
        joined = []
        if username:
            joined.append(user_group(username))
        if user_id not in (None, ""):
            joined.append(userid_group(user_id))
        for name in joined:
            self.groups[name].add(ws)
        return joined

    def _targets(self, group_names: Iterable[str]) -> set[WebSocket]:
        targets: set[WebSocket] = set()
        for name in group_names:
            targets |= self.groups.get(name, set())
        return targets

    async def _send(self, sockets: Iterable[WebSocket], payload: dict) -> int:
        data = json.dumps(payload, default=str)
        delivered = 0
        for ws in list(sockets):
            try:
                await ws.send_text(data)
                delivered += 1
            except (RuntimeError, WebSocketDisconnect) as exc:
                logger.info("Dropping notification socket after send failure: %s", exc)
                self.disconnect(ws)
        return delivered

    async def broadcast(self, payload: dict) -> int:
        return await self._send(self.clients, payload)

    async def send_notification(self, message: dict) -> int:
        """Route a ``SendNotification`` frame; returns the number of deliveries."""

        payload = {
            "event": "Notification",
            "data": {
                "type": message.get("type"),
                "message": message.get("message"),
                "timestamp": message.get("timestamp"),
                "projectId": message.get("projectId"),
            },
        }
        usernames = message.get("targetUsernames") or []
        user_ids = message.get("targetUserIds") or []
        if usernames:
            return await self._send(self._targets(user_group(name) for name in usernames), payload)
        if user_ids:
            return await self._send(self._targets(userid_group(uid) for uid in user_ids), payload)
        return await self.broadcast(payload)


# ============================================================================
# WebSocket 엔드포인트
# ============================================================================


@router.websocket("/hubs/notifications")
async def notifications_socket(ws: WebSocket):
    hub: NotificationHub = ws.app.state.hub
    await hub.connect(ws)
    hub.join(ws, ws.query_params.get("username"), ws.query_params.get("userId"))
    try:
        while True:
            frame = await ws.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                logger.info("Closing notification socket after a binary frame")
                hub.disconnect(ws)
                await ws.close(code=status.WS_1003_UNSUPPORTED_DATA)
                break
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await ws.send_text(json.dumps({"event": "Error", "data": "Invalid JSON"}))
                continue
            if not isinstance(message, dict):
                continue

            method = message.get("method")
            if method == "Authenticate":
                groups = hub.join(ws, message.get("username"), message.get("userId"))
                await ws.send_text(json.dumps({"event": "Authenticated", "data": groups}))
            elif method == "SendNotification":
                await hub.send_notification(message)
            else:
                logger.debug("Ignoring hub method %r", method)
    except WebSocketDisconnect:
        logger.debug("Notification socket closed by client")
    finally:
        hub.disconnect(ws)
