"""WebSocket connections for the two seats of each table."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import WebSocket
from fastapi.websockets import WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class SeatConnection:
    """A seated player's socket."""

    __slots__ = ("ws", "player_id")

    def __init__(self, ws: WebSocket, player_id: str) -> None:
        self.ws = ws
        self.player_id = player_id

    async def send(self, text: str) -> bool:
        """Send text; False means the socket is gone."""
        try:
            await self.ws.send_text(text)
        except (WebSocketDisconnect, RuntimeError, OSError):
            logger.debug("Send to %s failed", self.player_id, exc_info=True)
            return False
        return True


class ConnectionManager:
    """At most one live socket per (game code, player id)."""

    def __init__(self) -> None:
        # game_code -> {player_id -> SeatConnection}
        self._seats: dict[str, dict[str, SeatConnection]] = {}

    async def connect(self, code: str, player_id: str, ws: WebSocket) -> SeatConnection:
        await ws.accept()
        conn = SeatConnection(ws, player_id)

        room = self._seats.setdefault(code, {})
        old = room.get(player_id)
        if old is not None and old.ws.client_state == WebSocketState.CONNECTED:
            # Stale tab for the same seat
            await old.ws.close(code=4001, reason="Replaced by new connection")
        room[player_id] = conn

        logger.info("WS connect: game=%s player=%s", code, player_id)
        return conn

    def disconnect(self, code: str, player_id: str, conn: Optional[SeatConnection] = None) -> None:
        """Drop a seat's socket; with ``conn`` given, only if it is still the current one."""
        room = self._seats.get(code)
        if room is None:
            return
        existing = room.get(player_id)
        if existing is None or (conn is not None and existing is not conn):
            return
        del room[player_id]
        if not room:
            del self._seats[code]
        logger.info("WS disconnect: game=%s player=%s", code, player_id)

    async def send_to_player(self, code: str, player_id: str, message: str) -> None:
        conn = self._seats.get(code, {}).get(player_id)
        if conn is not None and not await conn.send(message):
            self.disconnect(code, player_id, conn)

    async def broadcast_to_all(self, code: str, message: str) -> None:
        for player_id, conn in list(self._seats.get(code, {}).items()):
            if not await conn.send(message):
                self.disconnect(code, player_id, conn)

    def get_connected_player_ids(self, code: str) -> set[str]:
        return set(self._seats.get(code, {}))


manager = ConnectionManager()
