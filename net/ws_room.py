# net/ws_room.py
"""
Room over a broadcast websocket relay.

The relay is expected to forward every text frame to every connection
(possibly including the sender). Frames are wrapped in an envelope carrying
the sender's client id and the room name, so echoes of our own messages and
traffic for other rooms are dropped here.
"""

import json, logging, threading, uuid
from typing import Any, Optional

import websocket

from net.room import Room


class WebSocketRoom(Room):
    """Receive loop runs on a daemon thread and only fills the inbox."""

    def __init__(self, url: str, room: str = "lobby", reconnect: int = 5):
        super().__init__()
        self.url = url
        self.room = room
        self.reconnect = reconnect
        self.client_id = uuid.uuid4().hex
        self._ws: Optional[websocket.WebSocketApp] = None
        self._thread: Optional[threading.Thread] = None
        self._connected = False
        self._send_lock = threading.Lock()

    # ---------- lifecycle ----------
    def connect(self) -> "WebSocketRoom":
        if self._thread is not None:
            return self
        self._ws = websocket.WebSocketApp(
            self.url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
        )
        self._thread = threading.Thread(target=self._run, name="ws-room", daemon=True)
        self._thread.start()
        logging.info("[WS] connecting to %s (room %s)", self.url, self.room)
        return self

    def _run(self):
        self._ws.run_forever(reconnect=self.reconnect)

    def close(self):
        super().close()
        ws, self._ws = self._ws, None
        if ws is not None:
            ws.close()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        self._connected = False
        logging.info("[WS] disconnected")

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ---------- outbound ----------
    def wrap(self, message: dict) -> str:
        return json.dumps({"from": self.client_id, "room": self.room, "data": message})

    def send(self, message: dict) -> None:
        if not (self._ws and self._connected):
            logging.debug("[WS] not connected; dropping %r", message)
            return
        with self._send_lock:
            self._ws.send(self.wrap(message))

    # ---------- inbound ----------
    def unwrap(self, raw: Any) -> Optional[Any]:
        """Payload of a relay frame, or None for our own echo / other rooms / junk."""
        try:
            env = json.loads(raw)
        except (TypeError, ValueError):
            return None
        if not isinstance(env, dict) or "data" not in env:
            return None
        if env.get("from") == self.client_id:
            return None
        if env.get("room", self.room) != self.room:
            return None
        return env["data"]

    def _on_message(self, ws, raw):
        data = self.unwrap(raw)
        if data is not None:
            self._deliver(data)

    def _on_open(self, ws):
        self._connected = True
        logging.info("[WS] connected")

    def _on_error(self, ws, error):
        logging.warning("[WS] error: %s", error)

    def _on_close(self, ws, status, msg):
        self._connected = False
        logging.info("[WS] closed %s %s", status, msg or "")
