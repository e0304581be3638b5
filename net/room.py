# net/room.py
import copy, itertools, logging, threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional

Listener = Callable[[Any], Any]


class Room:
    """
    A pub/sub channel shared by the participants of one piano.

    send() reaches every other participant, never the sender. Inbound
    messages are queued and only handed to listeners by poll(), which the
    main loop calls, so listeners never run on a network thread.
    """
    def __init__(self):
        self._listeners: List[Listener] = []
        self._inbox: Deque[Any] = deque()
        self._lock = threading.Lock()

    def subscribe(self, fn: Listener):
        if fn not in self._listeners:
            self._listeners.append(fn)

    def send(self, message: dict) -> None:
        raise NotImplementedError

    def _deliver(self, message: Any):
        with self._lock:
            self._inbox.append(message)

    def poll(self, limit: Optional[int] = None) -> int:
        n = 0
        while limit is None or n < limit:
            with self._lock:
                if not self._inbox:
                    break
                msg = self._inbox.popleft()
            n += 1
            for fn in list(self._listeners):
                try:
                    fn(msg)
                except Exception:
                    logging.exception("Room listener failed on %r", msg)
        return n

    @property
    def backlog(self) -> int:
        with self._lock:
            return len(self._inbox)

    def close(self):
        self._listeners.clear()


class LocalHub:
    """In-process room server: fans each message out to every other member."""
    def __init__(self):
        self.members: List["LocalRoom"] = []
        self._ids = itertools.count(1)

    def join(self) -> "LocalRoom":
        room = LocalRoom(self, next(self._ids))
        self.members.append(room)
        return room

    def leave(self, room: "LocalRoom"):
        if room in self.members:
            self.members.remove(room)

    def broadcast(self, sender: "LocalRoom", message: dict):
        for peer in list(self.members):
            if peer is not sender:
                # 每個接收者拿到自己的副本，等同經過序列化
                peer._deliver(copy.deepcopy(message))


class LocalRoom(Room):
    def __init__(self, hub: LocalHub, client_id: int):
        super().__init__()
        self.hub = hub
        self.client_id = client_id
        self.sent: List[dict] = []

    def send(self, message: dict) -> None:
        self.sent.append(message)
        self.hub.broadcast(self, message)

    def close(self):
        super().close()
        self.hub.leave(self)
