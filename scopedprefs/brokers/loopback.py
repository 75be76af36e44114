"""
In-process broker backed by a queue.
Used for tests, local development and wiring plugins without a chat network.
"""

import queue
from typing import Dict, Iterator, List, Optional

from .base import Broker, BrokerConfig, Evt, IdTranslator
from ..util.logging import logger

_CLOSED = object()


class LoopbackBroker(Broker, IdTranslator):
    """
    Broker whose inbound stream is fed by inject() and whose outbound
    events are collected in ``sent``.
    """

    def __init__(self, name: str, rooms: Optional[Dict[str, str]] = None,
                 users: Optional[Dict[str, str]] = None):
        self._name = name
        self._inbox: "queue.Queue" = queue.Queue()
        self.sent: List[Evt] = []
        # id -> name directories
        self.rooms = dict(rooms or {})
        self.users = dict(users or {})

    def name(self) -> str:
        return self._name

    def send(self, evt: Evt) -> None:
        if not evt.broker:
            evt.broker = self._name
        self.sent.append(evt)
        logger.debug(f"{self._name}: sent to {evt.room or evt.room_id}: {evt.body[:50]}")

    def inject(self, evt: Evt) -> None:
        """Queue an inbound event for stream()."""
        if not evt.broker:
            evt.broker = self._name
        self._inbox.put(evt)

    def close(self) -> None:
        """End the stream once queued events are drained."""
        self._inbox.put(_CLOSED)

    def stream(self) -> Iterator[Evt]:
        while True:
            item = self._inbox.get()
            if item is _CLOSED:
                return
            yield item

    def room_id_to_name(self, room_id: str) -> str:
        return self.rooms.get(room_id, "")

    def room_name_to_id(self, name: str) -> str:
        for room_id, room_name in self.rooms.items():
            if room_name == name:
                return room_id
        return ""

    def user_id_to_name(self, user_id: str) -> str:
        return self.users.get(user_id, "")

    def user_name_to_id(self, name: str) -> str:
        for user_id, user_name in self.users.items():
            if user_name == name:
                return user_id
        return ""


class LoopbackConfig(BrokerConfig):
    """Creates LoopbackBroker instances sharing the same directories."""

    def __init__(self, rooms: Optional[Dict[str, str]] = None,
                 users: Optional[Dict[str, str]] = None):
        self.rooms = rooms or {}
        self.users = users or {}

    def new_broker(self, name: str) -> LoopbackBroker:
        return LoopbackBroker(name, rooms=self.rooms, users=self.users)
