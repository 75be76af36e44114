"""
Broker contract - messaging endpoints that send and receive chat events.
The preference store only consumes these to derive lookup scopes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Tuple


@dataclass
class Evt:
    """A chat event flowing in or out of a broker."""
    body: str
    room: str = ""
    room_id: str = ""
    user: str = ""
    user_id: str = ""
    broker: str = ""  # name of the broker instance the event came from
    time: datetime = field(default_factory=datetime.now)
    is_chat: bool = True
    original: Any = None

    def reply(self, body: str) -> "Evt":
        """Build an outbound event addressed to the same room."""
        return Evt(
            body=body,
            room=self.room,
            room_id=self.room_id,
            user=self.user,
            user_id=self.user_id,
            broker=self.broker,
            is_chat=self.is_chat,
            original=self,
        )

    def scope(self, plugin: str = "") -> Tuple[str, str, str, str]:
        """(user, channel, broker, plugin) tuple for preference lookups."""
        return (self.user, self.room, self.broker, plugin)


class Broker(ABC):
    """
    An instance of a broker that can send/receive events.
    """

    @abstractmethod
    def name(self) -> str:
        """Instance name, used as the broker scope of preferences."""
        pass

    @abstractmethod
    def send(self, evt: Evt) -> None:
        pass

    @abstractmethod
    def stream(self) -> Iterator[Evt]:
        """
        Yield inbound events until the broker shuts down.

        Returns:
            Iterator over events; blocks while waiting for the next one
        """
        pass


class IdTranslator(ABC):
    """Optional broker capability: map human readable names to internal ids."""

    @abstractmethod
    def room_id_to_name(self, room_id: str) -> str:
        pass

    @abstractmethod
    def room_name_to_id(self, name: str) -> str:
        pass

    @abstractmethod
    def user_id_to_name(self, user_id: str) -> str:
        pass

    @abstractmethod
    def user_name_to_id(self, name: str) -> str:
        pass


class BrokerConfig(ABC):
    """Creates named broker instances."""

    @abstractmethod
    def new_broker(self, name: str) -> Broker:
        pass


def supports_id_translation(broker: Broker) -> bool:
    return isinstance(broker, IdTranslator)
