import threading
from typing import Dict, FrozenSet, NamedTuple, Optional, Set

from exceptions import InvalidRoomName
from logging_config import get_logger

logger = get_logger(__name__)


class JoinResult(NamedTuple):
    members: int
    previous: Optional[str]


class ConnectionRegistry:
    """Single source of truth for live connections and room membership.

    Holds two maps that always agree: connection id -> room name (``None``
    while unjoined) and room name -> member ids. Rooms exist only while they
    have members. Every public method runs under one lock, so the maps can be
    shared between the event loop and worker threads.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._connections: Dict[str, Optional[str]] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def register(self, connection_id: str) -> None:
        with self._lock:
            if connection_id in self._connections:
                logger.debug(f"Connection {connection_id} already registered")
                return
            self._connections[connection_id] = None
            logger.debug(f"Registered connection {connection_id} ({len(self._connections)} live)")

    def unregister(self, connection_id: str) -> Optional[str]:
        """Forget a connection. Returns the room it was in, if any.

        Unknown ids are ignored, so calling this twice is harmless.
        """
        with self._lock:
            if connection_id not in self._connections:
                logger.debug(f"Unregister ignored for unknown connection {connection_id}")
                return None
            room_name = self._leave(connection_id)
            del self._connections[connection_id]
            logger.debug(f"Unregistered connection {connection_id} ({len(self._connections)} live)")
            return room_name

    def join(self, connection_id: str, room_name: str) -> JoinResult:
        """Put a connection into ``room_name``, leaving any other room first.

        Returns the member count of the room after the join and the room that
        was left to make it, or ``None`` if the connection switched nothing.
        """
        if not isinstance(room_name, str) or not room_name:
            raise InvalidRoomName("Room name is required for join.")

        with self._lock:
            current = self._connections.get(connection_id)
            if current == room_name:
                return JoinResult(len(self._rooms[room_name]), None)
            previous = self._leave(connection_id)

            self._rooms.setdefault(room_name, set()).add(connection_id)
            self._connections[connection_id] = room_name
            member_count = len(self._rooms[room_name])
            logger.debug(f"Connection {connection_id} is now in room {room_name} ({member_count} members)")
            return JoinResult(member_count, previous)

    def room_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._connections.get(connection_id)

    def members_of(self, room_name: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._rooms.get(room_name, ()))

    def rooms(self) -> Dict[str, int]:
        """Snapshot of room name -> member count."""
        with self._lock:
            return {name: len(members) for name, members in self._rooms.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections

    def _leave(self, connection_id: str) -> Optional[str]:
        # caller holds the lock
        room_name = self._connections.get(connection_id)
        if room_name is None:
            return None
        members = self._rooms.get(room_name)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._rooms[room_name]
                logger.debug(f"Room {room_name} is empty, removed")
        self._connections[connection_id] = None
        return room_name
