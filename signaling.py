from typing import Any, Awaitable, Callable, Dict

from pydantic import ValidationError

from constants import JOIN_ACK_MESSAGE, NOT_IN_ROOM_MESSAGE, ROOM_REQUIRED_MESSAGE
from exceptions import InvalidRoomName, NotInRoom
from logging_config import get_logger
from registry import ConnectionRegistry
from schemas.signals import EventKind, JoinData, SignalEvent

logger = get_logger(__name__)

PEER_LEFT = "peer-left"
JOIN_ACK = "join-ack"
ERROR = "error"

Handler = Callable[[str, SignalEvent], Awaitable[None]]


class SignalingRouter:
    """Routes inbound events for every connection.

    Join and disconnect change room membership through the registry. Offers,
    answers and candidates are relayed verbatim to the other members of the
    sender's room. Payloads are never inspected.

    ``transport`` needs ``send(connection_id, event, data)`` and
    ``broadcast(connection_ids, event, data)`` coroutines.
    """

    def __init__(self, registry: ConnectionRegistry, transport):
        self.registry = registry
        self.transport = transport
        self._handlers: Dict[EventKind, Handler] = {
            EventKind.JOIN: self.on_join,
            EventKind.OFFER: self.on_signal,
            EventKind.ANSWER: self.on_signal,
            EventKind.CANDIDATE: self.on_signal,
            EventKind.DISCONNECT: self.on_disconnect,
            EventKind.MALFORMED: self.on_malformed,
        }
        missing = set(EventKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for event kinds: {sorted(k.value for k in missing)}")

    def connect(self, connection_id: str) -> None:
        self.registry.register(connection_id)
        logger.info(f"New client connected! ID: {connection_id}")

    async def dispatch(self, connection_id: str, event: SignalEvent) -> None:
        try:
            await self._handlers[event.kind](connection_id, event)
        except NotInRoom as e:
            logger.warning(f"Client {connection_id} sent {event.name} without joining a room")
            await self._reply(connection_id, ERROR, {"message": str(e)})

    async def on_join(self, connection_id: str, event: SignalEvent) -> None:
        room_name = _room_name(event.data)
        logger.info(f"Received join from {connection_id}, room: {room_name}")
        try:
            member_count, previous = self.registry.join(connection_id, room_name)
        except InvalidRoomName:
            logger.warning(f"Client {connection_id} tried to join without a room name")
            await self._reply(connection_id, ERROR, {"message": ROOM_REQUIRED_MESSAGE})
            return

        logger.info(f"Client {connection_id} joined room: {room_name}. Current room size: {member_count}")
        if previous is not None:
            logger.info(f"Client {connection_id} switched from room {previous} to {room_name}")
            await self._announce_departure(connection_id, previous)

        await self._reply(
            connection_id,
            JOIN_ACK,
            {"room": room_name, "message": JOIN_ACK_MESSAGE, "members": member_count},
        )

    async def on_signal(self, connection_id: str, event: SignalEvent) -> None:
        room_name = self._require_room(connection_id)
        peers = self.registry.members_of(room_name) - {connection_id}
        delivered = await self.transport.broadcast(peers, event.name, event.data)
        logger.debug(f"[Room: {room_name}] Relayed {event.name} from {connection_id} to {delivered}/{len(peers)} peers")

    async def on_disconnect(self, connection_id: str, event: SignalEvent) -> None:
        room_name = self.registry.unregister(connection_id)
        logger.info(f"Client disconnected: {connection_id}. Reason: {event.data}")
        if room_name is not None:
            await self._announce_departure(connection_id, room_name)

    async def on_malformed(self, connection_id: str, event: SignalEvent) -> None:
        logger.warning(f"Dropped malformed message from {connection_id}: {event.data}")

    def _require_room(self, connection_id: str) -> str:
        room_name = self.registry.room_of(connection_id)
        if room_name is None:
            raise NotInRoom(NOT_IN_ROOM_MESSAGE)
        return room_name

    async def _announce_departure(self, connection_id: str, room_name: str) -> None:
        remaining = self.registry.members_of(room_name) - {connection_id}
        if remaining:
            await self.transport.broadcast(remaining, PEER_LEFT, {"id": connection_id, "room": room_name})

    async def _reply(self, connection_id: str, event: str, data: Any) -> None:
        try:
            await self.transport.send(connection_id, event, data)
        except Exception as e:
            logger.warning(f"Could not send {event} to connection {connection_id}: {e}")


def _room_name(data: Any):
    try:
        return JoinData.model_validate(data, strict=True).room
    except ValidationError:
        return None
