import asyncio
import uuid
from typing import Any, Dict, Iterable, Optional

from fastapi import WebSocket

from constants import SEND_TIMEOUT
from logging_config import get_logger
from schemas.signals import OutboundMessage

logger = get_logger(__name__)


class WebSocketTransport:
    """Delivers outbound events to the WebSockets of this process.

    Knows nothing about rooms: the router resolves room members through the
    registry and hands the resulting ids to ``broadcast``.
    """

    def __init__(self, send_timeout: float = SEND_TIMEOUT):
        self.send_timeout = send_timeout
        # Format: {connection_id: websocket}
        self.connections: Dict[str, WebSocket] = {}

    def attach(self, websocket: WebSocket, connection_id: Optional[str] = None) -> str:
        connection_id = connection_id or uuid.uuid4().hex
        self.connections[connection_id] = websocket
        logger.debug(f"Attached connection {connection_id} (local connections: {len(self.connections)})")
        return connection_id

    def detach(self, connection_id: str) -> None:
        if self.connections.pop(connection_id, None) is not None:
            logger.debug(f"Detached connection {connection_id} (local connections: {len(self.connections)})")

    async def send(self, connection_id: str, event: str, data: Any = None) -> None:
        """Send one event to one connection.

        Raises if the socket is gone or the peer does not take the frame
        within ``send_timeout`` seconds.
        """
        websocket = self.connections.get(connection_id)
        if websocket is None:
            raise LookupError(f"Connection {connection_id} is not attached")
        message = OutboundMessage(type=event, data=data)
        await asyncio.wait_for(websocket.send_json(message.model_dump()), timeout=self.send_timeout)

    async def broadcast(self, connection_ids: Iterable[str], event: str, data: Any = None) -> int:
        """Send one event to many connections, best effort.

        A failure for one recipient is logged and does not affect the others.
        Returns the number of successful deliveries.
        """
        targets = list(connection_ids)
        if not targets:
            return 0

        results = await asyncio.gather(
            *(self.send(connection_id, event, data) for connection_id in targets),
            return_exceptions=True,
        )

        delivered = 0
        for connection_id, result in zip(targets, results):
            if isinstance(result, asyncio.TimeoutError):
                logger.warning(f"Timed out sending {event} to connection {connection_id} after {self.send_timeout}s")
            elif isinstance(result, Exception):
                logger.warning(f"Error sending {event} to connection {connection_id}: {result}")
            else:
                delivered += 1
        logger.debug(f"Broadcasted {event} to {delivered}/{len(targets)} connections")
        return delivered
