from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from exceptions import MalformedMessage
from logging_config import get_logger
from schemas.signals import disconnect_event, malformed_event, parse_frame

logger = get_logger(__name__)

signaling_router = APIRouter(tags=["signaling"])


@signaling_router.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket):
    """WebSocket endpoint for room-scoped signaling.

    Frames are JSON objects of the form ``{"type": ..., "data": ...}``.
    Frames of one connection are handled in arrival order.
    """
    transport = websocket.app.state.transport
    router = websocket.app.state.signaling

    await websocket.accept()
    connection_id = transport.attach(websocket)
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"WebSocket connection accepted for {connection_id} from {client_host}")
    router.connect(connection_id)

    reason = "client disconnect"
    try:
        message_count = 0
        while True:
            try:
                event = parse_frame(await _receive_text(websocket))
            except WebSocketDisconnect as e:
                reason = f"client disconnect (code {e.code})"
                logger.info(f"WebSocket disconnected normally for connection {connection_id}")
                break
            except MalformedMessage as e:
                event = malformed_event(str(e))
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {connection_id}")
            await router.dispatch(connection_id, event)
    except Exception as e:
        reason = f"server error: {e}"
        logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
    finally:
        transport.detach(connection_id)
        await router.dispatch(connection_id, disconnect_event(reason))
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Error closing WebSocket: {e}")


async def _receive_text(websocket: WebSocket) -> str:
    """Next text frame from the client.

    Raises ``WebSocketDisconnect`` when the client goes away and
    ``MalformedMessage`` for frames that carry no text, such as binary ones.
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))
    text = message.get("text")
    if text is None:
        raise MalformedMessage("expected a text frame")
    return text
