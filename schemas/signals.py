import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from exceptions import MalformedMessage


class EventKind(str, Enum):
    JOIN = "join"
    OFFER = "offer"
    ANSWER = "answer"
    CANDIDATE = "candidate"
    DISCONNECT = "disconnect"
    MALFORMED = "malformed"


# Wire names a client may send, mapped to the event they stand for.
# "ice" is what some mobile clients call a candidate.
INBOUND_EVENTS = {
    "join": EventKind.JOIN,
    "offer": EventKind.OFFER,
    "answer": EventKind.ANSWER,
    "candidate": EventKind.CANDIDATE,
    "ice": EventKind.CANDIDATE,
}


class InboundMessage(BaseModel):
    type: str
    data: Any = None


class OutboundMessage(BaseModel):
    type: str
    data: Any = None


class JoinData(BaseModel):
    room: Optional[str] = None


class SignalEvent(BaseModel):
    """One inbound event, already classified.

    ``name`` is the wire name the client used, so relays go out under the
    same name they came in with.
    """

    kind: EventKind
    name: str
    data: Any = None


def parse_frame(raw: str) -> SignalEvent:
    """Turn a text frame into a ``SignalEvent`` or raise ``MalformedMessage``."""
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedMessage(f"invalid JSON: {e}") from e

    if not isinstance(decoded, dict):
        raise MalformedMessage(f"expected a JSON object, got {type(decoded).__name__}")

    try:
        message = InboundMessage.model_validate(decoded, strict=True)
    except ValidationError as e:
        raise MalformedMessage(f"invalid envelope: {e.errors()[0]['msg']}") from e

    kind = INBOUND_EVENTS.get(message.type)
    if kind is None:
        raise MalformedMessage(f"unknown event type: {message.type!r}")

    return SignalEvent(kind=kind, name=message.type, data=message.data)


def disconnect_event(reason: Optional[str] = None) -> SignalEvent:
    return SignalEvent(kind=EventKind.DISCONNECT, name=EventKind.DISCONNECT.value, data=reason)


def malformed_event(detail: str) -> SignalEvent:
    return SignalEvent(kind=EventKind.MALFORMED, name=EventKind.MALFORMED.value, data=detail)
