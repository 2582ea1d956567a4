from typing import Any, Iterable, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from app import create_app
from registry import ConnectionRegistry
from signaling import SignalingRouter


class RecordingTransport:
    """In-memory transport that records every delivery instead of sending it."""

    def __init__(self, failing: Optional[Set[str]] = None):
        self.sent: List[Tuple[str, str, Any]] = []
        self.failing = failing or set()

    async def send(self, connection_id: str, event: str, data: Any = None) -> None:
        if connection_id in self.failing:
            raise ConnectionError(f"{connection_id} is gone")
        self.sent.append((connection_id, event, data))

    async def broadcast(self, connection_ids: Iterable[str], event: str, data: Any = None) -> int:
        delivered = 0
        for connection_id in connection_ids:
            try:
                await self.send(connection_id, event, data)
            except ConnectionError:
                continue
            delivered += 1
        return delivered

    def to(self, connection_id: str) -> List[Tuple[str, Any]]:
        return [(event, data) for target, event, data in self.sent if target == connection_id]


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def router(registry, transport):
    return SignalingRouter(registry, transport)


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client
