import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from app import create_app


class FakeConnection:
    """Stands in for ConnectionHandler: records every frame written to it.

    When ``gate`` is set, writes of relayed ``message`` frames wait on it,
    like a peer whose transport is not draining.
    """

    def __init__(self, writable: bool = True, delay: bool = False):
        self.connection_id = uuid.uuid4().hex
        self.writable = writable
        self.delay = delay
        self.gate = None
        self.sent = []

    async def send(self, frame: dict) -> bool:
        if self.delay:
            await asyncio.sleep(0)
        if self.gate is not None and frame["type"] == "message":
            await self.gate.wait()
        if not self.writable:
            return False
        self.sent.append(frame)
        return True

    def types(self):
        return [frame["type"] for frame in self.sent]


@pytest.fixture
def make_connection():
    def _make(**kwargs):
        return FakeConnection(**kwargs)
    return _make


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
