"""Shared test fixtures for Potting."""

from __future__ import annotations

import pytest

from src.db.memory import InMemoryConnectionRepository, InMemoryRoomRepository
from src.game.engine import GameEngine
from src.lobby.locks import RoomLocks
from src.lobby.manager import LobbyManager
from src.utils.crypto import create_rng
from src.ws.deps import Deps


class MockConnectionClient:
    """Records every message pushed to a connection for test assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.gone: set[str] = set()

    def send(self, connection_id: str, message: dict) -> bool:
        if connection_id in self.gone:
            return False
        self.calls.append((connection_id, message))
        return True

    def messages_for(self, connection_id: str) -> list[dict]:
        """All messages sent to one connection, oldest first."""
        return [m for cid, m in self.calls if cid == connection_id]

    def types_for(self, connection_id: str) -> list[str]:
        return [m["type"] for m in self.messages_for(connection_id)]

    def last_message(self, connection_id: str) -> dict | None:
        messages = self.messages_for(connection_id)
        return messages[-1] if messages else None

    def clear(self) -> None:
        self.calls.clear()


@pytest.fixture
def room_repo():
    return InMemoryRoomRepository()


@pytest.fixture
def connection_repo():
    return InMemoryConnectionRepository()


@pytest.fixture
def mock_client():
    return MockConnectionClient()


@pytest.fixture
def locks():
    return RoomLocks()


@pytest.fixture
def engine(room_repo, locks):
    return GameEngine(room_repo, create_rng(42), locks)


@pytest.fixture
def lobby(room_repo, locks):
    return LobbyManager(room_repo, locks)


@pytest.fixture
def deps(engine, lobby, room_repo, connection_repo, mock_client):
    return Deps(
        engine=engine,
        lobby_manager=lobby,
        room_repo=room_repo,
        connection_repo=connection_repo,
        client=mock_client,
    )
