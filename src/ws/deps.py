"""Dependency container for transport handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.db.repository import ConnectionRepository, RoomRepository
    from src.game.engine import GameEngine
    from src.lobby.manager import LobbyManager
    from src.utils.apigateway import ConnectionClient


@dataclass
class Deps:
    """Bundles all dependencies for handler functions."""

    engine: GameEngine
    lobby_manager: LobbyManager
    room_repo: RoomRepository
    connection_repo: ConnectionRepository
    client: ConnectionClient
