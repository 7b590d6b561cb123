"""In-memory repository implementations for testing and local CLI."""

from __future__ import annotations

import copy

from src.db.repository import VersionConflict
from src.game.models import Room


class InMemoryRoomRepository:
    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}

    def get_room(self, room_id: str) -> Room | None:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        return copy.deepcopy(room)

    def save_room(self, room: Room) -> None:
        existing = self._rooms.get(room.id)
        if existing is not None and existing.version != room.version:
            raise VersionConflict(
                f"Version conflict: expected {room.version}, found {existing.version}"
            )
        saved = copy.deepcopy(room)
        saved.version = room.version + 1
        self._rooms[room.id] = saved

    def delete_room(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)

    def get_room_by_code(self, code: str) -> Room | None:
        for room in self._rooms.values():
            if room.room_code == code:
                return copy.deepcopy(room)
        return None


class InMemoryConnectionRepository:
    def __init__(self) -> None:
        self._connections: dict[str, dict] = {}

    def get_connection(self, connection_id: str) -> dict | None:
        conn = self._connections.get(connection_id)
        return copy.deepcopy(conn) if conn else None

    def save_connection(self, connection: dict) -> None:
        self._connections[connection["connectionId"]] = copy.deepcopy(connection)

    def delete_connection(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
