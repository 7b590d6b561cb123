"""Repository protocol interfaces for Potting persistence."""

from __future__ import annotations

from typing import Protocol

from src.game.models import Room


class VersionConflict(ValueError):
    """A room was saved from a stale read."""


class RoomRepository(Protocol):
    def get_room(self, room_id: str) -> Room | None:
        ...

    def save_room(self, room: Room) -> None:
        ...

    def delete_room(self, room_id: str) -> None:
        ...

    def get_room_by_code(self, code: str) -> Room | None:
        ...


class ConnectionRepository(Protocol):
    """Maps a transport connection to the (room, player) it speaks for."""

    def get_connection(self, connection_id: str) -> dict | None:
        ...

    def save_connection(self, connection: dict) -> None:
        ...

    def delete_connection(self, connection_id: str) -> None:
        ...
