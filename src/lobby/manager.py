"""Room membership for Potting: create, join, exit, reconnect."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.db.repository import RoomRepository
from src.game.models import Player, Room, RoomConfig, round_money, to_money
from src.lobby.locks import RoomLocks
from src.utils.constants import (
    DEFAULT_PLAYER_NAME,
    ERR_GAME_ALREADY_STARTED,
    ERR_INVALID_CONFIG,
    ERR_PLAYER_NOT_FOUND,
    ERR_ROOM_FULL,
    ERR_ROOM_NOT_FOUND,
    MAX_NAME_LENGTH,
    MAX_PLAYERS,
    STATUS_PLAYING,
    STATUS_WAITING,
)
from src.utils.crypto import generate_room_code

logger = logging.getLogger("potting.lobby")


@dataclass
class LobbyResult:
    success: bool
    room: Room | None = None
    player: Player | None = None
    error: str | None = None
    # Set when the creator left: the room is gone, these members must be told
    disbanded: bool = False
    notify: list[Player] = field(default_factory=list)


def clean_name(name: str | None) -> str:
    name = (name or "").strip()[:MAX_NAME_LENGTH]
    return name or DEFAULT_PLAYER_NAME


def make_config(game_amount, joker_amount) -> RoomConfig:
    """Build a room config rounded to cents, as it will be stored.

    Raises ValueError for negative or non-numeric amounts.
    """
    game, joker = to_money(game_amount), to_money(joker_amount)
    if game < 0 or joker < 0:
        raise ValueError("Amounts must be non-negative")
    return RoomConfig(game_amount=round_money(game), joker_amount=round_money(joker))


class LobbyManager:
    def __init__(
        self,
        room_repo: RoomRepository,
        locks: RoomLocks | None = None,
    ) -> None:
        self._room_repo = room_repo
        self._locks = locks or RoomLocks()

    def create_room(
        self,
        game_amount,
        joker_amount,
        creator_name: str,
        connection_id: str | None = None,
    ) -> LobbyResult:
        """Create a new room in WAITING. The creator is auto-joined."""
        try:
            config = make_config(game_amount, joker_amount)
        except ValueError:
            return LobbyResult(success=False, error=ERR_INVALID_CONFIG)

        code = self._unique_room_code()
        now = self._now()
        creator = Player(
            id=Player.new_player_id(),
            display_name=clean_name(creator_name),
            is_creator=True,
            connection_id=connection_id,
        )
        room = Room(
            id=Room.new_room_id(),
            room_code=code,
            config=config,
            players=[creator],
            created_at=now,
            updated_at=now,
        )
        self._room_repo.save_room(room)

        logger.info(json.dumps({"event": "room_created", "room_id": room.id, "code": code}))
        room = self._room_repo.get_room(room.id)
        return LobbyResult(success=True, room=room, player=room.get_player(creator.id))

    def join_room(
        self, room_code: str, name: str, connection_id: str | None = None
    ) -> LobbyResult:
        """Join a room by its code."""
        found = self._room_repo.get_room_by_code((room_code or "").strip().upper())
        if found is None:
            return LobbyResult(success=False, error=ERR_ROOM_NOT_FOUND)

        with self._locks.hold(found.id):
            room = self._room_repo.get_room(found.id)
            if room is None:
                self._locks.discard(found.id)
                return LobbyResult(success=False, error=ERR_ROOM_NOT_FOUND)

            if len(room.players) >= MAX_PLAYERS:
                return LobbyResult(success=False, room=room, error=ERR_ROOM_FULL)

            if room.status != STATUS_WAITING:
                return LobbyResult(
                    success=False, room=room, error=ERR_GAME_ALREADY_STARTED
                )

            player = Player(
                id=Player.new_player_id(),
                display_name=clean_name(name),
                connection_id=connection_id,
            )
            room.players.append(player)
            room = self._commit(room)

        logger.info(
            json.dumps({"event": "player_joined", "room_id": room.id, "player_id": player.id})
        )
        return LobbyResult(success=True, room=room, player=room.get_player(player.id))

    def exit_room(self, room_id: str, player_id: str) -> LobbyResult:
        """Leave a room. If the creator leaves, the room is disbanded."""
        with self._locks.hold(room_id):
            room = self._room_repo.get_room(room_id)
            if room is None:
                self._locks.discard(room_id)
                return LobbyResult(success=False, error=ERR_ROOM_NOT_FOUND)

            player = room.get_player(player_id)
            if player is None:
                return LobbyResult(success=False, room=room, error=ERR_PLAYER_NOT_FOUND)

            if player.is_creator:
                self._room_repo.delete_room(room_id)
                logger.info(json.dumps({"event": "room_disbanded", "room_id": room_id}))
                result = LobbyResult(
                    success=True,
                    room=room,
                    player=player,
                    disbanded=True,
                    notify=list(room.players),
                )
            elif room.status == STATUS_PLAYING:
                # Turn order and settlement need the full table until the match ends
                return LobbyResult(
                    success=False, room=room, error=ERR_GAME_ALREADY_STARTED
                )
            else:
                room.players = [p for p in room.players if p.id != player_id]
                room = self._commit(room)
                logger.info(
                    json.dumps({"event": "player_left", "room_id": room_id, "player_id": player_id})
                )
                result = LobbyResult(success=True, room=room, player=player)

        if result.disbanded:
            self._locks.discard(room_id)
        return result

    def reconnect(
        self, room_id: str, player_id: str, connection_id: str | None = None
    ) -> LobbyResult:
        """Reattach a transport handle. Game state is untouched."""
        with self._locks.hold(room_id):
            room = self._room_repo.get_room(room_id)
            if room is None:
                self._locks.discard(room_id)
                return LobbyResult(success=False, error=ERR_ROOM_NOT_FOUND)

            player = room.get_player(player_id)
            if player is None:
                return LobbyResult(success=False, room=room, error=ERR_PLAYER_NOT_FOUND)

            player.connected = True
            player.connection_id = connection_id
            room = self._commit(room)

        logger.info(
            json.dumps({"event": "player_reconnected", "room_id": room_id, "player_id": player_id})
        )
        return LobbyResult(success=True, room=room, player=room.get_player(player_id))

    def disconnect(self, room_id: str, player_id: str) -> LobbyResult:
        """Mark a player offline. They keep their seat and their cards."""
        with self._locks.hold(room_id):
            room = self._room_repo.get_room(room_id)
            if room is None:
                self._locks.discard(room_id)
                return LobbyResult(success=False, error=ERR_ROOM_NOT_FOUND)

            player = room.get_player(player_id)
            if player is None:
                return LobbyResult(success=False, room=room, error=ERR_PLAYER_NOT_FOUND)

            player.connected = False
            player.connection_id = None
            room = self._commit(room)

        logger.info(
            json.dumps({"event": "player_disconnected", "room_id": room_id, "player_id": player_id})
        )
        return LobbyResult(success=True, room=room, player=room.get_player(player_id))

    def get_room(self, room_id: str) -> Room | None:
        return self._room_repo.get_room(room_id)

    def get_room_by_code(self, code: str) -> Room | None:
        return self._room_repo.get_room_by_code(code)

    # --- Private helpers ---

    def _unique_room_code(self) -> str:
        code = generate_room_code()
        while self._room_repo.get_room_by_code(code) is not None:
            code = generate_room_code()
        return code

    def _commit(self, room: Room) -> Room:
        room.updated_at = self._now()
        self._room_repo.save_room(room)
        return self._room_repo.get_room(room.id)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
