"""Outbound message builders (server -> client JSON)."""

from __future__ import annotations

from src.game.models import Player, Room
from src.game.views import build_room_view
from src.utils.constants import ERROR_MESSAGES

REASON_HOST_DISBANDED = "Host disbanded the room"
REASON_LEFT = "You left the room"


def room_created(room: Room, player: Player) -> dict:
    return {
        "type": "ROOM_CREATED",
        "payload": {
            "roomId": room.id,
            "roomCode": room.room_code,
            "playerId": player.id,
        },
    }


def joined_room(room: Room, player: Player) -> dict:
    return {
        "type": "JOINED_ROOM",
        "payload": {
            "roomId": room.id,
            "playerId": player.id,
            "state": build_room_view(room, player.id),
        },
    }


def game_update(room: Room, viewer_id: str) -> dict:
    return {"type": "GAME_UPDATE", "payload": build_room_view(room, viewer_id)}


def error(code: str) -> dict:
    return {
        "type": "ERROR",
        "payload": {"code": code, "message": ERROR_MESSAGES.get(code, code)},
    }


def room_closed(reason: str) -> dict:
    return {"type": "ROOM_CLOSED", "payload": {"reason": reason}}
