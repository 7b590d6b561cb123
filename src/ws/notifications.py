"""Fan-out of room state to connected members."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.game.models import Player, Room
from src.ws.messages import error, game_update, room_closed

if TYPE_CHECKING:
    from src.ws.deps import Deps

logger = logging.getLogger("potting.notifications")


def broadcast_room(room: Room, deps: Deps) -> None:
    """Send every connected member their own view of the room."""
    for player in room.players:
        if not player.connected or not player.connection_id:
            continue
        deps.client.send(player.connection_id, game_update(room, player.id))


def notify_room_closed(players: list[Player], reason: str, deps: Deps) -> None:
    """Tell members the room is gone and forget their connection bindings."""
    for player in players:
        if not player.connection_id:
            continue
        deps.client.send(player.connection_id, room_closed(reason))
        deps.connection_repo.delete_connection(player.connection_id)


def send_error(connection_id: str, code: str, deps: Deps) -> None:
    """Report a rejected command to the issuing connection only."""
    logger.info("Rejected command on %s: %s", connection_id, code)
    deps.client.send(connection_id, error(code))
