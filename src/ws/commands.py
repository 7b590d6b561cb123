"""Command handlers: one per inbound message type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.utils.constants import ERR_NOT_IN_ROOM
from src.ws.messages import (
    REASON_HOST_DISBANDED,
    REASON_LEFT,
    joined_room,
    room_closed,
    room_created,
)
from src.ws.notifications import broadcast_room, notify_room_closed, send_error

if TYPE_CHECKING:
    from src.game.engine import ActionResult
    from src.ws.deps import Deps

logger = logging.getLogger("potting.commands")


class MalformedCommand(ValueError):
    """Payload is missing fields or has the wrong types."""


def handle_command(
    command: str, payload: dict, connection_id: str, deps: Deps
) -> None:
    """Dispatch a parsed command. Unknown commands are dropped."""
    handlers = {
        "CREATE_ROOM": _cmd_create_room,
        "JOIN_ROOM": _cmd_join_room,
        "RECONNECT": _cmd_reconnect,
        "START_GAME": _cmd_start_game,
        "DRAW_CARD": _cmd_draw_card,
        "POT_CARD": _cmd_pot_card,
        "MARK_FOUL": _cmd_mark_foul,
        "UPDATE_JOKER": _cmd_update_joker,
        "RESTART_GAME": _cmd_restart_game,
        "EXIT_ROOM": _cmd_exit_room,
    }
    handler = handlers.get(command)
    if handler is None:
        logger.warning("Unknown command %r from %s", command, connection_id)
        return
    try:
        handler(payload, connection_id, deps)
    except MalformedCommand as e:
        logger.warning("Dropped malformed %s from %s: %s", command, connection_id, e)


def handle_disconnect(connection_id: str, deps: Deps) -> None:
    """Transport closed: mark the player offline, never remove them."""
    binding = deps.connection_repo.get_connection(connection_id)
    deps.connection_repo.delete_connection(connection_id)
    if binding is None:
        return
    result = deps.lobby_manager.disconnect(binding["roomId"], binding["playerId"])
    if result.success:
        broadcast_room(result.room, deps)


# --- Helpers ---


def _require(payload: dict, key: str, kind: type | tuple[type, ...] = str):
    value = payload.get(key)
    if not isinstance(value, kind) or isinstance(value, bool):
        raise MalformedCommand(f"{key} is missing or not a {kind}")
    return value


def _bind(connection_id: str, room_id: str, player_id: str, deps: Deps) -> None:
    deps.connection_repo.save_connection(
        {"connectionId": connection_id, "roomId": room_id, "playerId": player_id}
    )


def _get_binding(connection_id: str, deps: Deps) -> dict | None:
    """The (room, player) this connection speaks for, or None after an error."""
    binding = deps.connection_repo.get_connection(connection_id)
    if binding is None:
        send_error(connection_id, ERR_NOT_IN_ROOM, deps)
    return binding


def _reply(result: ActionResult, connection_id: str, deps: Deps) -> None:
    if result.success:
        broadcast_room(result.room, deps)
    else:
        send_error(connection_id, result.error, deps)


# --- Lobby commands ---


def _cmd_create_room(payload: dict, connection_id: str, deps: Deps) -> None:
    game_amount = _require(payload, "gameAmount", (int, float, str))
    joker_amount = _require(payload, "jokerAmount", (int, float, str))
    creator_name = payload.get("creatorName", "")
    result = deps.lobby_manager.create_room(
        game_amount, joker_amount, creator_name, connection_id
    )
    if not result.success:
        send_error(connection_id, result.error, deps)
        return
    room, player = result.room, result.player
    _bind(connection_id, room.id, player.id, deps)
    deps.client.send(connection_id, room_created(room, player))
    deps.client.send(connection_id, joined_room(room, player))


def _cmd_join_room(payload: dict, connection_id: str, deps: Deps) -> None:
    code = payload.get("roomCode") or payload.get("roomId")
    if not isinstance(code, str):
        raise MalformedCommand("roomCode is missing")
    result = deps.lobby_manager.join_room(code, payload.get("name", ""), connection_id)
    if not result.success:
        send_error(connection_id, result.error, deps)
        return
    _bind(connection_id, result.room.id, result.player.id, deps)
    deps.client.send(connection_id, joined_room(result.room, result.player))
    broadcast_room(result.room, deps)


def _cmd_reconnect(payload: dict, connection_id: str, deps: Deps) -> None:
    room_id = _require(payload, "roomId")
    player_id = _require(payload, "playerId")
    result = deps.lobby_manager.reconnect(room_id, player_id, connection_id)
    if not result.success:
        send_error(connection_id, result.error, deps)
        return
    _bind(connection_id, room_id, player_id, deps)
    deps.client.send(connection_id, joined_room(result.room, result.player))
    broadcast_room(result.room, deps)


def _cmd_exit_room(payload: dict, connection_id: str, deps: Deps) -> None:
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.lobby_manager.exit_room(binding["roomId"], binding["playerId"])
    if not result.success:
        send_error(connection_id, result.error, deps)
        return
    if result.disbanded:
        notify_room_closed(result.notify, REASON_HOST_DISBANDED, deps)
        deps.connection_repo.delete_connection(connection_id)
        return
    broadcast_room(result.room, deps)
    deps.client.send(connection_id, room_closed(REASON_LEFT))
    deps.connection_repo.delete_connection(connection_id)


# --- Game commands ---


def _cmd_start_game(payload: dict, connection_id: str, deps: Deps) -> None:
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.start_game(binding["roomId"], binding["playerId"])
    _reply(result, connection_id, deps)


def _cmd_draw_card(payload: dict, connection_id: str, deps: Deps) -> None:
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.draw_card(binding["roomId"], binding["playerId"])
    _reply(result, connection_id, deps)


def _cmd_pot_card(payload: dict, connection_id: str, deps: Deps) -> None:
    card_id = _require(payload, "cardId")
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.pot_card(binding["roomId"], binding["playerId"], card_id)
    _reply(result, connection_id, deps)


def _cmd_mark_foul(payload: dict, connection_id: str, deps: Deps) -> None:
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.mark_foul(binding["roomId"], binding["playerId"])
    _reply(result, connection_id, deps)


def _cmd_update_joker(payload: dict, connection_id: str, deps: Deps) -> None:
    kind = _require(payload, "type")
    delta = _require(payload, "delta", int)
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.update_joker_count(
        binding["roomId"], binding["playerId"], kind, delta
    )
    _reply(result, connection_id, deps)


def _cmd_restart_game(payload: dict, connection_id: str, deps: Deps) -> None:
    binding = _get_binding(connection_id, deps)
    if binding is None:
        return
    result = deps.engine.restart_game(binding["roomId"], binding["playerId"])
    _reply(result, connection_id, deps)
