"""Tests for inbound message parsing and command handlers."""

import json

import pytest

from src.db.repository import VersionConflict
from src.utils.constants import (
    ERR_GAME_ALREADY_STARTED,
    ERR_LICENSE_REQUIRED,
    ERR_NOT_CREATOR,
    ERR_NOT_IN_ROOM,
    ERR_ROOM_NOT_FOUND,
    ERR_VERSION_CONFLICT,
    STATUS_PLAYING,
)
from src.ws.commands import handle_command, handle_disconnect
from src.ws.messages import REASON_HOST_DISBANDED, REASON_LEFT
from src.ws.router import parse_message, route_message


def send(deps, connection_id: str, type_: str, payload: dict | None = None) -> None:
    route_message(connection_id, json.dumps({"type": type_, "payload": payload or {}}), deps)


@pytest.fixture
def room_of_two(deps, mock_client):
    """Alice (conn-a, creator) and Bob (conn-b) in a WAITING room."""
    send(deps, "conn-a", "CREATE_ROOM", {"gameAmount": 2, "jokerAmount": "0.50", "creatorName": "Alice"})
    code = mock_client.messages_for("conn-a")[0]["payload"]["roomCode"]
    send(deps, "conn-b", "JOIN_ROOM", {"roomCode": code, "name": "Bob"})
    mock_client.clear()
    return deps.connection_repo.get_connection("conn-a")["roomId"]


class TestParseMessage:
    def test_valid(self):
        assert parse_message('{"type": "DRAW_CARD", "payload": {}}') == ("DRAW_CARD", {})

    def test_missing_payload(self):
        assert parse_message('{"type": "DRAW_CARD"}') == ("DRAW_CARD", {})

    def test_dict_body(self):
        assert parse_message({"type": "X", "payload": {"a": 1}}) == ("X", {"a": 1})

    @pytest.mark.parametrize(
        "body",
        [None, "", "not json", "[1, 2]", '{"payload": {}}', '{"type": 3}', '{"type": "X", "payload": []}'],
    )
    def test_malformed(self, body):
        assert parse_message(body) is None


class TestRouting:
    def test_unparseable_dropped(self, deps, mock_client):
        route_message("conn-x", "{{{", deps)
        assert mock_client.calls == []

    def test_unknown_command_dropped(self, deps, mock_client):
        send(deps, "conn-x", "FLY_AWAY")
        assert mock_client.calls == []

    def test_malformed_payload_dropped(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "POT_CARD", {"cardId": 42})
        send(deps, "conn-a", "UPDATE_JOKER", {"type": "direct", "delta": "1"})
        send(deps, "conn-x", "CREATE_ROOM", {"creatorName": "NoStakes"})
        assert mock_client.calls == []

    def test_version_conflict_reported(self, deps, mock_client, monkeypatch):
        def conflict(*args, **kwargs):
            raise VersionConflict("stale")

        monkeypatch.setattr(deps.lobby_manager, "create_room", conflict)
        send(deps, "conn-a", "CREATE_ROOM", {"gameAmount": 1, "jokerAmount": 1})
        assert mock_client.last_message("conn-a")["payload"]["code"] == ERR_VERSION_CONFLICT


class TestLobbyCommands:
    def test_create_room(self, deps, mock_client):
        send(deps, "conn-a", "CREATE_ROOM", {"gameAmount": "2", "jokerAmount": 1, "creatorName": "A"})
        assert mock_client.types_for("conn-a") == ["ROOM_CREATED", "JOINED_ROOM"]
        created = mock_client.messages_for("conn-a")[0]["payload"]
        binding = deps.connection_repo.get_connection("conn-a")
        assert binding == {
            "connectionId": "conn-a",
            "roomId": created["roomId"],
            "playerId": created["playerId"],
        }

    def test_create_room_invalid_config(self, deps, mock_client):
        send(deps, "conn-a", "CREATE_ROOM", {"gameAmount": -1, "jokerAmount": 1})
        assert mock_client.last_message("conn-a")["payload"]["code"] == "InvalidConfig"
        assert deps.connection_repo.get_connection("conn-a") is None

    def test_join_broadcasts(self, deps, mock_client, room_of_two):
        room = deps.room_repo.get_room(room_of_two)
        send(deps, "conn-c", "JOIN_ROOM", {"roomId": room.room_code, "name": "Cat"})
        assert mock_client.types_for("conn-c") == ["JOINED_ROOM", "GAME_UPDATE"]
        assert mock_client.types_for("conn-a") == ["GAME_UPDATE"]
        assert mock_client.types_for("conn-b") == ["GAME_UPDATE"]

    def test_join_unknown(self, deps, mock_client):
        send(deps, "conn-c", "JOIN_ROOM", {"roomCode": "XXXXXX", "name": "Cat"})
        error = mock_client.last_message("conn-c")
        assert error["type"] == "ERROR"
        assert error["payload"] == {"code": ERR_ROOM_NOT_FOUND, "message": "Room not found"}

    def test_member_exit(self, deps, mock_client, room_of_two):
        send(deps, "conn-b", "EXIT_ROOM")
        assert mock_client.last_message("conn-b") == {
            "type": "ROOM_CLOSED",
            "payload": {"reason": REASON_LEFT},
        }
        assert mock_client.types_for("conn-a") == ["GAME_UPDATE"]
        assert deps.connection_repo.get_connection("conn-b") is None
        assert len(deps.room_repo.get_room(room_of_two).players) == 1

    def test_creator_exit_disbands(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "EXIT_ROOM")
        for conn in ("conn-a", "conn-b"):
            assert mock_client.last_message(conn)["payload"]["reason"] == REASON_HOST_DISBANDED
            assert deps.connection_repo.get_connection(conn) is None
        assert deps.room_repo.get_room(room_of_two) is None

    def test_reconnect(self, deps, mock_client, room_of_two):
        room = deps.room_repo.get_room(room_of_two)
        bob = room.players[1]
        handle_disconnect("conn-b", deps)
        send(deps, "conn-b2", "RECONNECT", {"roomId": room.id, "playerId": bob.id})
        assert mock_client.types_for("conn-b2") == ["JOINED_ROOM", "GAME_UPDATE"]
        assert deps.connection_repo.get_connection("conn-b2")["playerId"] == bob.id

    def test_command_without_room(self, deps, mock_client):
        send(deps, "conn-z", "DRAW_CARD")
        assert mock_client.last_message("conn-z")["payload"]["code"] == ERR_NOT_IN_ROOM


class TestGameCommands:
    def test_start_broadcasts_private_views(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        for conn in ("conn-a", "conn-b"):
            update = mock_client.last_message(conn)
            assert update["type"] == "GAME_UPDATE"
            assert update["payload"]["status"] == STATUS_PLAYING
            mine = [p for p in update["payload"]["players"] if p["hand"]]
            assert len(mine) == 1

    def test_start_by_member_rejected(self, deps, mock_client, room_of_two):
        send(deps, "conn-b", "START_GAME")
        assert mock_client.last_message("conn-b")["payload"]["code"] == ERR_NOT_CREATOR
        assert mock_client.messages_for("conn-a") == []

    def test_draw(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        mock_client.clear()
        send(deps, "conn-b", "DRAW_CARD")
        assert mock_client.types_for("conn-a") == ["GAME_UPDATE"]
        assert mock_client.last_message("conn-a")["payload"]["deckCount"] == 37

    def test_pot(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        view = mock_client.last_message("conn-a")["payload"]
        me = next(p for p in view["players"] if p["hand"])
        card = me["hand"][0]
        send(deps, "conn-a", "POT_CARD", {"cardId": card["id"]})
        after = mock_client.last_message("conn-b")["payload"]
        assert card["rank"] in after["pottedRanks"]

    def test_foul_without_license(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        send(deps, "conn-a", "MARK_FOUL")
        assert mock_client.last_message("conn-a")["payload"]["code"] == ERR_LICENSE_REQUIRED

    def test_joker_without_license(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        send(deps, "conn-b", "UPDATE_JOKER", {"type": "all", "delta": 1})
        assert mock_client.last_message("conn-b")["payload"]["code"] == ERR_LICENSE_REQUIRED

    def test_restart_rejected_while_playing(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        send(deps, "conn-a", "RESTART_GAME")
        assert mock_client.last_message("conn-a")["payload"]["code"] == "InvalidTransition"

    def test_exit_mid_match_rejected(self, deps, mock_client, room_of_two):
        send(deps, "conn-a", "START_GAME")
        send(deps, "conn-b", "EXIT_ROOM")
        assert mock_client.last_message("conn-b")["payload"]["code"] == ERR_GAME_ALREADY_STARTED
        assert deps.connection_repo.get_connection("conn-b") is not None


class TestDisconnect:
    def test_marks_offline_and_broadcasts(self, deps, mock_client, room_of_two):
        handle_disconnect("conn-b", deps)
        room = deps.room_repo.get_room(room_of_two)
        assert not room.players[1].connected
        assert deps.connection_repo.get_connection("conn-b") is None
        assert mock_client.types_for("conn-a") == ["GAME_UPDATE"]
        assert mock_client.messages_for("conn-b") == []

    def test_unknown_connection(self, deps, mock_client):
        handle_disconnect("conn-q", deps)
        assert mock_client.calls == []

    def test_handle_command_direct(self, deps, mock_client, room_of_two):
        handle_command("DRAW_CARD", {}, "conn-a", deps)
        error = mock_client.last_message("conn-a")["payload"]
        assert error["code"] == "GameNotInProgress"
