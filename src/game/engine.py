"""Game engine for Potting: lifecycle and in-play actions of a room."""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from src.db.repository import RoomRepository
from src.game.deck import Deck, deal, draw_eligible, shuffle_in_place
from src.game.models import Card, Player, Room, format_money
from src.game.settlement import build_match_result
from src.lobby.locks import RoomLocks
from src.utils.constants import (
    ERR_CARD_NOT_IN_HAND,
    ERR_GAME_ALREADY_STARTED,
    ERR_GAME_NOT_IN_PROGRESS,
    ERR_INVALID_JOKER_DELTA,
    ERR_INVALID_TRANSITION,
    ERR_LICENSE_REQUIRED,
    ERR_NO_ELIGIBLE_CARDS,
    ERR_NOT_CREATOR,
    ERR_NOT_ENOUGH_PLAYERS,
    ERR_PLAYER_NOT_FOUND,
    ERR_ROOM_NOT_FOUND,
    JOKER_DELTAS,
    JOKER_KINDS,
    MIN_PLAYERS,
    STATUS_FINISHED,
    STATUS_PLAYING,
    STATUS_WAITING,
)
from src.utils.crypto import create_rng

logger = logging.getLogger("potting.engine")


@dataclass
class ActionResult:
    success: bool
    room: Room | None
    error: str | None = None
    events: list[dict] = field(default_factory=list)
    card: Card | None = None


class GameEngine:
    """Stateless game engine. All state lives in Room / repository.

    Every mutating action runs under the room's lock, so two actions on
    the same room never see the same pre-action state.
    """

    def __init__(
        self,
        repo: RoomRepository,
        rng: random.Random | None = None,
        locks: RoomLocks | None = None,
    ) -> None:
        self._repo = repo
        self._rng = rng or create_rng()
        self._locks = locks or RoomLocks()

    def start_game(self, room_id: str, initiator_id: str) -> ActionResult:
        """Fix turn order, deal 7 cards each, move the room to PLAYING."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                self._locks.discard(room_id)
                return ActionResult(success=False, room=None, error=ERR_ROOM_NOT_FOUND)

            error = self._validate_lifecycle(room, initiator_id, STATUS_WAITING)
            if error:
                return ActionResult(success=False, room=room, error=error)

            if len(room.players) < MIN_PLAYERS:
                return ActionResult(
                    success=False, room=room, error=ERR_NOT_ENOUGH_PLAYERS
                )

            # Turn order is fixed here and drives "previous player" later
            shuffle_in_place(room.players, self._rng)

            deck = Deck(self._rng)
            hands, draw_pile = deal(deck, len(room.players))
            for player, hand in zip(room.players, hands):
                player.reset_for_lobby()
                player.hand = hand

            room.deck = draw_pile
            room.potted_ranks = []
            room.winner_id = None
            room.status = STATUS_PLAYING
            room = self._commit(room)

            event = {
                "event": "game_start",
                "room_id": room_id,
                "turn_order": [p.id for p in room.players],
                "players_cards": {p.id: len(p.hand) for p in room.players},
                "deck_remaining": len(room.deck),
            }
            logger.info(json.dumps(event))
            return ActionResult(success=True, room=room, events=[event])

    def draw_card(self, room_id: str, player_id: str) -> ActionResult:
        """Draw the first card whose rank has not been potted."""
        with self._locks.hold(room_id):
            room, player, error = self._load_in_play(room_id, player_id)
            if error:
                return ActionResult(success=False, room=room, error=error)

            card, discarded = draw_eligible(room.deck, room.potted_ranks)
            if card is None:
                # Not saved: a rejected draw leaves the pile as it was
                return ActionResult(
                    success=False, room=self._repo.get_room(room_id),
                    error=ERR_NO_ELIGIBLE_CARDS,
                )

            player.hand.append(card)
            room = self._commit(room)

            event = {
                "event": "draw",
                "room_id": room_id,
                "player_id": player_id,
                "discarded": len(discarded),
                "deck_remaining": len(room.deck),
                "hand_size": len(player.hand),
            }
            logger.info(json.dumps(event))
            return ActionResult(success=True, room=room, events=[event], card=card)

    def pot_card(self, room_id: str, player_id: str, card_id: str) -> ActionResult:
        """Pot a card: its rank leaves every hand, the potter earns a license.

        May finish the match, in which case the room is settled.
        """
        with self._locks.hold(room_id):
            room, player, error = self._load_in_play(room_id, player_id)
            if error:
                return ActionResult(success=False, room=room, error=error)

            card = player.find_card(card_id)
            if card is None:
                return ActionResult(success=False, room=room, error=ERR_CARD_NOT_IN_HAND)

            player.hand.remove(card)
            player.has_license = True
            if card.rank not in room.potted_ranks:
                room.potted_ranks.append(card.rank)
            for p in room.players:
                p.hand = [c for c in p.hand if c.rank != card.rank]

            events = []
            pot_event = {
                "event": "pot",
                "room_id": room_id,
                "player_id": player_id,
                "rank": card.rank,
                "hands": {p.id: len(p.hand) for p in room.players},
            }
            events.append(pot_event)
            logger.info(json.dumps(pot_event))

            winner_id = self._find_winner(room, player)
            if winner_id:
                self._handle_win(room, winner_id, events)

            room = self._commit(room)
            return ActionResult(success=True, room=room, events=events)

    def mark_foul(self, room_id: str, player_id: str) -> ActionResult:
        """Give up the license and take one penalty card, if any is left."""
        with self._locks.hold(room_id):
            room, player, error = self._load_in_play(room_id, player_id)
            if error:
                return ActionResult(success=False, room=room, error=error)

            if not player.has_license:
                return ActionResult(success=False, room=room, error=ERR_LICENSE_REQUIRED)

            player.has_license = False
            card, discarded = draw_eligible(room.deck, room.potted_ranks)
            if card is not None:
                player.hand.append(card)
            room = self._commit(room)

            event = {
                "event": "foul",
                "room_id": room_id,
                "player_id": player_id,
                "penalty_drawn": card is not None,
                "discarded": len(discarded),
                "hand_size": len(player.hand),
            }
            logger.info(json.dumps(event))
            return ActionResult(success=True, room=room, events=[event], card=card)

    def update_joker_count(
        self, room_id: str, player_id: str, kind: str, delta: int
    ) -> ActionResult:
        """Self-reported joker balls: +1 needs a license, never below zero."""
        with self._locks.hold(room_id):
            room, player, error = self._load_in_play(room_id, player_id)
            if error:
                return ActionResult(success=False, room=room, error=error)

            if kind not in JOKER_KINDS or delta not in JOKER_DELTAS or isinstance(delta, bool):
                return ActionResult(
                    success=False, room=room, error=ERR_INVALID_JOKER_DELTA
                )
            if delta > 0 and not player.has_license:
                return ActionResult(success=False, room=room, error=ERR_LICENSE_REQUIRED)

            new_value = player.joker_balls.get(kind) + delta
            if new_value < 0:
                return ActionResult(
                    success=False, room=room, error=ERR_INVALID_JOKER_DELTA
                )

            player.joker_balls.set(kind, new_value)
            room = self._commit(room)

            event = {
                "event": "joker",
                "room_id": room_id,
                "player_id": player_id,
                "kind": kind,
                "value": new_value,
            }
            logger.info(json.dumps(event))
            return ActionResult(success=True, room=room, events=[event])

    def restart_game(self, room_id: str, initiator_id: str) -> ActionResult:
        """Back to the lobby. The session ledger and history are kept."""
        with self._locks.hold(room_id):
            room = self._repo.get_room(room_id)
            if room is None:
                self._locks.discard(room_id)
                return ActionResult(success=False, room=None, error=ERR_ROOM_NOT_FOUND)

            error = self._validate_lifecycle(room, initiator_id, STATUS_FINISHED)
            if error:
                return ActionResult(success=False, room=room, error=error)

            room.status = STATUS_WAITING
            room.deck = []
            room.potted_ranks = []
            room.winner_id = None
            for player in room.players:
                player.reset_for_lobby()
            room = self._commit(room)

            event = {"event": "restart", "room_id": room_id, "matches": len(room.history)}
            logger.info(json.dumps(event))
            return ActionResult(success=True, room=room, events=[event])

    def get_room(self, room_id: str) -> Room | None:
        return self._repo.get_room(room_id)

    # --- Private helpers ---

    def _load_in_play(
        self, room_id: str, player_id: str
    ) -> tuple[Room | None, Player | None, str | None]:
        """Load a PLAYING room and one of its players. Returns (room, player, error)."""
        room = self._repo.get_room(room_id)
        if room is None:
            self._locks.discard(room_id)
            return None, None, ERR_ROOM_NOT_FOUND
        player = room.get_player(player_id)
        if player is None:
            return room, None, ERR_PLAYER_NOT_FOUND
        if room.status != STATUS_PLAYING:
            return room, player, ERR_GAME_NOT_IN_PROGRESS
        return room, player, None

    @staticmethod
    def _validate_lifecycle(
        room: Room, initiator_id: str, expected_status: str
    ) -> str | None:
        """Creator-only transition out of `expected_status`. Returns error or None."""
        if room.status != expected_status:
            if expected_status == STATUS_WAITING:
                return ERR_GAME_ALREADY_STARTED
            return ERR_INVALID_TRANSITION

        initiator = room.get_player(initiator_id)
        if initiator is None:
            return ERR_PLAYER_NOT_FOUND
        if not initiator.is_creator:
            return ERR_NOT_CREATOR
        return None

    @staticmethod
    def _find_winner(room: Room, potter: Player) -> str | None:
        """Potter wins on an empty hand, else the first empty hand in turn order."""
        if not potter.hand:
            return potter.id
        for p in room.players:
            if not p.hand:
                return p.id
        return None

    def _handle_win(self, room: Room, winner_id: str, events: list[dict]) -> None:
        """Finish the match: settle, record history, update the session ledger."""
        match = build_match_result(
            room.players, winner_id, room.config, timestamp=self._now()
        )
        room.status = STATUS_FINISHED
        room.winner_id = winner_id
        room.history.append(match)
        for pid, amount in match.net_changes.items():
            room.cumulative_settlements[pid] = (
                room.cumulative_settlements.get(pid, Decimal("0")) + amount
            )

        end_event = {
            "event": "game_end",
            "room_id": room.id,
            "winner": winner_id,
            "net_changes": {
                pid: format_money(amount) for pid, amount in match.net_changes.items()
            },
            "settlements": len(match.settlements),
        }
        events.append(end_event)
        logger.info(json.dumps(end_event))

    def _commit(self, room: Room) -> Room:
        room.updated_at = self._now()
        self._repo.save_room(room)
        return self._repo.get_room(room.id)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
