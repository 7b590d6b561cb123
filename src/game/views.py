"""Player-facing snapshots of a room.

Each recipient sees their own hand in full; other hands are collapsed
to a card count. Transport handles never leave the server.
"""

from __future__ import annotations

from src.game.models import Player, Room, format_money
from src.game.scoring import compute_standings
from src.utils.constants import STATUS_FINISHED


def player_view(player: Player, show_hand: bool) -> dict:
    return {
        "id": player.id,
        "name": player.display_name,
        "hand": [c.to_dict() for c in player.hand] if show_hand else [],
        "cardCount": len(player.hand),
        "hasLicense": player.has_license,
        "jokerBalls": player.joker_balls.to_dict(),
        "isCreator": player.is_creator,
        "connected": player.connected,
    }


def build_room_view(room: Room, viewer_id: str | None) -> dict:
    """Snapshot of `room` as `viewer_id` is allowed to see it."""
    settlements = []
    if room.status == STATUS_FINISHED and room.last_match is not None:
        settlements = [s.to_dict() for s in room.last_match.settlements]

    return {
        "roomId": room.id,
        "roomCode": room.room_code,
        "config": room.config.to_dict(),
        "status": room.status,
        "players": [player_view(p, p.id == viewer_id) for p in room.players],
        "pottedRanks": list(room.potted_ranks),
        "deckCount": len(room.deck),
        "winnerId": room.winner_id,
        "settlements": settlements,
        "history": [m.to_dict() for m in room.history],
        "cumulativeSettlements": {
            pid: format_money(amount)
            for pid, amount in room.cumulative_settlements.items()
        },
        "standings": [
            s.to_dict() for s in compute_standings(room.history, room.players)
        ],
    }
