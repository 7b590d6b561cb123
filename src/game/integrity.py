"""State integrity checker for Potting room state."""

from __future__ import annotations

from collections import Counter

from src.game.models import Card, Room
from src.utils.constants import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    STATUS_FINISHED,
    STATUS_PLAYING,
    STATUS_WAITING,
    TOTAL_CARDS,
)


def validate_room_integrity(room: Room) -> list[str]:
    """Validate all room state invariants. Returns list of errors (empty = OK).

    Checks:
    1. Status is known, winner is set exactly when FINISHED
    2. Player count within limits once a game has started
    3. Joker balls are non-negative
    4. While PLAYING: hands + deck fit in 52 cards, no duplicates,
       no potted rank left in any hand
    5. Every recorded match sums to zero
    """
    errors: list[str] = []

    # 1. Status and winner
    if room.status not in (STATUS_WAITING, STATUS_PLAYING, STATUS_FINISHED):
        errors.append(f"Unknown status: {room.status}")
    if room.status == STATUS_FINISHED and room.winner_id is None:
        errors.append("Room is FINISHED without a winner")
    if room.status != STATUS_FINISHED and room.winner_id is not None:
        errors.append(f"Winner {room.winner_id} set while {room.status}")
    if room.winner_id is not None and room.get_player(room.winner_id) is None:
        errors.append(f"Winner {room.winner_id} is not in the room")

    # 2. Player count
    if len(room.players) > MAX_PLAYERS:
        errors.append(f"{len(room.players)} players, max {MAX_PLAYERS}")
    if room.status != STATUS_WAITING and len(room.players) < MIN_PLAYERS:
        errors.append(f"{len(room.players)} players in a {room.status} room")
    creators = [p.id for p in room.players if p.is_creator]
    if len(creators) != 1:
        errors.append(f"Expected one creator, found {len(creators)}")

    # 3. Joker balls
    for p in room.players:
        if p.joker_balls.direct < 0 or p.joker_balls.all < 0:
            errors.append(f"Negative joker balls for {p.id}: {p.joker_balls.to_dict()}")

    # 4. Cards in play
    if room.status == STATUS_PLAYING:
        all_cards: list[Card] = []
        for p in room.players:
            all_cards.extend(p.hand)
        all_cards.extend(room.deck)

        max_cards = TOTAL_CARDS - 4 * len(room.potted_ranks)
        in_hands = sum(len(p.hand) for p in room.players)
        if in_hands > max_cards:
            errors.append(f"Cards in hands = {in_hands}, at most {max_cards}")
        if len(all_cards) > TOTAL_CARDS:
            errors.append(f"Total cards = {len(all_cards)}, at most {TOTAL_CARDS}")

        id_counts = Counter(c.id for c in all_cards)
        for card_id, count in id_counts.items():
            if count > 1:
                errors.append(f"Duplicate card id {card_id} (x{count})")

        face_counts = Counter((c.suit, c.rank) for c in all_cards)
        for (suit, rank), count in face_counts.items():
            if count > 1:
                errors.append(f"Duplicate card {rank} of {suit} (x{count})")

        if len(set(room.potted_ranks)) != len(room.potted_ranks):
            errors.append(f"Duplicate potted ranks: {room.potted_ranks}")

        for p in room.players:
            leftover = [c.rank for c in p.hand if c.rank in room.potted_ranks]
            if leftover:
                errors.append(f"Player {p.id} still holds potted ranks {leftover}")

    # 5. History
    for i, match in enumerate(room.history):
        total = sum(match.net_changes.values())
        if total != 0:
            errors.append(f"Match {i} net changes sum to {total}")

    return errors
