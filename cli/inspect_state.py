"""Inspect and validate a saved room state.

Usage:
  python -m cli.inspect_state --file room_snapshot.json
  python -m cli.inspect_state --file room_snapshot.json --player <id> --show hand
  python -m cli.inspect_state --file room_snapshot.json --show settlements
  python -m cli.inspect_state --file room_snapshot.json --show standings
  python -m cli.inspect_state --file room_snapshot.json --validate
"""

from __future__ import annotations

import argparse
import json
import sys
from decimal import Decimal

from src.game.integrity import validate_room_integrity
from src.game.models import Room, format_money
from src.game.scoring import compute_standings


def inspect_state(
    file_path: str,
    player: str | None,
    show: str | None,
    validate: bool,
) -> None:
    with open(file_path) as f:
        data = json.load(f)

    room = Room.from_dict(data)
    names = {p.id: p.display_name for p in room.players}

    if validate:
        errors = validate_room_integrity(room)
        if errors:
            print("Integrity errors:")
            for e in errors:
                print(f"  - {e}")
            sys.exit(1)
        else:
            print("State is valid ✓")
        return

    if player and show == "hand":
        p = room.get_player(player)
        if p is None:
            print(f"Player {player} not found")
            sys.exit(1)
        print(f"Hand of {p.display_name} ({len(p.hand)} cards):")
        for i, card in enumerate(p.hand, 1):
            print(f"  {i:2d}. {card.display()} [{card.id}]")
        return

    if show == "settlements":
        match = room.last_match
        if match is None:
            print("No matches played")
            return
        print(f"Last match won by {match.winner_name} at {match.timestamp}")
        for s in match.settlements:
            debtor = names.get(s.from_player_id, s.from_player_id)
            creditor = names.get(s.to_player_id, s.to_player_id)
            print(f"  {debtor} -> {creditor}: {format_money(s.amount)} ({s.breakdown})")
        return

    if show == "standings":
        for i, s in enumerate(compute_standings(room.history, room.players), 1):
            print(f"  {i}. {s.name}: {s.wins} wins, net {format_money(s.net)}")
        return

    # Default: full dump
    print(f"Room ID: {room.id} (code {room.room_code})")
    print(f"Status: {room.status}")
    print(
        f"Stakes: game {format_money(room.config.game_amount)}, "
        f"joker {format_money(room.config.joker_amount)}"
    )
    print(f"Deck: {len(room.deck)} cards")
    print(f"Potted: {', '.join(room.potted_ranks) or '-'}")
    if room.winner_id:
        print(f"Winner: {names.get(room.winner_id, room.winner_id)}")
    print(f"Matches played: {len(room.history)}")
    print("Players:")
    for p in room.players:
        license_str = "license" if p.has_license else "no license"
        owed = format_money(room.cumulative_settlements.get(p.id, Decimal("0")))
        print(
            f"  {p.display_name}: {len(p.hand)} cards ({license_str}), "
            f"J direct={p.joker_balls.direct} all={p.joker_balls.all}, net {owed}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect Potting room state")
    parser.add_argument("--file", required=True, help="Path to room state JSON")
    parser.add_argument("--player", help="Player ID to inspect")
    parser.add_argument(
        "--show", choices=["hand", "settlements", "standings"], help="What to show"
    )
    parser.add_argument("--validate", action="store_true", help="Validate integrity")
    args = parser.parse_args()
    inspect_state(args.file, args.player, args.show, args.validate)


if __name__ == "__main__":
    main()
