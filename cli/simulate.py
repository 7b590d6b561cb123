"""Simulate Potting sessions with random players.

Usage: python -m cli.simulate --games 100 --players 4 [--seed 42] [--verbose]
"""

from __future__ import annotations

import argparse
import random
import time
from decimal import Decimal

from src.db.memory import InMemoryRoomRepository
from src.game.engine import GameEngine
from src.game.integrity import validate_room_integrity
from src.game.models import Room, format_money
from src.game.scoring import compute_standings
from src.lobby.locks import RoomLocks
from src.lobby.manager import LobbyManager
from src.utils.constants import JOKER_KINDS, STATUS_FINISHED, STATUS_PLAYING
from src.utils.crypto import create_rng


def random_action(engine: GameEngine, room: Room, rng: random.Random) -> Room:
    """One action by a random player. Returns updated room state."""
    player = rng.choice(room.players)
    roll = rng.random()

    if roll < 0.08 and player.has_license:
        result = engine.update_joker_count(room.id, player.id, rng.choice(JOKER_KINDS), 1)
    elif roll < 0.12 and player.has_license:
        result = engine.mark_foul(room.id, player.id)
    elif roll < 0.40:
        result = engine.draw_card(room.id, player.id)
    elif player.hand:
        card = rng.choice(player.hand)
        result = engine.pot_card(room.id, player.id, card.id)
    else:
        result = engine.draw_card(room.id, player.id)

    # Failed draws on an exhausted deck still return the current room
    return result.room if result.room is not None else room


def simulate_session(
    num_players: int, num_games: int, rng: random.Random, verbose: bool = False
) -> dict:
    """Play `num_games` matches in one room. Returns stats dict."""
    repo = InMemoryRoomRepository()
    locks = RoomLocks()
    engine = GameEngine(repo, rng, locks)
    lobby = LobbyManager(repo, locks)

    created = lobby.create_room("2.00", "0.50", "p1")
    room, creator = created.room, created.player
    for i in range(1, num_players):
        lobby.join_room(room.room_code, f"p{i + 1}")

    max_actions = 2000
    total_actions = 0
    for game_no in range(num_games):
        result = engine.start_game(room.id, creator.id)
        if not result.success:
            return {"error": result.error, "actions": total_actions}
        room = result.room

        actions = 0
        while room.status == STATUS_PLAYING and actions < max_actions:
            errors = validate_room_integrity(room)
            if errors:
                return {"error": f"Integrity: {errors}", "actions": total_actions}
            room = random_action(engine, room, rng)
            actions += 1

        total_actions += actions
        if room.status != STATUS_FINISHED:
            return {"error": "Match did not finish", "actions": total_actions}

        errors = validate_room_integrity(room)
        if errors:
            return {"error": f"Integrity: {errors}", "actions": total_actions}

        if verbose:
            match = room.last_match
            print(
                f"    Game {game_no + 1}: winner={match.winner_name}, "
                f"actions={actions}, settlements={len(match.settlements)}"
            )

        room = engine.restart_game(room.id, creator.id).room

    standings = compute_standings(room.history, room.players)
    total = sum(room.cumulative_settlements.values(), Decimal("0"))
    if total != 0:
        return {"error": f"Ledger sums to {total}", "actions": total_actions}

    return {
        "error": None,
        "actions": total_actions,
        "standings": [(s.name, s.wins, format_money(s.net)) for s in standings],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Potting Simulator")
    parser.add_argument("--sessions", type=int, default=20)
    parser.add_argument("--games", type=int, default=10, help="Matches per session")
    parser.add_argument("--players", type=int, default=4, choices=[2, 3, 4])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    base_seed = args.seed if args.seed is not None else int(time.time())
    print(
        f"Simulating {args.sessions} sessions of {args.games} games "
        f"with {args.players} players (base seed: {base_seed})"
    )

    errors = 0
    total_actions = 0
    for i in range(args.sessions):
        rng = create_rng(base_seed + i)
        result = simulate_session(args.players, args.games, rng, verbose=args.verbose)

        if result.get("error"):
            errors += 1
            print(f"  Session {i + 1}: ERROR - {result['error']}")
            continue

        total_actions += result["actions"]
        if args.verbose:
            print(f"  Session {i + 1}: {result['standings']}")

    completed = args.sessions - errors
    print("\nResults:")
    print(f"  Sessions completed: {completed}/{args.sessions}")
    print(f"  Errors: {errors}")
    if completed > 0:
        print(f"  Average actions per game: {total_actions / (completed * args.games):.1f}")


if __name__ == "__main__":
    main()
