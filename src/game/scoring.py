"""Session standings (wins and net money) for Potting."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from src.game.models import MatchResult, Player, format_money


@dataclass
class Standing:
    player_id: str
    name: str
    wins: int = 0
    net: Decimal = Decimal("0.00")

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "name": self.name,
            "wins": self.wins,
            "net": format_money(self.net),
        }


def count_wins(history: list[MatchResult]) -> dict[str, int]:
    """Number of matches won, keyed by player id."""
    wins: dict[str, int] = {}
    for match in history:
        wins[match.winner_id] = wins.get(match.winner_id, 0) + 1
    return wins


def total_net_changes(history: list[MatchResult]) -> dict[str, Decimal]:
    """Sum of every match's net changes, keyed by player id."""
    totals: dict[str, Decimal] = {}
    for match in history:
        for pid, amount in match.net_changes.items():
            totals[pid] = totals.get(pid, Decimal("0")) + amount
    return totals


def compute_standings(
    history: list[MatchResult], players: list[Player]
) -> list[Standing]:
    """Leaderboard over the session, best net first, then most wins.

    Players who left the room still appear, named from their last
    match snapshot.
    """
    names = {}
    for match in history:
        for snap in match.player_snapshots:
            names[snap.id] = snap.name
    for p in players:
        names[p.id] = p.display_name

    wins = count_wins(history)
    totals = total_net_changes(history)
    rows = [
        Standing(
            player_id=pid,
            name=name,
            wins=wins.get(pid, 0),
            net=totals.get(pid, Decimal("0.00")),
        )
        for pid, name in names.items()
    ]
    rows.sort(key=lambda s: (-s.net, -s.wins))
    return rows
