"""Settlement calculation for Potting.

Turns the terminal state of a match into pairwise payments. Raw
one-directional flows are accumulated first, then every unordered pair
is netted down to at most one payment.
"""

from __future__ import annotations

from decimal import Decimal

from src.game.models import (
    MatchResult,
    PairwiseSettlement,
    Player,
    PlayerSnapshot,
    RoomConfig,
    format_money,
    previous_player,
    round_money,
)
from src.utils.constants import SETTLEMENT_EPSILON

Flows = dict[tuple[str, str], Decimal]


class SettlementError(Exception):
    """Settlement arithmetic broke an invariant (e.g. non-zero-sum result)."""


def compute_flows(
    players: list[Player], winner_id: str, config: RoomConfig
) -> Flows:
    """Accumulate debts keyed by (debtor_id, creditor_id).

    1. Every non-winner owes the winner the game amount.
    2. Winner's "all" jokers: every non-winner owes the winner
       joker_amount x winner.all.
    3. Any player's "direct" jokers: the player before P in turn order
       owes P joker_amount x (n - 1) x P.direct.
    4. Non-winner's "all" jokers: every other non-winner owes L
       joker_amount x L.all. The winner does not pay these.
    """
    flows: Flows = {}
    num_players = len(players)

    def add_flow(from_id: str, to_id: str, amount: Decimal) -> None:
        if from_id == to_id or amount <= 0:
            return
        key = (from_id, to_id)
        flows[key] = flows.get(key, Decimal("0")) + amount

    winner = next((p for p in players if p.id == winner_id), None)
    if winner is None:
        raise SettlementError(f"Winner {winner_id} is not in the room")
    losers = [p for p in players if p.id != winner_id]

    for loser in losers:
        add_flow(loser.id, winner_id, config.game_amount)

    if winner.joker_balls.all > 0:
        for loser in losers:
            add_flow(loser.id, winner_id, config.joker_amount * winner.joker_balls.all)

    for player in players:
        if player.joker_balls.direct > 0:
            above = previous_player(players, player.id)
            amount = config.joker_amount * (num_players - 1) * player.joker_balls.direct
            add_flow(above.id, player.id, amount)

    for loser in losers:
        if loser.joker_balls.all > 0:
            for other in losers:
                if other.id == loser.id:
                    continue
                add_flow(other.id, loser.id, config.joker_amount * loser.joker_balls.all)

    return flows


def net_flows(players: list[Player], flows: Flows) -> list[PairwiseSettlement]:
    """Net each unordered pair of players down to a single payment.

    Pairs are visited in turn order. Near-zero nets are dropped.
    """
    settlements: list[PairwiseSettlement] = []
    zero = Decimal("0")
    for i, a in enumerate(players):
        for b in players[i + 1:]:
            a_to_b = flows.get((a.id, b.id), zero)
            b_to_a = flows.get((b.id, a.id), zero)
            net = a_to_b - b_to_a
            if abs(net) <= SETTLEMENT_EPSILON:
                continue

            if net > 0:
                debtor, creditor, forward, offset = a, b, a_to_b, b_to_a
            else:
                debtor, creditor, forward, offset = b, a, b_to_a, a_to_b

            parts = []
            if forward > 0:
                parts.append(f"${format_money(forward)}")
            if offset > 0:
                parts.append(f"-${format_money(offset)} offset")

            settlements.append(
                PairwiseSettlement(
                    from_player_id=debtor.id,
                    to_player_id=creditor.id,
                    amount=round_money(abs(net)),
                    breakdown=" ".join(parts),
                )
            )
    return settlements


def compute_settlements(
    players: list[Player], winner_id: str, config: RoomConfig
) -> list[PairwiseSettlement]:
    return net_flows(players, compute_flows(players, winner_id, config))


def compute_net_changes(
    players: list[Player], settlements: list[PairwiseSettlement]
) -> dict[str, Decimal]:
    """Amount received minus amount paid, for every player.

    Raises SettlementError if the result does not sum to zero.
    """
    net_changes = {p.id: Decimal("0.00") for p in players}
    for s in settlements:
        net_changes[s.from_player_id] -= s.amount
        net_changes[s.to_player_id] += s.amount

    total = sum(net_changes.values(), Decimal("0"))
    if total != 0:
        raise SettlementError(f"Net changes sum to {total}, expected 0")
    return net_changes


def build_match_result(
    players: list[Player], winner_id: str, config: RoomConfig, timestamp: str
) -> MatchResult:
    """Settle a finished match into its history record."""
    settlements = compute_settlements(players, winner_id, config)
    net_changes = compute_net_changes(players, settlements)
    winner = next(p for p in players if p.id == winner_id)
    snapshots = [
        PlayerSnapshot(
            id=p.id,
            name=p.display_name,
            direct_j=p.joker_balls.direct,
            all_j=p.joker_balls.all,
            card_count=len(p.hand),
            has_license=p.has_license,
        )
        for p in players
    ]
    return MatchResult(
        winner_id=winner_id,
        winner_name=winner.display_name,
        timestamp=timestamp,
        net_changes=net_changes,
        player_snapshots=snapshots,
        settlements=settlements,
    )
