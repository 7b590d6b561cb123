"""Tests for settlement calculation."""

from decimal import Decimal

import pytest

from src.game.models import JokerBalls, Player, RoomConfig
from src.game.settlement import (
    SettlementError,
    build_match_result,
    compute_flows,
    compute_net_changes,
    compute_settlements,
)
from src.utils.crypto import create_rng

CONFIG = RoomConfig(game_amount=Decimal("2.00"), joker_amount=Decimal("0.50"))


def p(pid: str, direct: int = 0, all_: int = 0) -> Player:
    return Player(id=pid, display_name=pid.upper(), joker_balls=JokerBalls(direct, all_))


def as_tuples(settlements) -> list[tuple[str, str, str]]:
    return [(s.from_player_id, s.to_player_id, str(s.amount)) for s in settlements]


class TestFlows:
    def test_losers_pay_game_amount(self):
        flows = compute_flows([p("a"), p("b"), p("c")], "a", CONFIG)
        assert flows == {("b", "a"): Decimal("2.00"), ("c", "a"): Decimal("2.00")}

    def test_winner_all_jokers(self):
        flows = compute_flows([p("a", all_=2), p("b")], "a", CONFIG)
        assert flows[("b", "a")] == Decimal("3.00")

    def test_direct_joker_charged_to_previous_player(self):
        players = [p("a"), p("b"), p("c", direct=1)]
        flows = compute_flows(players, "a", CONFIG)
        # 0.50 x (3 - 1) x 1
        assert flows[("b", "c")] == Decimal("1.00")
        assert ("a", "c") not in flows

    def test_direct_joker_wraps_to_last_player(self):
        players = [p("a", direct=1), p("b"), p("c")]
        flows = compute_flows(players, "b", CONFIG)
        assert flows[("c", "a")] == Decimal("1.00")

    def test_loser_all_jokers_not_paid_by_winner(self):
        flows = compute_flows([p("a"), p("b", all_=2), p("c")], "a", CONFIG)
        assert flows[("c", "b")] == Decimal("1.00")
        assert ("a", "b") not in flows

    def test_zero_stakes_no_flows(self):
        config = RoomConfig(Decimal("0"), Decimal("0"))
        assert compute_flows([p("a", all_=1), p("b", direct=3)], "a", config) == {}

    def test_unknown_winner(self):
        with pytest.raises(SettlementError):
            compute_flows([p("a"), p("b")], "zz", CONFIG)


class TestSettlements:
    def test_two_players_winner_all_joker(self):
        settlements = compute_settlements([p("a", all_=1), p("b")], "a", CONFIG)
        assert as_tuples(settlements) == [("b", "a", "2.50")]
        assert settlements[0].breakdown == "$2.50"

    def test_three_players_direct_joker(self):
        players = [p("a"), p("b", direct=1), p("c")]
        settlements = compute_settlements(players, "b", CONFIG)
        assert as_tuples(settlements) == [("a", "b", "3.00"), ("c", "b", "2.00")]

    def test_offset_breakdown(self):
        players = [p("a"), p("b", all_=1), p("c", direct=1)]
        settlements = compute_settlements(players, "a", CONFIG)
        assert as_tuples(settlements) == [
            ("b", "a", "2.00"),
            ("c", "a", "2.00"),
            ("b", "c", "0.50"),
        ]
        assert settlements[2].breakdown == "$1.00 -$0.50 offset"

    def test_loser_direct_against_winner_is_offset(self):
        settlements = compute_settlements([p("a", direct=1), p("b")], "b", CONFIG)
        assert as_tuples(settlements) == [("a", "b", "1.50")]
        assert settlements[0].breakdown == "$2.00 -$0.50 offset"

    def test_equal_flows_cancel(self):
        players = [p("a"), p("b", all_=1), p("c", all_=1)]
        settlements = compute_settlements(players, "a", CONFIG)
        pairs = {(s.from_player_id, s.to_player_id) for s in settlements}
        assert pairs == {("b", "a"), ("c", "a")}

    def test_amounts_are_positive_cents(self):
        config = RoomConfig(Decimal("1.333"), Decimal("0.10"))
        settlements = compute_settlements([p("a"), p("b")], "a", config)
        assert settlements[0].amount == Decimal("1.33")
        assert all(s.amount > 0 for s in settlements)

    def test_at_most_one_per_pair(self):
        rng = create_rng(11)
        for _ in range(50):
            players = [
                p(f"p{i}", direct=rng.randint(0, 3), all_=rng.randint(0, 3))
                for i in range(rng.randint(2, 4))
            ]
            winner = rng.choice(players).id
            settlements = compute_settlements(players, winner, CONFIG)
            pairs = [frozenset((s.from_player_id, s.to_player_id)) for s in settlements]
            assert len(pairs) == len(set(pairs))


class TestNetChanges:
    def test_zero_sum(self):
        rng = create_rng(5)
        for _ in range(50):
            players = [
                p(f"p{i}", direct=rng.randint(0, 4), all_=rng.randint(0, 4))
                for i in range(rng.randint(2, 4))
            ]
            winner = rng.choice(players).id
            settlements = compute_settlements(players, winner, CONFIG)
            changes = compute_net_changes(players, settlements)
            assert sum(changes.values()) == 0
            assert set(changes) == {x.id for x in players}

    def test_every_player_listed(self):
        players = [p("a"), p("b")]
        changes = compute_net_changes(players, [])
        assert changes == {"a": Decimal("0"), "b": Decimal("0")}


class TestMatchResult:
    def test_snapshots_and_winner(self):
        a = p("a", all_=1)
        a.has_license = True
        b = p("b", direct=2)
        match = build_match_result([a, b], "a", CONFIG, timestamp="t")
        assert match.winner_id == "a"
        assert match.winner_name == "A"
        assert match.timestamp == "t"
        snap_b = match.player_snapshots[1]
        assert (snap_b.id, snap_b.direct_j, snap_b.all_j) == ("b", 2, 0)
        assert match.player_snapshots[0].has_license
        assert sum(match.net_changes.values()) == 0
