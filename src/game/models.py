"""Data models for Potting room state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.utils.constants import (
    CENT,
    JOKER_ALL,
    JOKER_DIRECT,
    RANKS,
    STATUS_WAITING,
    SUIT_SYMBOLS,
    SUITS,
)


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a Decimal amount.

    Floats go through str() so that 0.1 stays 0.1.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not an amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    return amount


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to whole cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Two-decimal string used for storage and the wire."""
    return str(round_money(amount))


@dataclass(frozen=True)
class Card:
    """A single playing card. `id` is the only way to target it."""

    id: str
    suit: str  # "hearts", "diamonds", "clubs", "spades"
    rank: str  # "A", "2".."10", "J", "Q", "K"

    def __post_init__(self) -> None:
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")

    def display(self) -> str:
        """Unicode display string."""
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {"id": self.id, "suit": self.suit, "rank": self.rank}

    @classmethod
    def from_dict(cls, d: dict) -> Card:
        return cls(id=d["id"], suit=d["suit"], rank=d["rank"])

    @staticmethod
    def new_card_id() -> str:
        return str(uuid.uuid4())


@dataclass
class JokerBalls:
    direct: int = 0
    all: int = 0

    def get(self, kind: str) -> int:
        return self.direct if kind == JOKER_DIRECT else self.all

    def set(self, kind: str, value: int) -> None:
        if kind == JOKER_DIRECT:
            self.direct = value
        elif kind == JOKER_ALL:
            self.all = value
        else:
            raise ValueError(f"Unknown joker kind: {kind}")

    def to_dict(self) -> dict:
        return {"direct": self.direct, "all": self.all}

    @classmethod
    def from_dict(cls, d: dict) -> JokerBalls:
        return cls(direct=int(d.get("direct", 0)), all=int(d.get("all", 0)))


@dataclass
class RoomConfig:
    """Stakes of a room: paid per lost game and per joker ball."""

    game_amount: Decimal
    joker_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "gameAmount": format_money(self.game_amount),
            "jokerAmount": format_money(self.joker_amount),
        }

    @classmethod
    def from_dict(cls, d: dict) -> RoomConfig:
        return cls(
            game_amount=to_money(d["gameAmount"]),
            joker_amount=to_money(d["jokerAmount"]),
        )


@dataclass
class Player:
    """A member of exactly one room."""

    id: str
    display_name: str
    hand: list[Card] = field(default_factory=list)
    has_license: bool = False
    joker_balls: JokerBalls = field(default_factory=JokerBalls)
    is_creator: bool = False
    connected: bool = True
    # Transport handle, never part of a player-facing view
    connection_id: str | None = None

    def find_card(self, card_id: str) -> Card | None:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def reset_for_lobby(self) -> None:
        self.hand = []
        self.has_license = False
        self.joker_balls = JokerBalls()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.display_name,
            "hand": [c.to_dict() for c in self.hand],
            "hasLicense": self.has_license,
            "jokerBalls": self.joker_balls.to_dict(),
            "isCreator": self.is_creator,
            "connected": self.connected,
            "connectionId": self.connection_id,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Player:
        return cls(
            id=d["id"],
            display_name=d["name"],
            hand=[Card.from_dict(c) for c in d.get("hand", [])],
            has_license=d.get("hasLicense", False),
            joker_balls=JokerBalls.from_dict(d.get("jokerBalls", {})),
            is_creator=d.get("isCreator", False),
            connected=d.get("connected", True),
            connection_id=d.get("connectionId"),
        )

    @staticmethod
    def new_player_id() -> str:
        return str(uuid.uuid4())


def previous_player(players: list[Player], player_id: str) -> Player:
    """The player immediately before `player_id` in turn order (circular)."""
    ids = [p.id for p in players]
    return players[(ids.index(player_id) - 1) % len(players)]


@dataclass(frozen=True)
class PairwiseSettlement:
    """One netted payment between two players."""

    from_player_id: str
    to_player_id: str
    amount: Decimal
    breakdown: str

    def to_dict(self) -> dict:
        return {
            "fromPlayerId": self.from_player_id,
            "toPlayerId": self.to_player_id,
            "amount": format_money(self.amount),
            "breakdown": self.breakdown,
        }

    @classmethod
    def from_dict(cls, d: dict) -> PairwiseSettlement:
        return cls(
            from_player_id=d["fromPlayerId"],
            to_player_id=d["toPlayerId"],
            amount=to_money(d["amount"]),
            breakdown=d.get("breakdown", ""),
        )


@dataclass(frozen=True)
class PlayerSnapshot:
    """Player state frozen at the end of a match."""

    id: str
    name: str
    direct_j: int
    all_j: int
    card_count: int
    has_license: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "directJ": self.direct_j,
            "allJ": self.all_j,
            "cardCount": self.card_count,
            "hasLicense": self.has_license,
        }

    @classmethod
    def from_dict(cls, d: dict) -> PlayerSnapshot:
        return cls(
            id=d["id"],
            name=d["name"],
            direct_j=int(d.get("directJ", 0)),
            all_j=int(d.get("allJ", 0)),
            card_count=int(d.get("cardCount", 0)),
            has_license=d.get("hasLicense", False),
        )


@dataclass
class MatchResult:
    """Append-only record of one finished match."""

    winner_id: str
    winner_name: str
    timestamp: str
    net_changes: dict[str, Decimal]
    player_snapshots: list[PlayerSnapshot]
    settlements: list[PairwiseSettlement]

    def to_dict(self) -> dict:
        return {
            "winnerId": self.winner_id,
            "winnerName": self.winner_name,
            "timestamp": self.timestamp,
            "netChanges": {
                pid: format_money(amount) for pid, amount in self.net_changes.items()
            },
            "playerSnapshots": [s.to_dict() for s in self.player_snapshots],
            "settlements": [s.to_dict() for s in self.settlements],
        }

    @classmethod
    def from_dict(cls, d: dict) -> MatchResult:
        return cls(
            winner_id=d["winnerId"],
            winner_name=d["winnerName"],
            timestamp=d["timestamp"],
            net_changes={
                pid: to_money(amount) for pid, amount in d["netChanges"].items()
            },
            player_snapshots=[
                PlayerSnapshot.from_dict(s) for s in d.get("playerSnapshots", [])
            ],
            settlements=[
                PairwiseSettlement.from_dict(s) for s in d.get("settlements", [])
            ],
        )


@dataclass
class Room:
    """Complete state of a room (maps to one DynamoDB row)."""

    id: str
    room_code: str
    config: RoomConfig
    players: list[Player]
    status: str = STATUS_WAITING
    deck: list[Card] = field(default_factory=list)
    potted_ranks: list[str] = field(default_factory=list)
    winner_id: str | None = None
    history: list[MatchResult] = field(default_factory=list)
    cumulative_settlements: dict[str, Decimal] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    version: int = 1

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    @property
    def last_match(self) -> MatchResult | None:
        return self.history[-1] if self.history else None

    def to_dict(self) -> dict:
        return {
            "roomId": self.id,
            "roomCode": self.room_code,
            "config": self.config.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "status": self.status,
            "deck": [c.to_dict() for c in self.deck],
            "pottedRanks": list(self.potted_ranks),
            "winnerId": self.winner_id,
            "history": [m.to_dict() for m in self.history],
            "cumulativeSettlements": {
                pid: format_money(amount)
                for pid, amount in self.cumulative_settlements.items()
            },
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Room:
        return cls(
            id=d["roomId"],
            room_code=d["roomCode"],
            config=RoomConfig.from_dict(d["config"]),
            players=[Player.from_dict(p) for p in d["players"]],
            status=d.get("status", STATUS_WAITING),
            deck=[Card.from_dict(c) for c in d.get("deck", [])],
            potted_ranks=list(d.get("pottedRanks", [])),
            winner_id=d.get("winnerId"),
            history=[MatchResult.from_dict(m) for m in d.get("history", [])],
            cumulative_settlements={
                pid: to_money(amount)
                for pid, amount in d.get("cumulativeSettlements", {}).items()
            },
            created_at=d.get("createdAt", ""),
            updated_at=d.get("updatedAt", ""),
            version=int(d.get("version", 1)),
        )

    @staticmethod
    def new_room_id() -> str:
        return str(uuid.uuid4())
