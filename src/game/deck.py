"""Deck operations for Potting: creation, shuffle, deal, draw."""

from __future__ import annotations

import random

from src.game.models import Card
from src.utils.constants import CARDS_PER_PLAYER, MAX_DRAW_ATTEMPTS, RANKS, SUITS


def create_deck() -> list[Card]:
    """Create a full 52-card deck, one card per suit x rank."""
    cards: list[Card] = []
    for suit in SUITS:
        for rank in RANKS:
            cards.append(Card(id=Card.new_card_id(), suit=suit, rank=rank))
    return cards


def shuffle_in_place(items: list, rng: random.Random) -> None:
    """Fisher-Yates from the last index down to 1."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


class Deck:
    """A shuffled 52-card deck that is drawn from the end."""

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        self._cards = create_deck()
        self.shuffle()

    def shuffle(self) -> None:
        shuffle_in_place(self._cards, self._rng)

    def draw(self) -> Card | None:
        if not self._cards:
            return None
        return self._cards.pop()

    @property
    def remaining(self) -> int:
        return len(self._cards)


def deal(
    deck: Deck, num_players: int, cards_each: int = CARDS_PER_PLAYER
) -> tuple[list[list[Card]], list[Card]]:
    """Deal `cards_each` cards to every player, one hand at a time.

    Returns:
        (hands, draw_pile)
        hands: list of hands, one per player in turn order
        draw_pile: the rest of the deck, drawn from the end
    """
    hands: list[list[Card]] = []
    for _ in range(num_players):
        hand = []
        for _ in range(cards_each):
            card = deck.draw()
            if card is not None:
                hand.append(card)
        hands.append(hand)

    draw_pile: list[Card] = []
    while deck.remaining:
        draw_pile.append(deck.draw())
    return hands, draw_pile


def draw_eligible(
    draw_pile: list[Card],
    potted_ranks: list[str],
    max_attempts: int = MAX_DRAW_ATTEMPTS,
) -> tuple[Card | None, list[Card]]:
    """Pop cards off the end of the draw pile until one is not potted.

    Cards of a potted rank are discarded, not returned to the pile.
    Mutates `draw_pile`.

    Returns (card, discarded); card is None when the pile runs out
    or the attempt bound is hit.
    """
    discarded: list[Card] = []
    for _ in range(max_attempts):
        if not draw_pile:
            break
        card = draw_pile.pop()
        if card.rank not in potted_ranks:
            return card, discarded
        discarded.append(card)
    return None, discarded
