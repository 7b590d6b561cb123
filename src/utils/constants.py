"""Game constants for Potting."""

from decimal import Decimal

# Suits
HEARTS = "hearts"
DIAMONDS = "diamonds"
CLUBS = "clubs"
SPADES = "spades"
SUITS = [HEARTS, DIAMONDS, CLUBS, SPADES]

# Suit display symbols
SUIT_SYMBOLS = {
    HEARTS: "♥",
    DIAMONDS: "♦",
    CLUBS: "♣",
    SPADES: "♠",
}

# Ranks (potting equivalence classes)
RANKS = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]

# Game parameters
TOTAL_CARDS = 52
CARDS_PER_PLAYER = 7
MAX_PLAYERS = 4
MIN_PLAYERS = 2
MAX_DRAW_ATTEMPTS = 100
MAX_NAME_LENGTH = 24
DEFAULT_PLAYER_NAME = "Player"

# Joker balls
JOKER_DIRECT = "direct"
JOKER_ALL = "all"
JOKER_KINDS = (JOKER_DIRECT, JOKER_ALL)
JOKER_DELTAS = (1, -1)

# Money
CENT = Decimal("0.01")
SETTLEMENT_EPSILON = Decimal("0.001")

# Room statuses
STATUS_WAITING = "WAITING"
STATUS_PLAYING = "PLAYING"
STATUS_FINISHED = "FINISHED"

# Error kinds
ERR_ROOM_NOT_FOUND = "RoomNotFound"
ERR_ROOM_FULL = "RoomFull"
ERR_GAME_ALREADY_STARTED = "GameAlreadyStarted"
ERR_PLAYER_NOT_FOUND = "PlayerNotFound"
ERR_CARD_NOT_IN_HAND = "CardNotInHand"
ERR_NO_ELIGIBLE_CARDS = "NoEligibleCards"
ERR_LICENSE_REQUIRED = "LicenseRequired"
ERR_INVALID_JOKER_DELTA = "InvalidJokerDelta"
ERR_NOT_CREATOR = "NotCreator"
ERR_NOT_ENOUGH_PLAYERS = "NotEnoughPlayers"
ERR_GAME_NOT_IN_PROGRESS = "GameNotInProgress"
ERR_INVALID_TRANSITION = "InvalidTransition"
ERR_INVALID_CONFIG = "InvalidConfig"
ERR_NOT_IN_ROOM = "NotInRoom"
ERR_VERSION_CONFLICT = "VersionConflict"

ERROR_MESSAGES = {
    ERR_ROOM_NOT_FOUND: "Room not found",
    ERR_ROOM_FULL: "Room is full",
    ERR_GAME_ALREADY_STARTED: "Game already started",
    ERR_PLAYER_NOT_FOUND: "Player not found",
    ERR_CARD_NOT_IN_HAND: "Card not in hand",
    ERR_NO_ELIGIBLE_CARDS: "No eligible cards remaining in deck",
    ERR_LICENSE_REQUIRED: "License required",
    ERR_INVALID_JOKER_DELTA: "Joker balls cannot go below zero",
    ERR_NOT_CREATOR: "Only the room creator can do that",
    ERR_NOT_ENOUGH_PLAYERS: f"At least {MIN_PLAYERS} players are needed",
    ERR_GAME_NOT_IN_PROGRESS: "The game is not in progress",
    ERR_INVALID_TRANSITION: "The room cannot do that right now",
    ERR_INVALID_CONFIG: "Amounts must be non-negative numbers",
    ERR_NOT_IN_ROOM: "You are not in a room",
    ERR_VERSION_CONFLICT: "The room changed, try again",
}

# Room codes
ROOM_CODE_LENGTH = 6
