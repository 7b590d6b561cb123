"""Secure random utilities for Potting."""

import random
import secrets

from src.utils.constants import ROOM_CODE_LENGTH

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def create_rng(seed: int | None = None) -> random.Random:
    """Create a Random instance.

    If seed is provided, returns a deterministic Random (for tests/replay).
    If seed is None, returns SystemRandom (cryptographically secure).
    """
    if seed is not None:
        return random.Random(seed)
    return secrets.SystemRandom()


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Generate a human-typable room code (no ambiguous chars)."""
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))
