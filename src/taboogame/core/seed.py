"""SeedManager — deterministic, HMAC-derived RNG per game.

Seeds are derived via HMAC-SHA256 so the shuffle order of game N never
depends on how many draws earlier games made.
"""

import hashlib
import hmac
import random

from taboogame.core.errors import ConfigurationError

# Session seeds are packed into a signed 64-bit HMAC key.
SEED_MIN = -(2 ** 63)
SEED_MAX = 2 ** 63 - 1


def check_seed(seed) -> int:
    """Return *seed* unchanged, or raise ConfigurationError if it is unusable."""
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ConfigurationError(f"seed must be an integer, got {seed!r}")
    if not SEED_MIN <= seed <= SEED_MAX:
        raise ConfigurationError(
            f"seed must be between {SEED_MIN} and {SEED_MAX}, got {seed}"
        )
    return seed


class SeedManager:
    """Produces deterministic, isolated Random instances for each game."""

    def __init__(self, session_seed: int):
        self._session_seed = check_seed(session_seed)

    @property
    def session_seed(self) -> int:
        return self._session_seed

    def get_game_seed(self, game_number: int) -> int:
        """Derive a game seed via HMAC. Same inputs always produce the same seed."""
        key = self._session_seed.to_bytes(8, byteorder="big", signed=True)
        msg = f"game:{game_number}".encode("utf-8")
        digest = hmac.new(key, msg, hashlib.sha256).digest()
        return int.from_bytes(digest[:8], byteorder="big")

    def get_rng(self, game_seed: int) -> random.Random:
        """Return an isolated Random instance. Never touches global state."""
        return random.Random(game_seed)
