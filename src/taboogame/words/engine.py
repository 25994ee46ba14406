"""Word draw engine — shuffled pool with non-repeating draws.

The pool is a random permutation of the corpus. Draws pick uniformly among
pool indices not yet used in the current cycle. Once every index has been
used the pool is reshuffled from the full corpus and the cycle starts over
at index 0; the previous used set is discarded entirely.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Sequence

from taboogame.core.errors import ConfigurationError

__all__ = ["WordCard", "WordDrawEngine", "shuffle_cards"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordCard:
    """A target word plus the terms the describer may not say."""

    word: str
    taboo: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"word": self.word, "taboo": list(self.taboo)}


def shuffle_cards(cards: Sequence[WordCard], rng: random.Random) -> list[WordCard]:
    """Return a Fisher-Yates permutation of *cards*. The input is not modified."""
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class WordDrawEngine:
    """Owns the shuffled word pool and the used/unused partition."""

    def __init__(
        self,
        corpus: Iterable[WordCard],
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._corpus: list[WordCard] = []
        self._pool: list[WordCard] = []
        self._used: set[int] = set()
        self._last_index: int | None = None
        self._cycles = 0
        self.reshuffle(corpus)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def reshuffle(self, corpus: Iterable[WordCard] | None = None) -> None:
        """Shuffle the full corpus into a new pool and clear the used set.

        Passing *corpus* replaces the stored corpus first.
        """
        if corpus is not None:
            cards = list(corpus)
            if not cards:
                raise ConfigurationError("word corpus is empty")
            self._corpus = cards
        self._pool = shuffle_cards(self._corpus, self._rng)
        self._used = set()
        self._last_index = None
        self._cycles += 1
        logger.debug("Reshuffled pool of %d cards (cycle %d)", len(self._pool), self._cycles)

    def draw(self) -> WordCard:
        """Return the next card not yet drawn in this cycle."""
        if len(self._used) >= len(self._pool):
            logger.info("Word pool exhausted after %d draws, reshuffling", len(self._used))
            self.reshuffle()
            idx = 0
        else:
            idx = self._rng.randrange(len(self._pool))
            while idx in self._used:
                idx = self._rng.randrange(len(self._pool))
        self._used.add(idx)
        self._last_index = idx
        return self._pool[idx]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def corpus(self) -> list[WordCard]:
        return list(self._corpus)

    @property
    def pool(self) -> list[WordCard]:
        return list(self._pool)

    @property
    def used(self) -> frozenset[int]:
        return frozenset(self._used)

    @property
    def last_index(self) -> int | None:
        """Pool index of the most recent draw, or None since the last reshuffle."""
        return self._last_index

    @property
    def remaining(self) -> int:
        return len(self._pool) - len(self._used)

    @property
    def cycles(self) -> int:
        """Number of shuffles performed, including the initial one."""
        return self._cycles

    def card_at(self, index: int) -> WordCard:
        return self._pool[index]

    def __len__(self) -> int:
        return len(self._pool)
