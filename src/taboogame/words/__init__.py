"""Word cards, corpus loading and the draw engine.

Usage:
    from taboogame.words import WordDrawEngine, default_corpus

    engine = WordDrawEngine(default_corpus())
    card = engine.draw()
"""

from .engine import WordCard, WordDrawEngine, shuffle_cards
from .corpus import load_corpus, parse_corpus, default_corpus

__all__ = [
    "WordCard",
    "WordDrawEngine",
    "shuffle_cards",
    "load_corpus",
    "parse_corpus",
    "default_corpus",
]
