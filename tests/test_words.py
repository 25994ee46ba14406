"""Tests for the word draw engine and corpus loading."""

import json
import random

import pytest

from taboogame.core.errors import ConfigurationError
from taboogame.words.corpus import default_corpus, load_corpus, parse_corpus
from taboogame.words.engine import WordCard, WordDrawEngine, shuffle_cards

from conftest import make_corpus


@pytest.fixture
def engine(corpus):
    return WordDrawEngine(corpus, rng=random.Random(3))


# ------------------------------------------------------------------
# Shuffle
# ------------------------------------------------------------------

class TestShuffle:
    def test_shuffle_is_permutation(self, corpus):
        shuffled = shuffle_cards(corpus, random.Random(1))
        assert sorted(c.word for c in shuffled) == sorted(c.word for c in corpus)

    def test_shuffle_does_not_mutate_input(self, corpus):
        before = list(corpus)
        shuffle_cards(corpus, random.Random(1))
        assert corpus == before

    def test_shuffle_deterministic_for_seed(self, corpus):
        a = shuffle_cards(corpus, random.Random(99))
        b = shuffle_cards(corpus, random.Random(99))
        assert a == b

    def test_shuffle_single_card(self):
        cards = make_corpus(1)
        assert shuffle_cards(cards, random.Random(0)) == cards

    def test_every_card_can_come_first(self):
        """Every card can come out on top of the pool."""
        cards = make_corpus(4)
        firsts = {shuffle_cards(cards, random.Random(s))[0].word for s in range(200)}
        assert firsts == {c.word for c in cards}


# ------------------------------------------------------------------
# Draw
# ------------------------------------------------------------------

class TestDraw:
    def test_initial_pool_is_full_corpus(self, engine, corpus):
        assert len(engine) == len(corpus)
        assert engine.remaining == len(corpus)
        assert engine.used == frozenset()
        assert engine.last_index is None

    def test_no_repeats_within_cycle(self, engine, corpus):
        drawn = [engine.draw() for _ in range(len(corpus))]
        assert len({c.word for c in drawn}) == len(corpus)
        assert engine.used == frozenset(range(len(corpus)))
        assert engine.remaining == 0

    def test_draw_marks_index_used(self, engine):
        card = engine.draw()
        idx = engine.last_index
        assert idx in engine.used
        assert engine.card_at(idx) == card

    def test_exhaustion_reshuffles_and_returns_index_zero(self, engine, corpus):
        for _ in range(len(corpus)):
            engine.draw()
        cycles = engine.cycles
        card = engine.draw()
        assert engine.cycles == cycles + 1
        assert engine.last_index == 0
        assert card == engine.pool[0]
        assert engine.used == frozenset({0})

    def test_new_cycle_also_has_no_repeats(self, engine, corpus):
        for _ in range(len(corpus)):
            engine.draw()
        second = [engine.draw() for _ in range(len(corpus))]
        assert len({c.word for c in second}) == len(corpus)

    def test_three_word_reshuffle_scenario(self):
        cards = make_corpus(3)
        engine = WordDrawEngine(cards, rng=random.Random(11))
        first = [engine.draw().word for _ in range(3)]
        assert sorted(first) == ["word0", "word1", "word2"]
        fourth = engine.draw()
        assert fourth == engine.pool[0]
        assert engine.last_index == 0
        assert engine.used == frozenset({0})

    def test_single_card_corpus_always_draws_it(self):
        cards = make_corpus(1)
        engine = WordDrawEngine(cards, rng=random.Random(0))
        for _ in range(5):
            assert engine.draw() == cards[0]

    def test_reshuffle_with_new_corpus(self, engine):
        engine.draw()
        engine.reshuffle(make_corpus(2))
        assert len(engine) == 2
        assert engine.used == frozenset()

    def test_reshuffle_clears_used(self, engine):
        engine.draw()
        engine.draw()
        engine.reshuffle()
        assert engine.used == frozenset()
        assert engine.remaining == len(engine)


class TestEngineErrors:
    def test_empty_corpus_rejected(self):
        with pytest.raises(ConfigurationError):
            WordDrawEngine([])

    def test_reshuffle_with_empty_corpus_rejected(self, engine):
        with pytest.raises(ConfigurationError):
            engine.reshuffle([])


# ------------------------------------------------------------------
# Corpus loading
# ------------------------------------------------------------------

class TestCorpus:
    def test_default_corpus_loads(self):
        cards = default_corpus()
        assert len(cards) >= 10
        assert all(isinstance(c, WordCard) for c in cards)
        assert all(len(c.taboo) == 5 for c in cards)

    def test_default_corpus_has_unique_words(self):
        words = [c.word for c in default_corpus()]
        assert len(words) == len(set(words))

    def test_parse_accepts_any_taboo_count(self):
        cards = parse_corpus([{"word": "Cat", "taboo": ["Meow", "Pet"]}])
        assert cards == [WordCard(word="Cat", taboo=("Meow", "Pet"))]

    def test_parse_strips_whitespace(self):
        cards = parse_corpus([{"word": "  Cat ", "taboo": [" Meow "]}])
        assert cards[0].word == "Cat"
        assert cards[0].taboo == ("Meow",)

    def test_parse_rejects_empty_list(self):
        with pytest.raises(ConfigurationError):
            parse_corpus([])

    def test_parse_rejects_missing_taboo(self):
        with pytest.raises(ConfigurationError, match="taboo"):
            parse_corpus([{"word": "Cat"}])

    def test_parse_rejects_blank_word(self):
        with pytest.raises(ConfigurationError):
            parse_corpus([{"word": "   ", "taboo": ["x"]}])

    def test_parse_rejects_non_list(self):
        with pytest.raises(ConfigurationError):
            parse_corpus({"word": "Cat", "taboo": ["Meow"]})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps([{"word": "Moon", "taboo": ["Night", "Sky"]}]))
        assert load_corpus(path) == [WordCard("Moon", ("Night", "Sky"))]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_corpus(tmp_path / "nope.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("[{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_corpus(path)
