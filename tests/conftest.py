"""Shared test fixtures for taboogame."""

import random

import pytest

from taboogame.config import GameSettings
from taboogame.session import SessionController
from taboogame.words.engine import WordCard


def make_corpus(n: int) -> list[WordCard]:
    return [
        WordCard(word=f"word{i}", taboo=tuple(f"taboo{i}-{k}" for k in range(5)))
        for i in range(n)
    ]


@pytest.fixture
def corpus():
    return make_corpus(12)


@pytest.fixture
def settings():
    return GameSettings(round_time_seconds=60, max_score=10, skip_limit=3)


@pytest.fixture
def controller(corpus, settings):
    """A controller with a manual clock, sitting in SETUP."""
    c = SessionController(
        corpus,
        settings=settings,
        team_names=("Team A", "Team B"),
        rng=random.Random(7),
        tick_interval=None,
    )
    c.begin_setup()
    return c


@pytest.fixture
def playing(controller):
    """A controller in PLAYING with Team A active."""
    controller.confirm_settings()
    controller.start_round()
    return controller
