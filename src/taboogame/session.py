"""Session controller — the phase state machine for a two-team Taboo game.

Phases run HOME -> SETUP -> PRE_ROUND -> PLAYING -> POST_ROUND -> PRE_ROUND
... until a round ends with the active team at or above the target score,
which moves the game to GAME_OVER. GAME_OVER returns to HOME.

Every public operation is phase-guarded. A call in the wrong phase leaves
state untouched and returns False (or raises InvalidTransition when the
controller is strict). Scoring, drawing and the phase change made by one
operation are applied together or not at all.

The round timer is the only background activity. The controller owns at
most one timer, creates a fresh one per round, and ignores callbacks that
arrive for a round that is no longer being played.
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Iterable

from taboogame.config import (
    DEFAULT_TEAM_NAMES,
    GameSettings,
    normalize_team_names,
)
from taboogame.core.errors import ConfigurationError, InvalidTransition, SkipLimitReached
from taboogame.core.game_log import GameLogger, RoundEntry
from taboogame.core.seed import SeedManager
from taboogame.core.timer import RoundTimer
from taboogame.words.corpus import default_corpus
from taboogame.words.engine import WordCard, WordDrawEngine

__all__ = [
    "Action",
    "Phase",
    "RoundResult",
    "Session",
    "SessionController",
    "Team",
    "ValidationResult",
]

logger = logging.getLogger(__name__)


class Phase(Enum):
    HOME = "HOME"
    SETUP = "SETUP"
    PRE_ROUND = "PRE_ROUND"
    PLAYING = "PLAYING"
    POST_ROUND = "POST_ROUND"
    GAME_OVER = "GAME_OVER"


class Action(Enum):
    BEGIN_SETUP = "begin_setup"
    CONFIRM_SETTINGS = "confirm_settings"
    START_ROUND = "start_round"
    CORRECT = "record_correct"
    TABOO = "record_taboo"
    SKIP = "record_skip"
    END_ROUND = "end_round"
    ADVANCE_TURN = "advance_turn"
    RETURN_HOME = "return_home"


# Phase each action requires
_REQUIRED_PHASE = {
    Action.BEGIN_SETUP: Phase.HOME,
    Action.CONFIRM_SETTINGS: Phase.SETUP,
    Action.START_ROUND: Phase.PRE_ROUND,
    Action.CORRECT: Phase.PLAYING,
    Action.TABOO: Phase.PLAYING,
    Action.SKIP: Phase.PLAYING,
    Action.END_ROUND: Phase.PLAYING,
    Action.ADVANCE_TURN: Phase.POST_ROUND,
    Action.RETURN_HOME: Phase.GAME_OVER,
}


@dataclass(frozen=True)
class ValidationResult:
    """Whether an action is permitted right now."""

    legal: bool
    reason: str | None = None


@dataclass
class Team:
    name: str
    score: int = 0

    def award(self, points: int = 1) -> None:
        self.score += points

    def penalize(self, points: int = 1) -> None:
        """Subtract points, never going below zero."""
        self.score = max(0, self.score - points)


@dataclass(frozen=True)
class RoundResult:
    """Summary of one finished round, shown on the post-round screen."""

    round_number: int
    team_index: int
    team_name: str
    correct: int
    taboo: int
    skips: int
    score_after: int
    words: tuple[str, ...]


@dataclass
class Session:
    """State of one game, from settings confirmation to the return home."""

    settings: GameSettings
    teams: list[Team]
    words: WordDrawEngine
    phase: Phase = Phase.PRE_ROUND
    active_team: int = 0
    current_word_index: int | None = None
    skips_used: int = 0
    time_left: int = 0
    round_number: int = 0
    history: list[RoundResult] = field(default_factory=list)

    # Tallies for the round in progress
    round_correct: int = 0
    round_taboo: int = 0
    round_words: list[str] = field(default_factory=list)

    @property
    def active(self) -> Team:
        return self.teams[self.active_team]

    @property
    def skips_remaining(self) -> int:
        return self.settings.skip_limit - self.skips_used

    @property
    def current_card(self) -> WordCard | None:
        if self.current_word_index is None:
            return None
        return self.words.card_at(self.current_word_index)


class SessionController:
    """Owns the Session, the phase machine and the round timer.

    Args:
        corpus: word cards to draw from; the bundled sample when omitted.
        settings: initial settings shown in SETUP.
        team_names: initial pair of team names.
        seed: derive each game's RNG from this seed (game N is reproducible).
        rng: use this RNG for every game instead; ignored when *seed* is set.
        tick_interval: seconds between timer ticks. ``None`` disables the
            background thread and the caller drives the clock with ``tick()``.
        log_dir: write a JSONL game log per game into this directory.
        strict: raise InvalidTransition instead of ignoring invalid calls.
    """

    def __init__(
        self,
        corpus: Iterable[WordCard] | None = None,
        *,
        settings: GameSettings | None = None,
        team_names: Iterable[str] | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        tick_interval: float | None = 1.0,
        log_dir: Path | None = None,
        strict: bool = False,
    ) -> None:
        self._corpus = list(corpus) if corpus is not None else default_corpus()
        if not self._corpus:
            raise ConfigurationError("word corpus is empty")
        self._settings = settings if settings is not None else GameSettings()
        self._settings.validate()
        self._team_names = normalize_team_names(
            team_names if team_names is not None else DEFAULT_TEAM_NAMES
        )
        self._seeds = SeedManager(seed) if seed is not None else None
        self._rng = rng
        self._tick_interval = tick_interval
        self._log_dir = Path(log_dir) if log_dir is not None else None
        self._strict = strict

        self._lock = threading.RLock()
        self._lobby_phase = Phase.HOME
        self._session: Session | None = None
        self._timer: RoundTimer | None = None
        self._game_log: GameLogger | None = None
        self._game_number = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        if self._session is not None:
            return self._session.phase
        return self._lobby_phase

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def settings(self) -> GameSettings:
        if self._session is not None:
            return self._session.settings
        return self._settings

    @property
    def team_names(self) -> tuple[str, str]:
        return self._team_names

    @property
    def teams(self) -> list[Team]:
        if self._session is None:
            return [Team(name) for name in self._team_names]
        return [Team(t.name, t.score) for t in self._session.teams]

    @property
    def active_team(self) -> int:
        return self._session.active_team if self._session is not None else 0

    @property
    def current_card(self) -> WordCard | None:
        return self._session.current_card if self._session is not None else None

    @property
    def time_left(self) -> int:
        return self._session.time_left if self._session is not None else 0

    @property
    def skips_used(self) -> int:
        return self._session.skips_used if self._session is not None else 0

    @property
    def skips_remaining(self) -> int:
        if self._session is None:
            return self._settings.skip_limit
        return self._session.skips_remaining

    @property
    def round_number(self) -> int:
        return self._session.round_number if self._session is not None else 0

    @property
    def history(self) -> list[RoundResult]:
        return list(self._session.history) if self._session is not None else []

    @property
    def game_number(self) -> int:
        return self._game_number

    @property
    def game_log(self) -> GameLogger | None:
        return self._game_log

    @property
    def timer(self) -> RoundTimer | None:
        return self._timer

    def winner(self) -> Team | None:
        """The team that reached the target score, once the game is over."""
        if self.phase is not Phase.GAME_OVER:
            return None
        # Only the team whose round just ended can have reached max_score.
        team = self._session.active
        return Team(team.name, team.score)

    def validate(self, action: Action) -> ValidationResult:
        """Check whether *action* is allowed now. Does not modify state."""
        required = _REQUIRED_PHASE[action]
        phase = self.phase
        if phase is not required:
            return ValidationResult(
                legal=False,
                reason=f"requires phase {required.value}, current phase is {phase.value}",
            )
        if action is Action.SKIP and self._session.skips_remaining <= 0:
            return ValidationResult(
                legal=False,
                reason=f"skip limit of {self._session.settings.skip_limit} reached",
            )
        return ValidationResult(legal=True)

    def can(self, action: Action) -> bool:
        return self.validate(action).legal

    def snapshot(self) -> dict:
        """Serializable view of everything the presentation layer renders."""
        with self._lock:
            card = self.current_card
            winner = self.winner()
            return {
                "phase": self.phase.value,
                "teams": [{"name": t.name, "score": t.score} for t in self.teams],
                "active_team": self.active_team,
                "current_card": card.to_dict() if card is not None else None,
                "time_left": self.time_left,
                "skips_remaining": self.skips_remaining,
                "round_number": self.round_number,
                "game_number": self._game_number,
                "settings": {
                    "round_time_seconds": self.settings.round_time_seconds,
                    "max_score": self.settings.max_score,
                    "skip_limit": self.settings.skip_limit,
                },
                "winner": winner.name if winner is not None else None,
            }

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def begin_setup(self) -> bool:
        """HOME -> SETUP."""
        with self._lock:
            check = self.validate(Action.BEGIN_SETUP)
            if not check.legal:
                return self._reject(Action.BEGIN_SETUP, check)
            self._lobby_phase = Phase.SETUP
            logger.info("Entered setup")
            return True

    def confirm_settings(
        self,
        settings: GameSettings | None = None,
        team_names: Iterable[str] | None = None,
    ) -> bool:
        """SETUP -> PRE_ROUND with a brand-new game.

        Raises ConfigurationError for malformed settings or team names; the
        phase stays SETUP in that case.
        """
        with self._lock:
            check = self.validate(Action.CONFIRM_SETTINGS)
            if not check.legal:
                return self._reject(Action.CONFIRM_SETTINGS, check)

            settings = settings if settings is not None else self._settings
            settings.validate()
            names = normalize_team_names(
                team_names if team_names is not None else self._team_names
            )

            # Build everything first so a failure leaves the controller in SETUP.
            game_number = self._game_number + 1
            session = Session(
                settings=settings,
                teams=[Team(name) for name in names],
                words=WordDrawEngine(self._corpus, self._game_rng(game_number)),
                phase=Phase.PRE_ROUND,
                time_left=settings.round_time_seconds,
            )
            game_log = self._open_game_log(game_number, settings)

            self._settings = settings
            self._team_names = names
            self._game_number = game_number
            self._session = session
            self._game_log = game_log
            logger.info(
                "Game %d started: %s vs %s (to %d points, %ds rounds, %d skips)",
                self._game_number, names[0], names[1],
                settings.max_score, settings.round_time_seconds, settings.skip_limit,
            )
            return True

    def start_round(self) -> bool:
        """PRE_ROUND -> PLAYING: reset the clock and skips, draw, start the timer."""
        with self._lock:
            check = self.validate(Action.START_ROUND)
            if not check.legal:
                return self._reject(Action.START_ROUND, check)

            s = self._session
            s.round_number += 1
            s.time_left = s.settings.round_time_seconds
            s.skips_used = 0
            s.round_correct = 0
            s.round_taboo = 0
            s.round_words = []
            self._draw_next()
            s.phase = Phase.PLAYING
            self._start_timer(s.round_number, s.settings.round_time_seconds)
            logger.info("Round %d started for %s", s.round_number, s.active.name)
            return True

    def end_round(self) -> bool:
        """PLAYING -> GAME_OVER if the active team reached max_score, else POST_ROUND."""
        with self._lock:
            check = self.validate(Action.END_ROUND)
            if not check.legal:
                return self._reject(Action.END_ROUND, check)
            self._finish_round()
            return True

    def advance_turn(self) -> bool:
        """POST_ROUND -> PRE_ROUND with the other team active."""
        with self._lock:
            check = self.validate(Action.ADVANCE_TURN)
            if not check.legal:
                return self._reject(Action.ADVANCE_TURN, check)
            s = self._session
            s.active_team = 1 - s.active_team
            s.phase = Phase.PRE_ROUND
            logger.info("Turn passes to %s", s.active.name)
            return True

    def return_home(self) -> bool:
        """GAME_OVER -> HOME, discarding the session."""
        with self._lock:
            check = self.validate(Action.RETURN_HOME)
            if not check.legal:
                return self._reject(Action.RETURN_HOME, check)
            self._cancel_timer()
            self._session = None
            self._game_log = None
            self._lobby_phase = Phase.HOME
            logger.info("Returned home")
            return True

    # ------------------------------------------------------------------
    # Scoring actions
    # ------------------------------------------------------------------

    def record_correct(self) -> bool:
        """Active team scores a point; next word."""
        with self._lock:
            check = self.validate(Action.CORRECT)
            if not check.legal:
                return self._reject(Action.CORRECT, check)
            s = self._session
            s.active.award()
            s.round_correct += 1
            self._draw_next()
            return True

    def record_taboo(self) -> bool:
        """Active team loses a point (not below zero); next word."""
        with self._lock:
            check = self.validate(Action.TABOO)
            if not check.legal:
                return self._reject(Action.TABOO, check)
            s = self._session
            s.active.penalize()
            s.round_taboo += 1
            self._draw_next()
            return True

    def record_skip(self) -> bool:
        """Discard the current word without scoring, while skips remain."""
        with self._lock:
            check = self.validate(Action.SKIP)
            if not check.legal:
                return self._reject(Action.SKIP, check)
            s = self._session
            s.skips_used += 1
            self._draw_next()
            return True

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the round clock by one second (manual-clock mode)."""
        with self._lock:
            if self._timer is not None:
                self._timer.tick()

    def cancel_timer(self) -> None:
        with self._lock:
            self._cancel_timer()

    def _start_timer(self, round_number: int, duration: int) -> None:
        self._cancel_timer()
        self._timer = RoundTimer(
            on_tick=partial(self._on_timer_tick, self._game_number, round_number),
            on_expire=partial(self._on_timer_expire, self._game_number, round_number),
            interval=self._tick_interval,
        )
        self._timer.start(duration)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _is_current_round(self, game_number: int, round_number: int) -> bool:
        # Round numbers restart with every game, so both must match.
        s = self._session
        return (
            s is not None
            and s.phase is Phase.PLAYING
            and self._game_number == game_number
            and s.round_number == round_number
        )

    def _on_timer_tick(self, game_number: int, round_number: int, remaining: int) -> None:
        with self._lock:
            if not self._is_current_round(game_number, round_number):
                logger.debug("Ignoring stale tick for game %d round %d", game_number, round_number)
                return
            self._session.time_left = max(0, min(remaining, self._session.settings.round_time_seconds))

    def _on_timer_expire(self, game_number: int, round_number: int) -> None:
        with self._lock:
            if not self._is_current_round(game_number, round_number):
                logger.debug("Ignoring stale expiry for game %d round %d", game_number, round_number)
                return
            logger.info("Time is up for round %d", round_number)
            self._finish_round()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reject(self, action: Action, check: ValidationResult) -> bool:
        logger.debug("Ignored %s: %s", action.value, check.reason)
        if self._strict:
            if action is Action.SKIP and self.phase is Phase.PLAYING:
                raise SkipLimitReached(action.value, self.phase.value, check.reason)
            raise InvalidTransition(action.value, self.phase.value, check.reason)
        return False

    def _game_rng(self, game_number: int) -> random.Random:
        if self._seeds is not None:
            return self._seeds.get_rng(self._seeds.get_game_seed(game_number))
        if self._rng is not None:
            return self._rng
        return random.Random()

    def _draw_next(self) -> None:
        s = self._session
        card = s.words.draw()
        s.current_word_index = s.words.last_index
        s.round_words.append(card.word)
        logger.debug("Drew %r (%d left in pool)", card.word, s.words.remaining)

    def _finish_round(self) -> None:
        self._cancel_timer()
        s = self._session
        team = s.active
        result = RoundResult(
            round_number=s.round_number,
            team_index=s.active_team,
            team_name=team.name,
            correct=s.round_correct,
            taboo=s.round_taboo,
            skips=s.skips_used,
            score_after=team.score,
            words=tuple(s.round_words),
        )
        s.history.append(result)
        s.current_word_index = None
        # Only the team that just played is checked against the target.
        if team.score >= s.settings.max_score:
            s.phase = Phase.GAME_OVER
            logger.info("%s wins with %d points", team.name, team.score)
        else:
            s.phase = Phase.POST_ROUND
            logger.info("Round %d over: %s has %d points", s.round_number, team.name, team.score)
        # The round has ended even if the log write fails.
        try:
            self._log_round(result)
        except OSError:
            logger.exception("Could not write game log for round %d", s.round_number)

    def _open_game_log(self, game_number: int, settings: GameSettings) -> GameLogger | None:
        if self._log_dir is None:
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        game_id = f"taboo-{stamp}-game{game_number}"
        return GameLogger(
            self._log_dir,
            game_id,
            context={
                "seed": self._seeds.session_seed if self._seeds is not None else None,
                "settings": {
                    "round_time_seconds": settings.round_time_seconds,
                    "max_score": settings.max_score,
                    "skip_limit": settings.skip_limit,
                },
            },
        )

    def _log_round(self, result: RoundResult) -> None:
        if self._game_log is None:
            return
        s = self._session
        self._game_log.log_round(
            RoundEntry(
                round_number=result.round_number,
                team_index=result.team_index,
                team_name=result.team_name,
                correct=result.correct,
                taboo=result.taboo,
                skips=result.skips,
                score_after=result.score_after,
                words=list(result.words),
                round_time_seconds=s.settings.round_time_seconds,
                next_phase=s.phase.value,
            )
        )
        if s.phase is Phase.GAME_OVER:
            self._game_log.finalize_game(
                teams=[{"name": t.name, "score": t.score} for t in s.teams],
                winner=s.active.name,
                extra={"rounds_played": s.round_number},
            )
