"""RoundTimer — cancellable one-second countdown for a single round.

The timer counts down whole seconds. Each tick calls ``on_tick(remaining)``;
the tick that reaches zero stops the timer and calls ``on_expire()``
synchronously. ``cancel()`` stops it without firing ``on_expire``.

With a numeric ``interval`` a daemon worker thread ticks in the background.
With ``interval=None`` nothing ticks on its own and the owner calls
``tick()`` directly (tests, or a UI loop that owns its own clock).

Every ``start()``/``cancel()`` bumps a generation counter. A worker thread
belonging to an older generation exits without ticking, so a cancelled or
restarted timer never delivers a stale callback.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

__all__ = ["RoundTimer"]


class RoundTimer:
    """Countdown clock driving automatic round termination."""

    def __init__(
        self,
        on_tick: Callable[[int], None] | None = None,
        on_expire: Callable[[], None] | None = None,
        *,
        interval: float | None = 1.0,
    ) -> None:
        if interval is not None and interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._interval = interval
        self._lock = threading.Lock()
        self._remaining = 0
        self._running = False
        self._generation = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def threaded(self) -> bool:
        return self._interval is not None

    def start(self, duration_seconds: int) -> None:
        """Begin counting down from *duration_seconds*, replacing any prior run."""
        if duration_seconds <= 0:
            raise ValueError(f"duration must be positive, got {duration_seconds}")
        with self._lock:
            self._halt_locked()
            self._remaining = int(duration_seconds)
            self._running = True
            generation = self._generation
            stop = self._stop
        if self._interval is not None:
            self._thread = threading.Thread(
                target=self._run,
                args=(generation, stop),
                daemon=True,
                name="round-timer",
            )
            self._thread.start()

    def tick(self) -> None:
        """Advance the countdown by one second."""
        self._tick(None)

    def cancel(self) -> None:
        """Stop ticking without firing the expiry callback."""
        with self._lock:
            if not self._running:
                return
            self._halt_locked()
        logger.debug("Round timer cancelled with %ds left", self._remaining)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the worker thread to exit (no-op for manual timers)."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _tick(self, generation: int | None) -> bool:
        """Decrement and dispatch callbacks. Returns False once this run is over."""
        with self._lock:
            if not self._running:
                return False
            if generation is not None and generation != self._generation:
                return False
            self._remaining -= 1
            remaining = self._remaining
            expired = remaining <= 0
            if expired:
                self._halt_locked()
        # Callbacks run outside the lock so they may call cancel()/start().
        if self._on_tick is not None:
            self._on_tick(remaining)
        if expired:
            logger.debug("Round timer expired")
            if self._on_expire is not None:
                self._on_expire()
        return not expired

    def _halt_locked(self) -> None:
        self._running = False
        self._generation += 1
        self._stop.set()
        self._stop = threading.Event()

    def _run(self, generation: int, stop: threading.Event) -> None:
        while not stop.wait(self._interval):
            if not self._tick(generation):
                return
