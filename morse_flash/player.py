"""Cancellable playback of a :class:`StepSequence` on a single actuator.

Each play request runs in its own worker thread. A new request cancels the
previous session, and the new worker joins the old one before its first
write, so writes from two sessions never interleave. Whatever way a session
ends, the actuator is written off before the terminal status is reported.
"""
from __future__ import annotations

import threading
from datetime import timedelta
from typing import Callable, List, Optional, Union

from .actuator import Actuator
from .config import PlaybackConfig
from .encoder import StepSequence, encode
from .status import (
    NO_ACTUATOR_REASON,
    Completed,
    Failed,
    LoggingStatusSink,
    Started,
    StatusEvent,
    StatusSink,
    Stopped,
)
from .utility import PerfCounterTimeSource, TimeSource, _logger, wait_cancellable

Waiter = Callable[[threading.Event, float], bool]


class SchedulingFailure(Exception):
    """Unexpected fault while waiting between steps."""


class _PlaybackSession:
    def __init__(
        self,
        sequence: StepSequence,
        unit_duration: float,
        description: str,
        previous: Optional["_PlaybackSession"],
    ) -> None:
        self.sequence = sequence
        self.unit_duration = unit_duration
        self.description = description
        self.previous = previous
        self.cancel_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()


class MorsePlayer:
    """Play Morse step sequences on an :class:`Actuator`."""

    def __init__(
        self,
        actuator: Optional[Actuator],
        status_sink: Optional[StatusSink] = None,
        config: Optional[PlaybackConfig] = None,
        time_source: Optional[TimeSource] = None,
        waiter: Optional[Waiter] = None,
    ) -> None:
        self._actuator = actuator
        self._sink = status_sink or LoggingStatusSink()
        self._cfg = config or PlaybackConfig()
        self._ts = time_source or PerfCounterTimeSource()
        self._wait = waiter or wait_cancellable

        self._state_lock = threading.Lock()
        self._io_lock = threading.RLock()
        self._session: Optional[_PlaybackSession] = None
        self._latest: Optional[_PlaybackSession] = None
        self._cleanup_threads: List[threading.Thread] = []

    # Public API ---------------------------------------------------------------
    @property
    def is_playing(self) -> bool:
        with self._state_lock:
            return self._session is not None

    def play(self, text: str, unit_duration: Optional[Union[float, timedelta]] = None) -> bool:
        """Encode ``text`` and play it; returns False if playback could not start."""
        return self.play_sequence(encode(text), unit_duration, description=text)

    def play_sequence(
        self,
        sequence: StepSequence,
        unit_duration: Optional[Union[float, timedelta]] = None,
        description: Optional[str] = None,
    ) -> bool:
        unit = self._cfg.unit_duration if unit_duration is None else unit_duration
        if isinstance(unit, timedelta):
            unit = unit.total_seconds()
        with self._state_lock:
            active = self._session
            if active is not None:
                _logger.info("Superseding active playback: %s", active.description)
                active.cancel()
            # chain on the last started session so its terminal status is
            # delivered before this one starts
            previous = self._latest

            if self._actuator is None:
                failure: Optional[str] = NO_ACTUATOR_REASON
            elif not unit > 0:
                failure = f"invalid unit duration {unit!r}"
            else:
                failure = None

            if failure is None:
                session = _PlaybackSession(
                    sequence,
                    float(unit),
                    description if description is not None else sequence.describe(),
                    previous,
                )
                session.thread = threading.Thread(
                    target=self._run_session, args=(session,), name="MorsePlaybackThread", daemon=True
                )
                self._session = session
                self._latest = session
                session.thread.start()

        if failure is not None:
            _logger.error("Cannot start playback: %s", failure)
            self._notify(Failed(failure))
            return False
        return True

    def stop(self) -> None:
        """Cancel the active session, if any, and make sure the output ends off."""
        with self._state_lock:
            session = self._session
            if session is not None:
                session.cancel()
            if self._actuator is None:
                return
            cleanup = threading.Thread(
                target=self._cleanup_after, args=(session,), name="MorseCleanupThread", daemon=True
            )
            self._cleanup_threads = [t for t in self._cleanup_threads if t.is_alive()]
            self._cleanup_threads.append(cleanup)
            cleanup.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until playback and pending cleanup finish; False on timeout."""
        with self._state_lock:
            session = self._latest
            cleanups = list(self._cleanup_threads)
        if session is not None:
            session.join(timeout)
            if session.is_alive():
                return False
        for cleanup in cleanups:
            if cleanup is threading.current_thread():
                continue
            cleanup.join(timeout)
            if cleanup.is_alive():
                return False
        return True

    # Internal helpers ---------------------------------------------------------
    def _run_session(self, session: _PlaybackSession) -> None:
        if session.previous is not None:
            session.previous.join()
            session.previous = None

        outcome: Optional[StatusEvent] = None
        finished = False
        try:
            if session.cancelled:
                outcome = Stopped()
                return
            _logger.info("Starting playback: %s (%s)", session.description, session.sequence.describe())
            self._notify(Started(session.description))
            finished = self._perform(session)
            if finished:
                _logger.info("Playback completed: %s", session.description)
                outcome = Completed()
            else:
                _logger.info("Playback stopped: %s", session.description)
                outcome = Stopped()
        except Exception as e:
            _logger.exception("Playback failed: %s", e)
            outcome = Failed(str(e) or type(e).__name__)
        finally:
            if not finished:
                self._write(False)
            with self._state_lock:
                if self._session is session:
                    self._session = None
            if outcome is not None:
                self._notify(outcome)

    def _perform(self, session: _PlaybackSession) -> bool:
        """Walk the steps; returns True on completion, False when cancelled."""
        sequence = session.sequence
        ends = sequence.timeline(session.unit_duration)
        start = self._ts.now()
        current_on = False
        for step, end in zip(sequence, ends):
            if session.cancelled:
                return False
            if step.is_on != current_on:
                current_on = step.is_on
                self._write(current_on)
            remaining = start + float(end) - self._ts.now()
            try:
                cancelled = self._wait(session.cancel_event, remaining)
            except Exception as e:
                raise SchedulingFailure(f"wait failed: {e}") from e
            if cancelled:
                return False
        if current_on:
            self._write(False)
        return True

    def _cleanup_after(self, session: Optional[_PlaybackSession]) -> None:
        if session is not None:
            session.join()
        with self._io_lock:
            with self._state_lock:
                idle = self._session is None
            if idle:
                self._write(False)

    def _write(self, on: bool) -> None:
        """Best-effort actuator write; failures are logged, never raised."""
        if self._actuator is None:
            return
        with self._io_lock:
            try:
                self._actuator.set(on)
            except Exception as e:
                _logger.warning("Actuator write (%s) failed: %s", "on" if on else "off", e)

    def _notify(self, event: StatusEvent) -> None:
        try:
            self._sink.notify(event)
        except Exception as e:
            _logger.warning("Status sink raised on %s: %s", event, e)
