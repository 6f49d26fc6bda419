import sys
import threading
import time
from datetime import timedelta
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[2]))

import pytest

from morse_flash.actuator import ActuatorWriteError
from morse_flash.config import PlaybackConfig
from morse_flash.encoder import Step, StepSequence, encode
from morse_flash.player import MorsePlayer
from morse_flash.status import Completed, Failed, Started, Stopped


class RecordingActuator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.writes: list[tuple[int, bool]] = []
        self._lock = threading.Lock()

    def set(self, on: bool) -> None:
        with self._lock:
            self.writes.append((threading.get_ident(), bool(on)))
        if self.fail:
            raise ActuatorWriteError("torch busy")

    @property
    def states(self) -> list[bool]:
        return [on for _, on in self.writes]


class ListSink:
    def __init__(self) -> None:
        self.events: list = []
        self.started = threading.Event()

    def notify(self, event) -> None:
        self.events.append(event)
        if isinstance(event, Started):
            self.started.set()


class FakeClock:
    """Virtual clock advanced by the fake waiter; no real sleeping."""

    def __init__(self) -> None:
        self.t = 100.0
        self.waits: list[float] = []

    def now(self) -> float:
        return self.t

    def wait(self, event: threading.Event, seconds: float) -> bool:
        self.waits.append(seconds)
        self.t += max(0.0, seconds)
        return event.is_set()


def make_player(actuator=None, sink=None, clock=None, unit=0.2):
    clock = clock or FakeClock()
    return MorsePlayer(
        actuator,
        sink,
        PlaybackConfig(unit_duration=unit),
        time_source=clock,
        waiter=clock.wait,
    )


def test_no_actuator_reports_failure() -> None:
    sink = ListSink()
    player = make_player(None, sink)
    assert player.play("SOS") is False
    assert sink.events == [Failed("no actuator")]
    assert sink.events[0].message == "No flashlight available"
    assert not player.is_playing


def test_plays_sos_and_ends_off() -> None:
    actuator, sink, clock = RecordingActuator(), ListSink(), FakeClock()
    player = make_player(actuator, sink, clock)

    assert player.play("SOS") is True
    assert player.wait(timeout=5.0)

    # 9 marks: alternate on/off starting on, plus the trailing off write
    assert actuator.states == [True, False] * 9
    assert sink.events == [Started("SOS"), Completed()]
    assert not player.is_playing


def test_waits_match_step_units() -> None:
    actuator, clock = RecordingActuator(), FakeClock()
    player = make_player(actuator, ListSink(), clock, unit=0.05)
    seq = encode("SOS SOS")

    player.play_sequence(seq)
    player.wait(timeout=5.0)

    assert clock.waits == pytest.approx([s.units * 0.05 for s in seq])
    assert sum(clock.waits) == pytest.approx(seq.duration(0.05))


def test_per_call_unit_duration_overrides_config() -> None:
    clock = FakeClock()
    player = make_player(RecordingActuator(), ListSink(), clock, unit=0.2)
    player.play("T", unit_duration=timedelta(milliseconds=50))
    player.wait(timeout=5.0)
    assert clock.waits == pytest.approx([0.15])


def test_only_transitions_are_written() -> None:
    actuator = RecordingActuator()
    player = make_player(actuator, ListSink())
    # trailing off step: no extra write after the loop
    player.play_sequence(StepSequence([Step.on(2), Step.off(4)]), description="custom")
    player.wait(timeout=5.0)
    assert actuator.states == [True, False]


def test_empty_sequence_completes_without_writes() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    player = make_player(actuator, sink)
    player.play("???")
    player.wait(timeout=5.0)
    assert actuator.writes == []
    assert sink.events == [Started("???"), Completed()]


def test_write_failures_do_not_abort_playback() -> None:
    actuator, sink, clock = RecordingActuator(fail=True), ListSink(), FakeClock()
    player = make_player(actuator, sink, clock)
    player.play("SOS")
    player.wait(timeout=5.0)

    assert sink.events[-1] == Completed()
    assert len(clock.waits) == len(encode("SOS"))
    assert actuator.states[-1] is False


def test_scheduling_failure_reports_failed_and_turns_off() -> None:
    actuator, sink = RecordingActuator(), ListSink()

    def broken_wait(_event, _seconds):
        raise RuntimeError("boom")

    player = MorsePlayer(actuator, sink, waiter=broken_wait)
    player.play("E")
    player.wait(timeout=5.0)

    assert sink.events == [Started("E"), Failed("wait failed: boom")]
    assert sink.events[-1].message == "Error: wait failed: boom"
    assert actuator.states == [True, False]


def test_invalid_unit_duration_fails() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    player = make_player(actuator, sink)
    assert player.play("E", unit_duration=0) is False
    assert isinstance(sink.events[0], Failed)
    assert actuator.writes == []


def test_sink_errors_are_swallowed() -> None:
    actuator = RecordingActuator()

    class ExplodingSink:
        def notify(self, event) -> None:
            raise ValueError("ui gone")

    player = make_player(actuator, ExplodingSink())
    player.play("E")
    player.wait(timeout=5.0)
    assert actuator.states == [True, False]


def test_stop_without_session_is_noop() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    player = MorsePlayer(actuator, sink)
    player.stop()
    assert player.wait(timeout=5.0)
    # defensive cleanup still drives the output off
    assert actuator.states == [False]

    player.stop()
    assert player.wait(timeout=5.0)
    assert actuator.states == [False, False]
    assert sink.events == []


def test_stop_without_actuator_does_not_raise() -> None:
    player = MorsePlayer(None, ListSink())
    player.stop()
    assert player.wait(timeout=1.0)


def test_stop_cancels_running_session() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    player = MorsePlayer(actuator, sink, PlaybackConfig(unit_duration=0.05))

    player.play("MMMMMMMM")
    assert sink.started.wait(timeout=5.0)
    time.sleep(0.05)
    player.stop()
    assert player.wait(timeout=5.0)

    assert sink.events == [Started("MMMMMMMM"), Stopped()]
    assert actuator.states[-1] is False
    assert not player.is_playing


def test_new_play_supersedes_without_interleaving() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    player = MorsePlayer(actuator, sink, PlaybackConfig(unit_duration=0.03))

    player.play("OOOOOO")
    assert sink.started.wait(timeout=5.0)
    time.sleep(0.1)
    player.play("E")
    assert player.wait(timeout=5.0)

    assert sink.events == [Started("OOOOOO"), Stopped(), Started("E"), Completed()]

    # writes from each session form one contiguous block, old session first
    blocks = []
    for ident, _ in actuator.writes:
        if not blocks or blocks[-1] != ident:
            blocks.append(ident)
    assert len(blocks) == 2
    old_writes = [on for ident, on in actuator.writes if ident == blocks[0]]
    new_writes = [on for ident, on in actuator.writes if ident == blocks[1]]
    assert old_writes[-1] is False
    assert new_writes == [True, False]


def test_playback_time_matches_total_units() -> None:
    actuator, sink = RecordingActuator(), ListSink()
    unit = 0.02
    player = MorsePlayer(actuator, sink, PlaybackConfig(unit_duration=unit))
    seq = encode("E E")  # 1 + 7 + 1 units

    started = time.perf_counter()
    player.play_sequence(seq, description="E E")
    assert player.wait(timeout=5.0)
    elapsed = time.perf_counter() - started

    assert elapsed >= seq.duration(unit) - 0.01
    assert elapsed < seq.duration(unit) + 0.5
    assert sink.events[-1] == Completed()


class SlowSink(ListSink):
    """Delays delivery of terminal events, as a busy UI thread would."""

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay

    def notify(self, event) -> None:
        if isinstance(event, (Completed, Stopped)):
            time.sleep(self.delay)
        super().notify(event)


class SlowActuator(RecordingActuator):
    def set(self, on: bool) -> None:
        time.sleep(0.05)
        super().set(on)


def test_terminal_status_precedes_next_started() -> None:
    actuator, sink = RecordingActuator(), SlowSink(delay=0.05)
    player = MorsePlayer(actuator, sink, PlaybackConfig(unit_duration=0.01))

    player.play("E")
    deadline = time.perf_counter() + 5.0
    while player.is_playing and time.perf_counter() < deadline:
        time.sleep(0.001)
    # the first session is idle but may still be delivering Completed
    player.play("T")
    assert player.wait(timeout=5.0)

    assert sink.events == [Started("E"), Completed(), Started("T"), Completed()]


def test_wait_joins_every_pending_cleanup() -> None:
    actuator = SlowActuator()
    player = MorsePlayer(actuator, ListSink())

    player.stop()
    player.stop()
    player.stop()
    assert player.wait(timeout=5.0)

    assert actuator.states == [False, False, False]
