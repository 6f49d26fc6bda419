"""Text to timed on/off steps.

The encoder follows standard Morse timing. A dot is 1 unit on and a dash is
3 units on. Marks within a character are separated by 1 unit off, characters
within a word by 3 units off, and words by 7 units off.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Tuple, Union

import numpy as np

from .code_table import CODE_TABLE

INTRA_CHAR_GAP = 1
INTER_CHAR_GAP = 3
INTER_WORD_GAP = 7


class Signal(Enum):
    OFF = 0
    ON = 1


@dataclass(frozen=True)
class Step:
    """One timed interval of output, ``units`` long."""

    signal: Signal
    units: int

    def __post_init__(self) -> None:
        if isinstance(self.units, bool) or not isinstance(self.units, (int, np.integer)):
            raise ValueError(f"Step units must be an integer, got {self.units!r}")
        if self.units < 1:
            raise ValueError(f"Step units must be >= 1, got {self.units}")

    @property
    def is_on(self) -> bool:
        return self.signal is Signal.ON

    @classmethod
    def on(cls, units: int) -> "Step":
        return cls(Signal.ON, units)

    @classmethod
    def off(cls, units: int) -> "Step":
        return cls(Signal.OFF, units)

    def __repr__(self) -> str:
        return f"{'On' if self.is_on else 'Off'}({self.units})"


def normalize_steps(steps: Iterable[Step]) -> Tuple[Step, ...]:
    """Merge adjacent steps that share a signal by summing their units."""
    out: List[Step] = []
    for step in steps:
        if out and out[-1].signal is step.signal:
            out[-1] = Step(step.signal, out[-1].units + step.units)
        else:
            out.append(step)
    return tuple(out)


class StepSequence:
    """Immutable, normalized sequence of :class:`Step`."""

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps = normalize_steps(steps)

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def total_units(self) -> int:
        return sum(s.units for s in self._steps)

    def duration(self, unit_duration: float) -> float:
        """Total playback time in seconds for the given unit duration."""
        return self.total_units * unit_duration

    def timeline(self, unit_duration: float) -> np.ndarray:
        """Cumulative end offset of every step, in seconds."""
        units = np.fromiter((s.units for s in self._steps), dtype=float, count=len(self._steps))
        return np.cumsum(units) * unit_duration

    def describe(self) -> str:
        return f"{len(self._steps)} steps, {self.total_units} units"

    # Sequence protocol ------------------------------------------------------
    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, index: Union[int, slice]):
        return self._steps[index]

    def __add__(self, other: object) -> "StepSequence":
        if isinstance(other, StepSequence):
            return StepSequence(self._steps + other._steps)
        if isinstance(other, Step):
            return StepSequence(self._steps + (other,))
        if isinstance(other, (list, tuple)):
            return StepSequence(self._steps + tuple(other))
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StepSequence):
            return self._steps == other._steps
        if isinstance(other, (list, tuple)):
            return self._steps == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        return f"StepSequence({list(self._steps)!r})"


def _sanitize(text: str) -> str:
    return "".join(ch for ch in text.upper() if ch in CODE_TABLE or ch == " ")


def encode(text: str) -> StepSequence:
    """Encode ``text`` into a normalized :class:`StepSequence`.

    Unsupported characters are dropped silently; input with nothing encodable
    yields an empty sequence.
    """
    words = _sanitize(text).split()
    steps: List[Step] = []
    for w_idx, word in enumerate(words):
        for c_idx, char in enumerate(word):
            symbols = CODE_TABLE[char]
            for s_idx, symbol in enumerate(symbols):
                steps.append(Step.on(symbol.units))
                if s_idx != len(symbols) - 1:
                    steps.append(Step.off(INTRA_CHAR_GAP))
            if c_idx != len(word) - 1:
                steps.append(Step.off(INTER_CHAR_GAP))
        if w_idx != len(words) - 1:
            steps.append(Step.off(INTER_WORD_GAP))
    return StepSequence(steps)


def to_morse(text: str) -> str:
    """Render ``text`` as dots and dashes, ``/`` between words."""
    words = _sanitize(text).split()
    return " / ".join(
        " ".join("".join(s.value for s in CODE_TABLE[ch]) for ch in word) for word in words
    )
