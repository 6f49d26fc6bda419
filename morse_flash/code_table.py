"""International Morse code table for the supported character set.

Only the letters A-Z and the digits 0-9 are encodable. Lookups expect the
caller to uppercase first; :func:`morse_for` and :func:`is_encodable` do it
for convenience.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class Symbol(Enum):
    """Primitive Morse marks."""

    DOT = "."
    DASH = "-"

    @property
    def units(self) -> int:
        """Length of the mark in time units."""
        return 1 if self is Symbol.DOT else 3

    @classmethod
    def from_char(cls, char: str) -> "Symbol":
        return cls(char)


_PATTERNS = {
    "A": ".-", "B": "-...", "C": "-.-.", "D": "-..", "E": ".",
    "F": "..-.", "G": "--.", "H": "....", "I": "..", "J": ".---",
    "K": "-.-", "L": ".-..", "M": "--", "N": "-.", "O": "---",
    "P": ".--.", "Q": "--.-", "R": ".-.", "S": "...", "T": "-",
    "U": "..-", "V": "...-", "W": ".--", "X": "-..-", "Y": "-.--", "Z": "--..",
    "0": "-----", "1": ".----", "2": "..---", "3": "...--", "4": "....-",
    "5": ".....", "6": "-....", "7": "--...", "8": "---..", "9": "----.",
}

CODE_TABLE: Mapping[str, Tuple[Symbol, ...]] = MappingProxyType(
    {char: tuple(Symbol.from_char(c) for c in pattern) for char, pattern in _PATTERNS.items()}
)


def is_encodable(char: str) -> bool:
    return char.upper() in CODE_TABLE


def morse_for(char: str) -> Optional[str]:
    """Return the dot/dash pattern for ``char`` or ``None`` if unsupported."""
    symbols = CODE_TABLE.get(char.upper())
    if symbols is None:
        return None
    return "".join(s.value for s in symbols)
