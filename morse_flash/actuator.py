"""Binary output devices driven by the player.

The player only needs :class:`Actuator`: a single ``set(on)`` call that may
fail. Two concrete implementations are provided, a logging dry-run actuator
and a Linux LED class device written through sysfs.
"""
from __future__ import annotations

import os
import threading
from typing import Optional, Protocol

from .utility import _logger


class ActuatorWriteError(Exception):
    """A write to the output device did not take effect."""


class NoActuatorAvailable(Exception):
    """No usable output device was found."""


class Actuator(Protocol):
    """Protocol for a single on/off output."""

    def set(self, on: bool) -> None:
        """Switch the output on or off; may raise on failure."""


class ConsoleActuator:
    """Dry-run actuator that logs transitions instead of touching hardware."""

    def __init__(self, name: str = "console") -> None:
        self.name = name
        self.state = False
        self.writes = 0
        self._lock = threading.Lock()

    def set(self, on: bool) -> None:
        with self._lock:
            self.state = bool(on)
            self.writes += 1
        _logger.debug("[%s] %s", self.name, "ON " if on else "off")


class SysfsLedActuator:
    """Drive a Linux LED class device (``/sys/class/leds/<name>``)."""

    def __init__(self, path: str, on_brightness: Optional[int] = None) -> None:
        self.path = path
        self._brightness_file = os.path.join(path, "brightness")
        self._on_value = on_brightness if on_brightness is not None else self._read_max_brightness()

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.path))

    def _read_max_brightness(self) -> int:
        try:
            with open(os.path.join(self.path, "max_brightness"), "r", encoding="ascii") as f:
                return max(1, int(f.read().strip()))
        except (OSError, ValueError):
            return 1

    def set(self, on: bool) -> None:
        value = self._on_value if on else 0
        try:
            with open(self._brightness_file, "w", encoding="ascii") as f:
                f.write(f"{value}\n")
        except OSError as e:
            raise ActuatorWriteError(f"{self._brightness_file}: {e}") from e
