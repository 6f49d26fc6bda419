"""Actuator discovery and selection.

Selection policy: consider only devices with a flash, prefer one facing away
from the user (``BACK``), otherwise take the first candidate.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .actuator import NoActuatorAvailable, SysfsLedActuator
from .config import DEFAULT_LED_ROOT
from .utility import _logger


class Facing(Enum):
    BACK = "back"
    FRONT = "front"
    EXTERNAL = "external"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ActuatorInfo:
    device_id: str
    has_flash: bool
    facing: Facing = Facing.UNKNOWN


def select_actuator_id(infos: Iterable[ActuatorInfo]) -> Optional[str]:
    fallback: Optional[str] = None
    for info in infos:
        if not info.has_flash:
            continue
        if info.facing is Facing.BACK:
            return info.device_id
        if fallback is None:
            fallback = info.device_id
    return fallback


def _classify_led(name: str) -> ActuatorInfo:
    lowered = name.lower()
    has_flash = "flash" in lowered or "torch" in lowered
    if "back" in lowered or "rear" in lowered:
        facing = Facing.BACK
    elif "front" in lowered:
        facing = Facing.FRONT
    else:
        facing = Facing.UNKNOWN
    return ActuatorInfo(device_id=name, has_flash=has_flash, facing=facing)


def discover_sysfs_leds(root: str = DEFAULT_LED_ROOT) -> List[ActuatorInfo]:
    """List LED class devices under ``root``; missing root yields an empty list."""
    try:
        names = sorted(os.listdir(root))
    except OSError as e:
        _logger.debug("LED root %s not readable: %s", root, e)
        return []
    return [_classify_led(n) for n in names if os.path.isdir(os.path.join(root, n))]


def open_actuator(name: str, root: str = DEFAULT_LED_ROOT) -> SysfsLedActuator:
    path = os.path.join(root, name)
    if not os.path.isdir(path):
        raise NoActuatorAvailable(f"LED {name!r} not found under {root}")
    return SysfsLedActuator(path)


def open_default_actuator(root: str = DEFAULT_LED_ROOT) -> Optional[SysfsLedActuator]:
    """Open the preferred flash LED, or return ``None`` if there is none."""
    device_id = select_actuator_id(discover_sysfs_leds(root))
    if device_id is None:
        return None
    _logger.info("Using LED %s", device_id)
    return SysfsLedActuator(os.path.join(root, device_id))
