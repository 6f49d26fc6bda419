"""Flash text as Morse code on a single on/off output."""
from .actuator import Actuator, ActuatorWriteError, ConsoleActuator, NoActuatorAvailable, SysfsLedActuator
from .code_table import CODE_TABLE, Symbol
from .config import PlaybackConfig
from .encoder import Signal, Step, StepSequence, encode, normalize_steps, to_morse
from .player import MorsePlayer
from .status import Completed, Failed, Started, StatusEvent, StatusSink, Stopped

__all__ = [
    "Actuator",
    "ActuatorWriteError",
    "CODE_TABLE",
    "Completed",
    "ConsoleActuator",
    "Failed",
    "MorsePlayer",
    "NoActuatorAvailable",
    "PlaybackConfig",
    "Signal",
    "Started",
    "StatusEvent",
    "StatusSink",
    "Step",
    "StepSequence",
    "Stopped",
    "Symbol",
    "SysfsLedActuator",
    "encode",
    "normalize_steps",
    "to_morse",
]
