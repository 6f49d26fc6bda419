from dataclasses import dataclass
# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
DEFAULT_UNIT_DURATION = 0.2
DEFAULT_LED_ROOT = "/sys/class/leds"


@dataclass
class PlaybackConfig:
    """Central configuration for timing and output selection."""

    unit_duration: float = DEFAULT_UNIT_DURATION  # seconds per Morse time unit (200 ms)
    dry_run: bool = False                          # log transitions instead of driving hardware
    verbose: bool = True                           # log to stdout
    led_root: str = DEFAULT_LED_ROOT               # sysfs LED class directory

    def __post_init__(self) -> None:
        if not self.unit_duration > 0:
            raise ValueError(f"unit_duration must be positive, got {self.unit_duration}")

    @classmethod
    def from_wpm(cls, wpm: float, **kwargs) -> "PlaybackConfig":
        """Build a config from words-per-minute (PARIS standard: unit = 1.2 / wpm)."""
        if wpm <= 0:
            raise ValueError(f"wpm must be positive, got {wpm}")
        return cls(unit_duration=1.2 / wpm, **kwargs)

    @property
    def unit_ms(self) -> float:
        return self.unit_duration * 1000.0
