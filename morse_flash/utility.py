# -----------------------------------------------------------------------------
# Logging helpers
# -----------------------------------------------------------------------------
import logging
import sys
import threading
import time
from typing import Protocol

_logger = logging.getLogger("MorseFlasher")
_logger.setLevel(logging.INFO)
if not _logger.handlers:
    _ch = logging.StreamHandler(sys.stdout)
    _ch.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
    _logger.addHandler(_ch)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# -----------------------------------------------------------------------------
# Utility: time source abstraction (testability)
# -----------------------------------------------------------------------------
class TimeSource(Protocol):  # structural type
    def now(self) -> float: ...

class PerfCounterTimeSource:
    def now(self) -> float:
        return time.perf_counter()


def wait_cancellable(cancel_event: threading.Event, seconds: float) -> bool:
    """Sleep up to ``seconds``; return True if ``cancel_event`` fired first."""
    return cancel_event.wait(max(0.0, seconds))
