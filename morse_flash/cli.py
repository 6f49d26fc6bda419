"""Command line interface for flashing text as Morse code."""
from __future__ import annotations

import argparse
import queue
import signal
import sys
import threading
from typing import List, Optional, Tuple

from .actuator import Actuator, ConsoleActuator, NoActuatorAvailable
from .config import DEFAULT_LED_ROOT, PlaybackConfig
from .devices import discover_sysfs_leds, open_actuator, open_default_actuator
from .encoder import encode, to_morse
from .player import MorsePlayer
from .status import TERMINAL_EVENTS, Completed, Stopped, QueueStatusSink, StatusEvent
from .utility import LOG_LEVELS, _logger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_STOPPED = 130


def _parse_args(argv: List[str]) -> Tuple[argparse.Namespace, PlaybackConfig]:
    parser = argparse.ArgumentParser(description="Flash text as Morse code on an LED")
    parser.add_argument("text", nargs="?", default="SOS", help="Text to send (default: SOS)")
    speed = parser.add_mutually_exclusive_group()
    speed.add_argument("--unit-ms", type=float, default=None, help="Time unit in milliseconds (default 200)")
    speed.add_argument("--wpm", type=float, default=None, help="Speed in words per minute (PARIS)")
    parser.add_argument("--led", default=None, help="LED class device name under --led-root")
    parser.add_argument("--led-root", default=DEFAULT_LED_ROOT, help="sysfs LED class directory")
    parser.add_argument("--dry-run", action="store_true", help="Log transitions instead of driving an LED")
    parser.add_argument("--encode-only", action="store_true", help="Print the Morse rendering and steps, then exit")
    parser.add_argument("--list-leds", action="store_true", help="List discovered LEDs and exit")
    parser.add_argument("--quiet", action="store_true", help="Do not print status messages")
    parser.add_argument("--log", default="info", choices=list(LOG_LEVELS), help="Log level")
    args = parser.parse_args(argv)

    _logger.setLevel(LOG_LEVELS[args.log])

    try:
        if args.wpm is not None:
            cfg = PlaybackConfig.from_wpm(args.wpm, dry_run=args.dry_run, verbose=not args.quiet, led_root=args.led_root)
        elif args.unit_ms is not None:
            cfg = PlaybackConfig(unit_duration=args.unit_ms / 1000.0, dry_run=args.dry_run, verbose=not args.quiet, led_root=args.led_root)
        else:
            cfg = PlaybackConfig(dry_run=args.dry_run, verbose=not args.quiet, led_root=args.led_root)
    except ValueError as e:
        parser.error(str(e))
    return args, cfg


def _select_actuator(args: argparse.Namespace, cfg: PlaybackConfig) -> Optional[Actuator]:
    if cfg.dry_run:
        return ConsoleActuator()
    if args.led:
        return open_actuator(args.led, cfg.led_root)
    actuator = open_default_actuator(cfg.led_root)
    if actuator is None:
        _logger.warning("No flash LED found under %s; falling back to dry-run output.", cfg.led_root)
        return ConsoleActuator()
    return actuator


def _exit_code(event: Optional[StatusEvent]) -> int:
    if isinstance(event, Completed):
        return EXIT_OK
    if isinstance(event, Stopped):
        return EXIT_STOPPED
    return EXIT_FAILED


def run(args: argparse.Namespace, cfg: PlaybackConfig) -> int:
    if args.list_leds:
        for info in discover_sysfs_leds(cfg.led_root):
            flag = "flash" if info.has_flash else "-"
            print(f"{info.device_id}\t{flag}\t{info.facing.value}")
        return EXIT_OK

    if args.encode_only:
        print(to_morse(args.text))
        print(" ".join(repr(s) for s in encode(args.text)))
        return EXIT_OK

    try:
        actuator = _select_actuator(args, cfg)
    except NoActuatorAvailable as e:
        _logger.error("%s", e)
        return EXIT_FAILED

    sink = QueueStatusSink()
    player = MorsePlayer(actuator, sink, cfg)

    stop_requested = threading.Event()

    def _sig_handler(signum, _frame):
        _logger.info("Signal %s received; stopping playback.", signum)
        stop_requested.set()

    prev_int = signal.signal(signal.SIGINT, _sig_handler)
    prev_term = signal.signal(signal.SIGTERM, _sig_handler)
    try:
        player.play(args.text)
        terminal: Optional[StatusEvent] = None
        while terminal is None:
            if stop_requested.is_set():
                stop_requested.clear()
                player.stop()
            try:
                event = sink.queue.get(timeout=0.2)
            except queue.Empty:
                continue
            if cfg.verbose:
                print(event.message)
            if isinstance(event, TERMINAL_EVENTS):
                terminal = event
        player.wait(timeout=1.0)
    finally:
        signal.signal(signal.SIGINT, prev_int)
        signal.signal(signal.SIGTERM, prev_term)
    return _exit_code(terminal)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args, cfg = _parse_args(argv)
    return run(args, cfg)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
