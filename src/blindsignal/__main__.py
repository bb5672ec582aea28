"""Console ping session.

Runs a session for a few seconds and prints every ping the local player
can hear.  In mock mode the player walks in a circle around the arena and
the simulator supplies remote pings; with --mqtt it joins a broker topic.

Usage:
    python -m blindsignal --duration 10 --range-rank 2
    python -m blindsignal --mqtt --broker localhost --session lobby
"""

from __future__ import annotations

import argparse
import inspect
import logging
import math
import sys
import time

from loguru import logger

from blindsignal.config import Settings
from blindsignal.session import PingSession

TICK = 0.1  # seconds, host frame


class _InterceptHandler(logging.Handler):
    """Route stdlib logging from the library through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        # Walk back past the logging module so loguru reports the real call site
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _on_ping(x: float, y: float, intensity: float, source_id: str) -> None:
    logger.info(f"PING  {source_id:<20s} pos=({x:6.1f}, {y:6.1f})  V_n={intensity:.2f}")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Acoustic ping session")
    parser.add_argument("--duration", type=float, default=10.0, help="Seconds to run")
    parser.add_argument("--player", type=str, default=None, help="Local player id")
    parser.add_argument("--dampening-rank", type=int, default=0)
    parser.add_argument("--range-rank", type=int, default=0)
    parser.add_argument("--fire-every", type=float, default=0.0,
                        help="Fire a discharge every N seconds (0 = never)")
    parser.add_argument("--mqtt", action="store_true", help="Use the MQTT transport")
    parser.add_argument("--broker", type=str, default=None, help="MQTT broker host")
    parser.add_argument("--port", type=int, default=None, help="MQTT broker port")
    parser.add_argument("--session", type=str, default=None, help="MQTT session id")
    parser.add_argument("--seed", type=int, default=None, help="Simulator RNG seed")
    parser.add_argument("--log-level", type=str, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    overrides: dict = {"mock_mode": not args.mqtt}
    if args.player:
        overrides["player_id"] = args.player
    if args.broker:
        overrides["mqtt_host"] = args.broker
    if args.port:
        overrides["mqtt_port"] = args.port
    if args.session:
        overrides["mqtt_session_id"] = args.session
    if args.seed is not None:
        overrides["mock_seed"] = args.seed
    if args.log_level:
        overrides["log_level"] = args.log_level
    cfg = Settings(**overrides)

    logger.remove()
    logger.add(sys.stderr, level=cfg.log_level.upper())
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    session = PingSession(settings=cfg, on_ping=_on_ping)
    session.player.attributes.set_dampening_rank(args.dampening_rank)
    session.player.attributes.set_range_rank(args.range_rank)
    logger.info(session.player.attributes.describe())

    judged = 0
    start = time.monotonic()
    last_fire = start
    with session:
        try:
            while time.monotonic() - start < args.duration:
                now = time.monotonic()
                t = now - start
                # Walk a 20-unit circle at sprint/walk alternating speed
                session.player.move_to((20.0 * math.cos(t / 4), 20.0 * math.sin(t / 4)))
                magnitude = 0.8 if int(t) % 4 < 2 else 0.4
                if args.fire_every > 0 and now - last_fire >= args.fire_every:
                    if session.emitter.fire_discharge():
                        last_fire = now
                judged += session.tick(magnitude)
                time.sleep(TICK)
        except KeyboardInterrupt:
            logger.info("Interrupted")

    stats = getattr(session.channel, "stats", None)
    if stats:
        logger.info(f"Channel stats: {stats}")
    logger.info(f"Session over: {judged} pings judged")
    return 0


if __name__ == "__main__":
    sys.exit(main())
