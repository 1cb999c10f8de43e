"""
Demo entry point: runs a simulated monitoring session end to end.

Streams a synthetic pose sequence through the monitor in real time, lets
the alert countdown tick on the asyncio loop and logs every event the
notifiers receive.
"""

import argparse
import asyncio
import json
import logging
import sys
import time

from fallguard import (
    AsyncioScheduler,
    EventDispatcher,
    FallMonitor,
    get_settings,
)
from fallguard.simulation import fall_scenario, stumble_scenario


def setup_logging(settings):
    """Setup logging configuration."""
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / "fallguard.log"

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )


logger = logging.getLogger(__name__)


def log_event(event):
    """Notifier that writes each event to the log."""
    logger.info(f"Notifier received: {json.dumps(event.to_dict())[:200]}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Simulated fall monitoring session")
    parser.add_argument(
        "--scenario",
        choices=("fall", "stumble"),
        default="fall",
        help="fall: subject stays down; stumble: subject gets back up",
    )
    parser.add_argument("--fps", type=float, default=30.0)
    parser.add_argument(
        "--cancel-after",
        type=int,
        default=None,
        help="cancel the countdown after this many ticks",
    )
    return parser.parse_args(argv)


async def run_session(args, settings):
    """Stream the scenario and wait for the countdown to resolve."""
    loop = asyncio.get_running_loop()

    dispatcher = EventDispatcher(
        notifiers=[log_event],
        queue_size=settings.EVENT_QUEUE_SIZE,
        notify_timeout=settings.NOTIFY_TIMEOUT,
    )
    dispatcher.start()

    monitor = FallMonitor.from_settings(
        settings,
        scheduler=AsyncioScheduler(loop),
        dispatcher=dispatcher,
        clock=time.monotonic,
    )
    monitor.start_monitoring()

    build = fall_scenario if args.scenario == "fall" else stumble_scenario
    frames = build(fps=args.fps, start_time=time.monotonic())
    logger.info(f"Streaming {len(frames)} frames ({args.scenario} scenario)")

    for frame in frames:
        delay = frame.timestamp - time.monotonic()
        if delay > 0:
            await asyncio.sleep(delay)
        update = monitor.process_frame(frame)
        for event in update.events:
            logger.info(f"Frame produced {type(event).__name__}")

    if monitor.countdown.active:
        if args.cancel_after is not None:
            await asyncio.sleep(args.cancel_after * settings.TICK_INTERVAL + 0.1)
            result = monitor.cancel_fall()
            logger.info(f"Cancel accepted: {result.accepted}")
        while monitor.countdown.active:
            await asyncio.sleep(settings.TICK_INTERVAL / 2)

    monitor.stop_monitoring()
    await dispatcher.stop()

    logger.info("=" * 60)
    logger.info("Session summary")
    logger.info("=" * 60)
    logger.info(json.dumps(monitor.event_log.get_statistics()))
    dispatcher.log_statistics()


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)
    settings.log_config()

    try:
        asyncio.run(run_session(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
