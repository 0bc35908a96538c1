"""Main entry point for PerfGuard."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from perfguard import get_version
from perfguard.core.config import load_config, validate_config
from perfguard.core.events import EventBus
from perfguard.core.events_listener import register_event_listeners
from perfguard.control.controller import PerformanceController
from perfguard.monitoring.sources import AsyncioFrameClock, EventLoopStallProbe
from perfguard.actuators.process import locate_process_actuator
from perfguard.utils.logging_config import setup_logging
from perfguard.utils.validation import ValidationError

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Pause a background process while this host is under load."
    )
    parser.add_argument('--selector', help='Process name or PID to control')
    parser.add_argument('--config', help='Path to YAML config (default: config/perfguard.yaml)')
    parser.add_argument('--debug', action='store_true', help='Verbose logging and periodic stats')
    return parser.parse_args(argv)


async def main(argv=None):
    """Main application entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
        overrides = {}
        if args.selector:
            overrides["actuator_selector"] = args.selector
        if args.debug:
            config.debug_mode = True
            overrides["debug"] = True
        if overrides:
            config.performance = config.performance.with_overrides(overrides)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.debug_mode, config.log_level, config.log_dir)

    # Validate configuration
    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info(f"PerfGuard {get_version()} Initializing")
    logger.info("=" * 60)

    # Service references for cleanup
    event_bus = None
    frame_clock = None
    stall_probe = None
    controller = None

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows: fall back to KeyboardInterrupt
            pass

    try:
        # Initialize event bus
        event_bus = EventBus(max_queue_size=1000)
        register_event_listeners(event_bus, config.log_dir)
        await event_bus.start()

        # Host signal sources
        frame_clock = AsyncioFrameClock(config.host.refresh_hz)
        stall_probe = EventLoopStallProbe(
            config.host.stall_probe_interval_seconds,
            config.host.stall_min_report_ms,
        )

        controller = PerformanceController(
            config.performance,
            locate_process_actuator,
            frame_clock,
            stall_probe,
            event_bus=event_bus,
            clock=lambda: loop.time() * 1000.0,
        )

        if not controller.setup():
            logger.warning("Nothing to control, exiting")
            return

        await frame_clock.start()
        await stall_probe.start()

        logger.info("=" * 60)
        logger.info("System Ready - Monitoring performance")
        logger.info("=" * 60)

        await stop_event.wait()
        logger.info("Shutdown signal received")

    except KeyboardInterrupt:
        logger.info("Shutdown signal received")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("Shutting down...")

        # Graceful shutdown in reverse order
        if controller:
            if controller.is_paused and controller.actuator is not None:
                # Never leave the workload suspended behind us
                controller.actuator.resume()
            controller.shutdown()

        if stall_probe:
            await stall_probe.stop()

        if frame_clock:
            await frame_clock.stop()

        if event_bus:
            await event_bus.stop()

        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown complete.")
