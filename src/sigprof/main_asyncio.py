"""
main_asyncio.py — Command line runner for sigprof
-------------------------------------------------

Responsible for:
- loading configuration (YAML file + command line overrides)
- starting the signal-armed debug endpoint
- graceful shutdown on Ctrl+C / SIGTERM

    python -m sigprof --address localhost:6666 --timeout 120
    kill -USR1 <pid>
    curl http://localhost:6666/debug/pprof/
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from sigprof.lifecycle import Profiler, ShutdownCoordinator
from sigprof.lifecycle.handlers import ProfilerShutdownHandler
from sigprof.managers import ConfigManager
from sigprof.models.config import ProfilerConfig
from sigprof.models.enums import LogCategory
from sigprof.models.errors import ConfigError
from sigprof.utils.logger import get_logger, configure_logger

log = get_logger().for_category(LogCategory.SYSTEM)

# close() of a forced session waits up to this long on top of the drain timeout
SHUTDOWN_MARGIN = 5.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigprof",
        description="Serve /debug/pprof for a bounded time whenever the process receives a signal.",
    )
    parser.add_argument("--config", metavar="PATH", help="YAML file with a 'profiler:' section")
    parser.add_argument("--address", metavar="ADDR", help="listen address, e.g. :6666 or localhost:6666")
    parser.add_argument("--timeout", metavar="S", type=float, help="serving duration in seconds")
    parser.add_argument("--signal", metavar="NAME", help="arming signal, e.g. SIGUSR1")
    parser.add_argument("--log-level", metavar="LEVEL", dest="log_level", help="DEBUG, INFO, WARN or ERROR")
    parser.add_argument("--no-color", action="store_true", help="disable ANSI colors")
    return parser


def load_config(args: argparse.Namespace) -> ConfigManager:
    """
    Merge the YAML file with command line overrides.

    Raises:
        ConfigError: Invalid file or option
    """
    manager = ConfigManager(args.config)
    manager.load()
    manager.apply({
        "signal": args.signal,
        "address": args.address,
        "timeout": args.timeout,
        "log_level": args.log_level,
    })
    return manager


async def run(config: ProfilerConfig) -> None:
    """Run the profiler until SIGINT/SIGTERM, then shut it down gracefully."""
    profiler = Profiler(config)
    profiler.start()

    coordinator = ShutdownCoordinator(
        timeout_per_handler=config.timeout + SHUTDOWN_MARGIN,
        total_timeout=config.timeout + 2 * SHUTDOWN_MARGIN,
    )
    coordinator.register(ProfilerShutdownHandler(profiler))

    loop = asyncio.get_running_loop()
    coordinator.setup_signal_handlers(loop)

    log.info(
        "🏁 Profiler armed. Waiting for exit signal...",
        pid=os.getpid(),
        signal=config.signal.name,
        address=config.address,
        timeout=config.timeout,
    )

    try:
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    finally:
        coordinator.remove_signal_handlers()

    log.info("👋 sigprof shut down cleanly.")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        manager = load_config(args)
        configure_logger(manager.log_level, use_colors=not args.no_color and sys.stdout.isatty())
        config = ProfilerConfig(**manager.profiler_kwargs())
    except ConfigError as e:
        log.error(f"Configuration error: {e.message}", **e.details)
        return 2

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
    except Exception as e:
        log.error(f"Fatal error: {e!r}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
