#!/usr/bin/env python3
"""ACW02 HVAC to MQTT bridge."""

import asyncio
import logging
import signal
import sys

from acw02mqtt_app import Acw02MQTT, load_config
from constants import DEFAULT_CONFIG_FILE
from errors import ConfigurationError

logger = logging.getLogger(__name__)


async def run(config):
    """Run the bridge until SIGINT/SIGTERM."""
    app = Acw02MQTT(config)
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    async def runner():
        try:
            await app.start()
        except asyncio.CancelledError:
            pass
        finally:
            await app.stop()
            stop_event.set()

    task = loop.create_task(runner())

    def _shutdown():
        if not task.done():
            logger.info("Shutting down...")
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    await stop_event.wait()


def main():
    """Main entry point."""
    path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_FILE
    try:
        config = load_config(path)
    except (FileNotFoundError, ValueError) as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    level = str((config.get("logging") or {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(run(config))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
