# src/duoserver/cli/main.py

"""
CLI entrypoint.

Initializes logging, loads the stores into AppState, then serves the HTTP
surface with uvicorn until interrupted.
"""

from __future__ import annotations

import logging
import sys

import uvicorn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..errors import StartupError
from ..logging_setup import setup_logging
from ..web.app import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except StartupError as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    app = create_app(state)
    logger.info("%s running on %s:%d", settings.app_name, settings.host, settings.port)

    # log_config=None keeps the handlers installed by setup_logging.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    logger.info("Bye.")


if __name__ == "__main__":
    main()
