from __future__ import annotations

import asyncio
import logging

from forest_host.agent import load_agent_factory
from forest_host.config import HOST, PORT, load_settings
from forest_host.errors import HostError
from forest_host.lifecycle import Lifecycle, build_context
from forest_host.log import attach_log_file, configure_logging

NAME = "forest-admin"

logger = logging.getLogger("forest_host")


def main() -> int:
    configure_logging()
    logger.info(f"Booting {NAME}")

    try:
        settings = load_settings()
        attach_log_file(settings)
        factory = load_agent_factory(settings.forest_agent_factory)
        lifecycle = Lifecycle(build_context(settings), factory)
        asyncio.run(lifecycle.run())
    except HostError as exc:
        logger.critical("Startup aborted [%s]: %s", exc.code, exc.message, exc_info=exc)
        return 1
    except KeyboardInterrupt:
        # Interrupted before the server took over SIGINT, e.g. during agent start.
        logger.info(f"Exiting from http://{HOST}:{PORT}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
