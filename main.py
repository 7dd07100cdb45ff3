import asyncio
import logging
import sys

from config import ServerConfig
from server.mcp_app import run_stdio

logger = logging.getLogger("secure_gmail_mcp")


def configure_logging(level: str) -> None:
    # stdout carries the MCP protocol; diagnostics go to stderr.
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    # 1. Resolve configuration
    config = ServerConfig.from_env()
    configure_logging(config.log_level)

    # 2. Serve until the client disconnects or Ctrl-C
    try:
        asyncio.run(run_stdio(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
