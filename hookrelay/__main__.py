"""
PURPOSE: Command-line entrypoint running the hookrelay server under uvicorn.

Usage:
    python -m hookrelay [--host HOST] [--port PORT] [--log-level LEVEL] [--reload]

Defaults come from Settings (HOST, PORT, LOG_LEVEL environment variables or .env).
"""

import argparse
from typing import Optional, Sequence

import uvicorn

from hookrelay.config.settings import settings
from hookrelay.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with defaults taken from Settings."""
    parser = argparse.ArgumentParser(
        prog="hookrelay",
        description="TradingView webhook receiver with a live WebSocket dashboard.",
    )
    parser.add_argument("--host", default=settings.HOST, help="bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=settings.PORT, help="bind port (default: %(default)s)")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="log level (default: %(default)s)",
    )
    parser.add_argument("--reload", action="store_true", help="restart on code changes (development)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    PURPOSE: Parse arguments and run uvicorn with the application factory.

    Args:
        argv: Argument list, sys.argv[1:] when None.
    """
    args = build_parser().parse_args(argv)
    settings.LOG_LEVEL = args.log_level
    setup_logging(args.log_level)

    logger.info("server_starting", host=args.host, port=args.port, webhook_path="/webhook")

    uvicorn.run(
        "hookrelay.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
