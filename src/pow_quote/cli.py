"""Console entry points for the pow-quote server and client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from pow_quote.client import PowClient
from pow_quote.core.settings import Settings, load_settings
from pow_quote.server import PowServer
from pow_quote.services.nonce_store import NonceStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Set up root logging once for a command-line process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON config file (default: config/config.json if present)",
    )
    parser.add_argument("--host", default=None, help="Override the server host")
    parser.add_argument("--port", type=int, default=None, help="Override the server port")


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    if args.host is not None:
        settings.server_host = args.host
    if args.port is not None:
        settings.server_port = args.port
    return settings


async def _serve(settings: Settings) -> None:
    store = NonceStore(ttl_seconds=settings.nonce_ttl_seconds)
    server = PowServer(store, settings)
    await server.start()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.ensure_future(server.stop()))

    await server.serve_forever()


def server_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the proof-of-work quote server")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except (OSError, ValueError) as e:
        print(f"error load config: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info("Starting server with config: %s", settings.model_dump())
    try:
        asyncio.run(_serve(settings))
    except OSError as e:
        logger.error("Server error: %s", e)
        sys.exit(1)


def client_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Request quotes from a proof-of-work server")
    _add_common_arguments(parser)
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many quotes (default: run until interrupted)",
    )
    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except (OSError, ValueError) as e:
        print(f"error load config: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)
    client = PowClient(settings)
    try:
        quotes = asyncio.run(client.run(cycles=args.cycles))
    except KeyboardInterrupt:
        return
    for quote in quotes:
        print(quote)


if __name__ == "__main__":
    server_main()
