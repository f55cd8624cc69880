"""TCP server guarding quotes behind a proof-of-work challenge.

Each accepted connection runs in its own asyncio task. All tasks share one
:class:`NonceStore`, which is passed in at construction.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from typing import Any

from pow_quote.core.errors import PowError, UnknownHeaderError
from pow_quote.core.protocol import Header, Message, decode_bytes, encode_bytes
from pow_quote.core.settings import Settings, settings as default_settings
from pow_quote.services.issuer import PuzzleIssuer
from pow_quote.services.nonce_store import NonceStore
from pow_quote.services.quotes import QuoteProvider
from pow_quote.services.verifier import PuzzleVerifier

# Configure logger for this module
logger = logging.getLogger(__name__)


def format_peer(peername: Any) -> str:
    """Render a socket peer address as ``host:port`` (``[host]:port`` for IPv6)."""
    if isinstance(peername, tuple) and len(peername) >= 2:
        host, port = peername[0], peername[1]
        if ":" in str(host):
            return f"[{host}]:{port}"
        return f"{host}:{port}"
    return str(peername)


class PowServer:
    """Serve quotes to clients that solve a hashcash puzzle first.

    Protocol errors are never reported to the client: the connection is
    closed and the client has to start a new challenge-response cycle.
    """

    def __init__(
        self,
        store: NonceStore,
        settings: Settings | None = None,
        quotes: QuoteProvider | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store
        self.quotes = quotes or QuoteProvider()
        self.issuer = PuzzleIssuer(store, self.settings.hashcash_zeros_count, clock=clock)
        self.verifier = PuzzleVerifier(
            store,
            self.settings.hashcash_duration,
            min_zeros_count=self.settings.hashcash_zeros_count,
            hash_algorithm=self.settings.hash_algorithm,
            clock=clock,
        )
        self._server: asyncio.AbstractServer | None = None
        self._janitor: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def port(self) -> int:
        """Return the port actually bound (useful when configured with port 0)."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("server is not listening")
        return int(self._server.sockets[0].getsockname()[1])

    async def start(self) -> None:
        """Bind the listener and start accepting connections."""
        if self._server is not None:
            return
        self._stopping.clear()
        self._server = await asyncio.start_server(
            self.handle_connection,
            host=self.settings.server_host,
            port=self.settings.server_port,
        )
        self._janitor = asyncio.create_task(self._purge_loop())
        addresses = ", ".join(format_peer(sock.getsockname()) for sock in self._server.sockets)
        logger.info(
            "Listening on %s (difficulty=%d bits, challenge duration=%ds)",
            addresses,
            self.settings.hashcash_zeros_count,
            self.settings.hashcash_duration,
        )

    async def serve_forever(self) -> None:
        """Start if needed and block until :meth:`stop` is called."""
        await self.start()
        await self._stopping.wait()

    async def stop(self) -> None:
        """Stop accepting connections.

        Connections that were already accepted are left to finish on their own.
        """
        if self._server is None:
            return
        logger.info("Shutting down the server")
        self._server.close()
        self._server = None
        if self._janitor is not None:
            self._janitor.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._janitor
            self._janitor = None
        self._stopping.set()

    async def handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Run the request loop for one client until it quits or fails."""
        client_id = format_peer(writer.get_extra_info("peername"))
        logger.info("New client: %s", client_id)
        try:
            while True:
                try:
                    raw = await reader.readline()
                except (ConnectionError, OSError, ValueError) as e:
                    logger.warning("Error reading from %s: %s", client_id, e)
                    return
                if not raw.endswith(b"\n"):
                    logger.info("Client %s disconnected", client_id)
                    return

                try:
                    response = self.process_request(raw, client_id)
                except PowError as e:
                    logger.warning(
                        "Dropping client %s: %s: %s", client_id, type(e).__name__, e
                    )
                    return
                if response is None:
                    logger.info("Client %s requested to close the connection", client_id)
                    return

                try:
                    writer.write(encode_bytes(response))
                    await writer.drain()
                except (ConnectionError, OSError) as e:
                    logger.warning("Error sending to %s: %s", client_id, e)
                    return
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError, OSError):
                await writer.wait_closed()

    def process_request(self, raw: bytes, client_id: str) -> Message | None:
        """Handle one request line.

        Returns:
            The response message, or None when the client asked to quit.

        Raises:
            PowError: On any protocol or verification failure.
        """
        message = decode_bytes(raw)

        if message.header is Header.QUIT:
            return None

        if message.header is Header.REQUEST_CHALLENGE:
            logger.info("Client %s requests challenge", client_id)
            return self.issuer.issue_message(client_id)

        if message.header is Header.REQUEST_RESOURCE:
            logger.debug("Client %s requests resource with payload %s", client_id, message.payload)
            self.verifier.verify_payload(message.payload, client_id)
            logger.info("Client %s successfully solved the challenge", client_id)
            return Message(header=Header.RESPONSE_RESOURCE, payload=self.quotes.get_quote())

        raise UnknownHeaderError(f"unexpected header {message.header.name} from client")

    async def _purge_loop(self) -> None:
        interval = max(0.1, float(self.settings.nonce_cleanup_interval))
        while True:
            await asyncio.sleep(interval)
            removed = self.store.purge_expired()
            if removed:
                logger.debug("Purged %d expired nonces", removed)
