"""TCP client that solves proof-of-work challenges to obtain quotes."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from pow_quote.core.errors import (
    IterationBudgetExceededError,
    MalformedMessageError,
    TransportError,
    UnknownHeaderError,
)
from pow_quote.core.protocol import Header, Message, decode_bytes, encode_bytes
from pow_quote.core.settings import Settings, settings as default_settings
from pow_quote.services.solver import PuzzleSolver
from pow_quote.services.verifier import parse_puzzle

# Configure logger for this module
logger = logging.getLogger(__name__)


async def send_message(writer: asyncio.StreamWriter, message: Message) -> None:
    """Write one message and flush it.

    Raises:
        TransportError: If the stream is broken.
    """
    try:
        writer.write(encode_bytes(message))
        await writer.drain()
    except (ConnectionError, OSError) as e:
        raise TransportError(f"error sending message: {e}") from e


async def read_message(reader: asyncio.StreamReader) -> Message:
    """Read and decode one message.

    Raises:
        TransportError: If the stream fails or ends before a full line.
        MalformedMessageError: If the line does not decode.
    """
    try:
        raw = await reader.readline()
    except (ConnectionError, OSError, ValueError) as e:
        raise TransportError(f"error reading message: {e}") from e
    if not raw.endswith(b"\n"):
        raise TransportError("connection closed by server")
    return decode_bytes(raw)


def _expect(message: Message, header: Header) -> Message:
    if message.header is not header:
        raise UnknownHeaderError(f"expected {header.name}, got {message.header.name}")
    return message


class PowClient:
    """Request quotes from a :class:`~pow_quote.server.PowServer`."""

    def __init__(self, settings: Settings | None = None, solver: PuzzleSolver | None = None) -> None:
        self.settings = settings or default_settings
        self.solver = solver or PuzzleSolver(
            self.settings.hashcash_max_iterations,
            hash_algorithm=self.settings.hash_algorithm,
        )

    async def request_quote(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> str:
        """Run one full challenge-response cycle on an open connection.

        Returns:
            The quote sent by the server.

        Raises:
            TransportError: The connection failed or was closed by the server.
            IterationBudgetExceededError: The puzzle was too hard for the budget.
            MalformedMessageError: The server sent something unparseable.
            UnknownHeaderError: The server answered with an unexpected header.
        """
        await send_message(writer, Message(Header.REQUEST_CHALLENGE))
        challenge = _expect(await read_message(reader), Header.RESPONSE_CHALLENGE)
        puzzle = parse_puzzle(challenge.payload)
        logger.info("Got challenge with difficulty %d bits", puzzle.zeros_count)

        solved = self.solver.solve(puzzle)
        logger.info("Challenge solved with counter %d", solved.counter)

        await send_message(writer, Message(Header.REQUEST_RESOURCE, solved.to_payload()))
        response = _expect(await read_message(reader), Header.RESPONSE_RESOURCE)
        return response.payload

    async def quit(self, writer: asyncio.StreamWriter) -> None:
        """Tell the server this client is done."""
        await send_message(writer, Message(Header.QUIT))

    async def connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a connection to the configured server.

        Raises:
            TransportError: If the connection cannot be established.
        """
        try:
            reader, writer = await asyncio.open_connection(
                self.settings.server_host, self.settings.server_port
            )
        except OSError as e:
            raise TransportError(f"cannot connect to {self.settings.address}: {e}") from e
        logger.info("Connected to %s", self.settings.address)
        return reader, writer

    async def run(self, cycles: int | None = None) -> list[str]:
        """Fetch quotes repeatedly, reconnecting after failures.

        Args:
            cycles: Number of successful quotes to fetch; None runs forever.

        Returns:
            The quotes received, in order.
        """
        quotes: list[str] = []
        interval = max(0.0, float(self.settings.client_request_interval))
        retry_delay = max(0.0, float(self.settings.client_retry_delay))

        while cycles is None or len(quotes) < cycles:
            try:
                reader, writer = await self.connect()
            except TransportError as e:
                logger.warning("%s; retrying in %.1fs", e, retry_delay)
                await asyncio.sleep(retry_delay)
                continue

            failed = False
            try:
                while cycles is None or len(quotes) < cycles:
                    quote = await self.request_quote(reader, writer)
                    logger.info("Quote result: %s", quote)
                    quotes.append(quote)
                    if cycles is None or len(quotes) < cycles:
                        await asyncio.sleep(interval)
                with contextlib.suppress(TransportError):
                    await self.quit(writer)
            except (
                TransportError,
                IterationBudgetExceededError,
                MalformedMessageError,
                UnknownHeaderError,
            ) as e:
                logger.warning("Session failed: %s; retrying in %.1fs", e, retry_delay)
                failed = True
            finally:
                writer.close()
                with contextlib.suppress(ConnectionError, OSError):
                    await writer.wait_closed()

            if failed:
                await asyncio.sleep(retry_delay)

        return quotes
