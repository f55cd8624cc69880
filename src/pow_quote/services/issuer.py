"""Issue proof-of-work puzzles bound to a requester."""
from __future__ import annotations

import base64
import logging
import secrets
import time
from collections.abc import Callable
from typing import Final

from pow_quote.core.errors import DuplicateNonceError
from pow_quote.core.protocol import Header, Message
from pow_quote.schemas.puzzle import PUZZLE_VERSION, Puzzle
from pow_quote.services.nonce_store import NonceStore

logger = logging.getLogger(__name__)

NONCE_SIZE_BYTES: Final[int] = 16
MAX_NONCE_ATTEMPTS: Final[int] = 8


def generate_nonce(size: int = NONCE_SIZE_BYTES) -> str:
    """Return a random nonce encoded as standard base64 text."""
    return base64.b64encode(secrets.token_bytes(size)).decode("ascii")


class PuzzleIssuer:
    """Build fresh puzzles and register their nonces in the shared store."""

    def __init__(
        self,
        store: NonceStore,
        zeros_count: int,
        *,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = generate_nonce,
        max_attempts: int = MAX_NONCE_ATTEMPTS,
    ) -> None:
        if zeros_count < 0:
            raise ValueError("zeros_count must be non-negative")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._store = store
        self._zeros_count = zeros_count
        self._clock = clock
        self._nonce_factory = nonce_factory
        self._max_attempts = max_attempts

    @property
    def zeros_count(self) -> int:
        return self._zeros_count

    def issue(self, resource: str) -> Puzzle:
        """Create a puzzle for ``resource`` and register its nonce.

        A nonce collision is retried with a fresh value; only after
        ``max_attempts`` collisions in a row is the error re-raised.

        Raises:
            DuplicateNonceError: If every generated nonce collided.
        """
        date = int(self._clock())
        nonce = self._register_nonce(date)
        return Puzzle(
            version=PUZZLE_VERSION,
            zeros_count=self._zeros_count,
            date=date,
            resource=resource,
            rand=nonce,
            counter=0,
        )

    def issue_message(self, resource: str) -> Message:
        """Create a puzzle and wrap it in a ``RESPONSE_CHALLENGE`` message."""
        puzzle = self.issue(resource)
        return Message(header=Header.RESPONSE_CHALLENGE, payload=puzzle.to_payload())

    def _register_nonce(self, issued_at: int) -> str:
        attempt = 1
        while True:
            nonce = self._nonce_factory()
            try:
                self._store.add(nonce, issued_at)
            except DuplicateNonceError:
                if attempt >= self._max_attempts:
                    raise
                logger.warning("Nonce collision on attempt %d, regenerating", attempt)
                attempt += 1
            else:
                return nonce
