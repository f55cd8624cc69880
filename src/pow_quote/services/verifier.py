"""Server-side verification of submitted puzzle solutions."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pydantic import ValidationError

from pow_quote.core import pow as core_pow
from pow_quote.core.errors import (
    ExpiredChallengeError,
    InvalidSolutionError,
    MalformedMessageError,
    ResourceMismatchError,
    UnknownChallengeError,
)
from pow_quote.core.settings import HashAlgorithm
from pow_quote.schemas.puzzle import Puzzle
from pow_quote.services.nonce_store import NonceStore

logger = logging.getLogger(__name__)


def parse_puzzle(payload: str) -> Puzzle:
    """Parse a puzzle payload received from the wire.

    Raises:
        MalformedMessageError: If the payload is not a valid puzzle JSON object.
    """
    try:
        return Puzzle.from_payload(payload)
    except ValidationError as exc:
        raise MalformedMessageError(f"invalid puzzle payload: {exc.error_count()} error(s)") from exc


class PuzzleVerifier:
    """Check a solved puzzle and consume its nonce.

    Checks run cheapest first and each failure has its own exception. The
    solution itself is checked with one hash at the submitted counter; the
    server never searches.
    """

    def __init__(
        self,
        store: NonceStore,
        challenge_duration: int,
        *,
        min_zeros_count: int = 0,
        hash_algorithm: HashAlgorithm = "sha256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._challenge_duration = challenge_duration
        self._min_zeros_count = min_zeros_count
        self._hash_algorithm = hash_algorithm
        self._clock = clock

    def verify(self, puzzle: Puzzle, resource: str) -> None:
        """Verify ``puzzle`` presented by ``resource``; consume its nonce on success.

        Raises:
            ResourceMismatchError: The puzzle was issued to another requester.
            UnknownChallengeError: The nonce is not outstanding (never issued,
                already consumed, or evicted from the store) or was stored
                without an issue time.
            ExpiredChallengeError: The challenge was issued longer ago than
                the challenge duration.
            InvalidSolutionError: The puzzle date was altered, or the counter
                does not meet the difficulty.
        """
        if puzzle.resource != resource:
            raise ResourceMismatchError(
                f"puzzle issued to {puzzle.resource!r}, presented by {resource!r}"
            )

        issued_at = self._store.issued_at(puzzle.rand)
        if issued_at is None:
            raise UnknownChallengeError("challenge expired or not sent")

        # Freshness is measured from the server's record, not the echoed date.
        age = int(self._clock()) - issued_at
        if age > self._challenge_duration:
            raise ExpiredChallengeError(
                f"challenge is {age}s old, limit is {self._challenge_duration}s"
            )
        if puzzle.date != issued_at:
            raise InvalidSolutionError("puzzle date does not match the issued challenge")

        # A client may not lower the difficulty it was issued.
        target_bits = max(puzzle.zeros_count, self._min_zeros_count)
        if not core_pow.is_solved(puzzle, self._hash_algorithm, target_bits):
            raise InvalidSolutionError(f"counter {puzzle.counter} does not solve the puzzle")

        if not self._store.consume(puzzle.rand):
            # Lost the race against a concurrent verification of the same nonce.
            raise UnknownChallengeError("challenge already consumed")
        logger.debug("Consumed nonce for %s", resource)

    def verify_payload(self, payload: str, resource: str) -> Puzzle:
        """Parse and verify a ``REQUEST_RESOURCE`` payload.

        Returns:
            The verified puzzle.
        """
        puzzle = parse_puzzle(payload)
        self.verify(puzzle, resource)
        return puzzle
