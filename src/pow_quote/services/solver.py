"""Client-side search for a counter that solves a puzzle."""
from __future__ import annotations

import logging

from pow_quote.core import pow as core_pow
from pow_quote.core.errors import IterationBudgetExceededError
from pow_quote.core.settings import HashAlgorithm
from pow_quote.schemas.puzzle import Puzzle

logger = logging.getLogger(__name__)


class PuzzleSolver:
    """Brute-force the puzzle counter within a fixed iteration budget."""

    def __init__(self, max_iterations: int, hash_algorithm: HashAlgorithm = "sha256") -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self.max_iterations = max_iterations
        self.hash_algorithm = hash_algorithm

    def solve(self, puzzle: Puzzle) -> Puzzle:
        """Find the smallest counter in ``[0, max_iterations)`` that solves the puzzle.

        Args:
            puzzle: Puzzle as received from the server; its counter is ignored.

        Returns:
            A copy of the puzzle with the qualifying counter set.

        Raises:
            IterationBudgetExceededError: If no counter in the budget qualifies.
        """
        for counter in range(self.max_iterations):
            candidate = puzzle.with_counter(counter)
            if core_pow.is_solved(candidate, self.hash_algorithm):
                logger.debug("Solved puzzle at counter %d", counter)
                return candidate
        raise IterationBudgetExceededError(
            f"no solution for {puzzle.zeros_count} zero bits within "
            f"{self.max_iterations} iterations"
        )
