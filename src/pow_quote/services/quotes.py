"""Resource provider handing out words of wisdom."""
from __future__ import annotations

import random
from collections.abc import Sequence

QUOTES: tuple[str, ...] = (
    "All saints who remember to keep and do these sayings, walking in obedience "
    "to the commandments, shall receive health in their navel and marrow to their bones",
    "And shall find wisdom and great treasures of knowledge, even hidden treasures",
    "And shall run and not be weary, and shall walk and not faint",
    "And I, the Lord, give unto them a promise, that the destroying angel shall pass "
    "by them, as the children of Israel, and not slay them",
)


class QuoteProvider:
    """Pick one quote at random from a fixed pool."""

    def __init__(self, quotes: Sequence[str] = QUOTES, rng: random.Random | None = None) -> None:
        if not quotes:
            raise ValueError("quote pool must not be empty")
        if any("\n" in quote for quote in quotes):
            raise ValueError("quotes must be single-line")
        self._quotes = tuple(quotes)
        self._rng = rng or random.Random()

    @property
    def quotes(self) -> tuple[str, ...]:
        return self._quotes

    def get_quote(self) -> str:
        """Return one quote from the pool."""
        return self._rng.choice(self._quotes)
