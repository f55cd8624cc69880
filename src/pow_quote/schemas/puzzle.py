"""Schemas related to proof-of-work puzzles."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PUZZLE_VERSION = 1


class Puzzle(BaseModel):
    """Hashcash-style puzzle exchanged as JSON in challenge and resource messages.

    Attribute names are Pythonic; the JSON keys (aliases) are the wire names.
    """

    version: int = Field(default=PUZZLE_VERSION, alias="Version")
    zeros_count: int = Field(ge=0, alias="ZerosCount")
    date: int = Field(alias="Date")
    resource: str = Field(alias="Resource")
    rand: str = Field(min_length=1, alias="Rand")
    counter: int = Field(default=0, ge=0, alias="Counter")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_payload(self) -> str:
        """Serialise the puzzle to its compact JSON wire form."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_payload(cls, payload: str) -> Puzzle:
        """Parse a puzzle from its JSON wire form.

        Raises:
            pydantic.ValidationError: If the payload is not a valid puzzle.
        """
        return cls.model_validate_json(payload)

    def with_counter(self, counter: int) -> Puzzle:
        """Return a copy of the puzzle carrying ``counter``."""
        return self.model_copy(update={"counter": counter})
