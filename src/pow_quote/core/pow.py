"""Proof-of-Work helpers.

A puzzle is solved when the hash of its hashcash stamp has at least
``zeros_count`` leading zero bits. Finding such a counter costs the client
about ``2 ** zeros_count`` hashes; checking one costs the server a single hash.
"""
from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

import blake3

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from pow_quote.core.settings import HashAlgorithm
    from pow_quote.schemas.puzzle import Puzzle

MAX_TARGET_BITS = 256


def stamp(puzzle: Puzzle) -> bytes:
    """Return the canonical hashcash stamp for a puzzle.

    The layout is ``ver:bits:date:resource::rand:counter``; the empty field
    is the hashcash extension slot.
    """
    return (
        f"{puzzle.version}:{puzzle.zeros_count}:{puzzle.date}:"
        f"{puzzle.resource}::{puzzle.rand}:{puzzle.counter}"
    ).encode()


def compute_hash(data: bytes, hash_algorithm: HashAlgorithm = "sha256") -> bytes:
    """Hash ``data`` with the requested algorithm.

    Raises:
        ValueError: If the algorithm is not supported.
    """
    if hash_algorithm == "sha256":
        return hashlib.sha256(data).digest()
    if hash_algorithm == "blake3":
        return blake3.blake3(data).digest()
    raise ValueError(f"Unsupported hash algorithm: {hash_algorithm}")


def count_leading_zero_bits(digest: bytes) -> int:
    """Count the number of leading zero bits in a digest."""
    zeros = 0
    for byte in digest:
        if byte == 0:
            zeros += 8
            continue
        # bit_length gives the position of the highest set bit
        zeros += 8 - byte.bit_length()
        break
    return zeros


def has_leading_zero_bits(digest: bytes, target_bits: int) -> bool:
    """Return True if ``digest`` starts with at least ``target_bits`` zero bits."""
    if not (0 <= target_bits <= MAX_TARGET_BITS):
        return False
    return count_leading_zero_bits(digest) >= target_bits


def solution_hash(puzzle: Puzzle, hash_algorithm: HashAlgorithm = "sha256") -> bytes:
    """Return the hash of the puzzle stamp at its current counter."""
    return compute_hash(stamp(puzzle), hash_algorithm)


def is_solved(
    puzzle: Puzzle,
    hash_algorithm: HashAlgorithm = "sha256",
    target_bits: int | None = None,
) -> bool:
    """Check the puzzle's current counter with exactly one hash evaluation.

    Args:
        puzzle: Puzzle carrying the candidate counter.
        hash_algorithm: Hash algorithm to use ("sha256" or "blake3").
        target_bits: Difficulty to check against; defaults to ``puzzle.zeros_count``.

    Returns:
        True if the stamp hash has at least ``target_bits`` leading zero bits.
    """
    bits = puzzle.zeros_count if target_bits is None else target_bits
    return has_leading_zero_bits(solution_hash(puzzle, hash_algorithm), bits)
