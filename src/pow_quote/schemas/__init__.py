"""
Pydantic schemas for payloads exchanged on the wire.
"""

from .puzzle import Puzzle

__all__ = ["Puzzle"]
