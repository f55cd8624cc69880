"""Exception hierarchy for the proof-of-work protocol.

Every failure is scoped to one connection or one client session. The server
drops the connection on any of them; the client surfaces them to its caller.
"""

from __future__ import annotations


class PowError(RuntimeError):
    """Base exception for all proof-of-work protocol failures."""


class ProtocolError(PowError):
    """Raised when a line on the wire cannot be understood."""


class MalformedMessageError(ProtocolError):
    """Raised when a message or its payload does not match the wire format."""


class UnknownHeaderError(ProtocolError):
    """Raised when a message carries a header that is unknown or unexpected here."""


class ChallengeError(PowError):
    """Base exception for a submitted puzzle that fails verification."""


class UnknownChallengeError(ChallengeError):
    """Raised when the puzzle nonce was never issued, already used, or evicted."""


class ExpiredChallengeError(ChallengeError):
    """Raised when the puzzle is older than the configured challenge duration."""


class ResourceMismatchError(ChallengeError):
    """Raised when the puzzle is bound to a different requester."""


class InvalidSolutionError(ChallengeError):
    """Raised when the submitted counter does not satisfy the difficulty."""


class DuplicateNonceError(PowError):
    """Raised when a nonce is added to the store while still outstanding."""


class IterationBudgetExceededError(PowError):
    """Raised when the solver exhausts its iteration budget."""


class TransportError(PowError):
    """Raised when the byte stream fails or closes mid-cycle."""
