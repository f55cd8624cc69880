"""Challenge-response services shared by the server and the client."""

from .issuer import PuzzleIssuer
from .nonce_store import NonceStore
from .quotes import QuoteProvider
from .solver import PuzzleSolver
from .verifier import PuzzleVerifier

__all__ = [
    "NonceStore",
    "PuzzleIssuer",
    "PuzzleSolver",
    "PuzzleVerifier",
    "QuoteProvider",
]
