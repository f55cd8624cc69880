# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from pow_quote.core.settings import Settings
from pow_quote.schemas.puzzle import Puzzle
from pow_quote.server import PowServer
from pow_quote.services.nonce_store import NonceStore
from pow_quote.services.solver import PuzzleSolver

TEST_ZEROS_COUNT = 4
TEST_DURATION = 60
TEST_RESOURCE = "127.0.0.1:50000"
START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced clock usable wherever a ``time.time``-like callable is expected."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> NonceStore:
    """Nonce store driven by the fake clock."""
    return NonceStore(ttl_seconds=300, clock=clock)


@pytest.fixture()
def test_settings() -> Settings:
    """Settings tuned for fast tests on an ephemeral port."""
    return Settings(
        server_host="127.0.0.1",
        server_port=0,
        hashcash_zeros_count=TEST_ZEROS_COUNT,
        hashcash_duration=TEST_DURATION,
        hashcash_max_iterations=100_000,
        hash_algorithm="sha256",
        nonce_ttl_seconds=300,
        nonce_cleanup_interval=60,
        client_request_interval=0,
        client_retry_delay=0,
    )


@pytest.fixture()
def solver() -> PuzzleSolver:
    return PuzzleSolver(max_iterations=100_000)


@pytest.fixture()
def make_puzzle(clock: FakeClock):
    """Factory for puzzles that were not necessarily issued by the server."""

    def _make(**overrides) -> Puzzle:
        fields = {
            "version": 1,
            "zeros_count": TEST_ZEROS_COUNT,
            "date": int(clock()),
            "resource": TEST_RESOURCE,
            "rand": "bm9uY2UtZm9yLXRlc3Rz",
            "counter": 0,
        }
        fields.update(overrides)
        return Puzzle(**fields)

    return _make


@pytest_asyncio.fixture()
async def pow_server(test_settings: Settings) -> AsyncIterator[PowServer]:
    """A real server listening on 127.0.0.1 with an ephemeral port."""
    server = PowServer(NonceStore(ttl_seconds=test_settings.nonce_ttl_seconds), test_settings)
    await server.start()
    try:
        yield server
    finally:
        await server.stop()
