"""Shared test fixtures for the dicebox test suite.

async_client  (function scope)
    An AsyncClient wired to the FastAPI app over ASGITransport.

make_rng  (function scope)
    Factory for SequenceRandom, a random source that hands out a fixed list
    of die values in order. Pass it as ``rng=`` to pin exact outcomes.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dicebox.main import app


class SequenceRandom:
    """Deterministic stand-in for ``random`` exposing ``randint``."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        if not self._values:
            raise AssertionError(f"SequenceRandom exhausted (randint({a}, {b}))")
        value = self._values.pop(0)
        assert a <= value <= b, f"{value} outside [{a}, {b}]"
        self.calls.append((a, b))
        return value

    @property
    def remaining(self) -> int:
        return len(self._values)


@pytest.fixture
def make_rng():
    return SequenceRandom


@pytest_asyncio.fixture
async def async_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
