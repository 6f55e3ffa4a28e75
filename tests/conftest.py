"""Pytest configuration and fixtures."""

import random
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from digmaze.main import app
from digmaze.core import Board
from digmaze.services.game_service import GameService, get_game_service

from layouts import SMALL_MAZE


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible mazes."""
    return random.Random(1234)


@pytest.fixture
def board(rng) -> Board:
    """A generated 15x15 board."""
    return Board(15, 15, rng=rng)


@pytest.fixture
def small_board() -> Board:
    """Board built from SMALL_MAZE."""
    return Board.from_text(SMALL_MAZE)


@pytest.fixture
def game_service() -> GameService:
    """Game service with instant auto-solve replays."""
    return GameService(
        default_width=15,
        default_height=15,
        max_dimension=99,
        autosolve_max_delay=0.0,
        max_active_games=100,
    )


@pytest_asyncio.fixture(scope="function")
async def client(game_service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    app.dependency_overrides[get_game_service] = lambda: game_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    await game_service.shutdown()
