"""Tests for game endpoints."""

import pytest
from httpx import AsyncClient

from digmaze.core import Board

from layouts import SMALL_MAZE


async def create_game(client: AsyncClient, **payload) -> dict:
    response = await client.post("/v1/game", json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_game(client: AsyncClient):
    """Test POST /v1/game generates a maze with the player on the start."""
    data = await create_game(client, width=11, height=9, seed=5)

    assert data["id"].startswith("game_")
    assert data["width"] == 11
    assert data["height"] == 9
    assert data["goal"] == {"x": 9, "y": 0}
    assert data["start"]["y"] == 8
    assert data["player"] == data["start"]
    assert data["started"] is False
    assert data["finished"] is False
    assert data["solving"] is False
    assert data["elapsed"] == "00:00.000"
    assert len(data["grid"]) == 9
    assert all(len(row) == 11 for row in data["grid"])
    assert data["grid"][0][9] == "E"
    assert data["grid"][8][data["start"]["x"]] == "@"


@pytest.mark.asyncio
async def test_create_game_defaults(client: AsyncClient):
    data = await create_game(client)
    assert data["width"] == 15
    assert data["height"] == 15


@pytest.mark.asyncio
async def test_create_game_seed_reproducible(client: AsyncClient):
    a = await create_game(client, width=13, height=13, seed=77)
    b = await create_game(client, width=13, height=13, seed=77)
    assert a["grid"] == b["grid"]


@pytest.mark.asyncio
async def test_create_game_invalid_size(client: AsyncClient):
    """Test sizes outside the allowed range are rejected."""
    response = await client.post("/v1/game", json={"width": 3, "height": 9})
    assert response.status_code == 422

    response = await client.post("/v1/game", json={"width": 9, "height": 500})
    assert response.status_code == 422
    assert "must be between" in response.json()["detail"]


@pytest.mark.asyncio
async def test_get_and_list_games(client: AsyncClient):
    created = await create_game(client, width=7, height=7)

    response = await client.get(f"/v1/game/{created['id']}")
    assert response.status_code == 200
    assert response.json()["grid"] == created["grid"]

    response = await client.get("/v1/game")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["games"][0]["id"] == created["id"]
    assert "grid" not in data["games"][0]


@pytest.mark.asyncio
async def test_unknown_game_returns_404(client: AsyncClient):
    for method, path in [
        ("get", "/v1/game/game_missing"),
        ("delete", "/v1/game/game_missing"),
        ("get", "/v1/game/game_missing/solve"),
        ("post", "/v1/game/game_missing/autosolve"),
        ("delete", "/v1/game/game_missing/autosolve"),
        ("post", "/v1/game/game_missing/retry"),
    ]:
        response = await getattr(client, method)(path)
        assert response.status_code == 404, path

    response = await client.post("/v1/game/game_missing/move", json={"direction": "up"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_game(client: AsyncClient):
    created = await create_game(client)

    response = await client.delete(f"/v1/game/{created['id']}")
    assert response.status_code == 204

    response = await client.get(f"/v1/game/{created['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_move(client: AsyncClient, game_service):
    """Test moves along a known layout, including a blocked one."""
    created = await create_game(client)
    game = game_service.get_game(created["id"])
    game.board = Board.from_text(SMALL_MAZE)
    game.controller.board = game.board

    response = await client.post(
        f"/v1/game/{created['id']}/move",
        json={"direction": "up"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["moved"] is True
    assert data["position"] == {"x": 1, "y": 5}
    assert data["finished"] is False

    response = await client.post(
        f"/v1/game/{created['id']}/move",
        json={"direction": "left"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["moved"] is False
    assert data["position"] == {"x": 1, "y": 5}

    response = await client.get(f"/v1/game/{created['id']}")
    assert response.json()["started"] is True


@pytest.mark.asyncio
async def test_move_invalid_direction(client: AsyncClient):
    created = await create_game(client)
    response = await client.post(
        f"/v1/game/{created['id']}/move",
        json={"direction": "north"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_solve_then_play_to_finish(client: AsyncClient):
    """Test following the solve route finishes the game."""
    created = await create_game(client, width=15, height=11, seed=21)
    game_id = created["id"]

    response = await client.get(f"/v1/game/{game_id}/solve")
    assert response.status_code == 200
    solution = response.json()
    assert solution["length"] == len(solution["directions"]) > 0
    assert set(solution["directions"]) <= {0, 1, 2, 3}
    assert solution["path"][0] == created["start"]
    assert solution["path"][-1] == created["goal"]
    assert len(solution["path"]) == solution["length"] + 1

    names = ["up", "right", "down", "left"]
    for code in solution["directions"]:
        response = await client.post(
            f"/v1/game/{game_id}/move",
            json={"direction": names[code]},
        )
        assert response.status_code == 200
        assert response.json()["moved"] is True

    assert response.json()["finished"] is True
    assert response.json()["position"] == created["goal"]

    response = await client.post(
        f"/v1/game/{game_id}/move",
        json={"direction": "down"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_solve_does_not_move(client: AsyncClient):
    created = await create_game(client, seed=1)
    await client.get(f"/v1/game/{created['id']}/solve")

    response = await client.get(f"/v1/game/{created['id']}")
    data = response.json()
    assert data["player"] == created["start"]
    assert data["started"] is False


@pytest.mark.asyncio
async def test_autosolve_wait(client: AsyncClient):
    created = await create_game(client, seed=9)

    response = await client.post(
        f"/v1/game/{created['id']}/autosolve",
        params={"wait": "true"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["finished"] is True
    assert data["solving"] is False
    assert data["player"] == created["goal"]

    response = await client.post(f"/v1/game/{created['id']}/autosolve")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_autosolve_background_and_cancel(client: AsyncClient, game_service):
    created = await create_game(client, seed=12)
    game = game_service.get_game(created["id"])
    game.controller.max_delay = 30.0
    game.controller.rng.random = lambda: 1.0

    response = await client.post(f"/v1/game/{created['id']}/autosolve")
    assert response.status_code == 202
    assert response.json()["solving"] is True

    response = await client.post(
        f"/v1/game/{created['id']}/move",
        json={"direction": "up"},
    )
    assert response.status_code == 409

    response = await client.post(f"/v1/game/{created['id']}/autosolve")
    assert response.status_code == 409

    response = await client.delete(f"/v1/game/{created['id']}/autosolve")
    assert response.status_code == 200
    data = response.json()
    assert data["solving"] is False
    assert data["finished"] is False

    response = await client.delete(f"/v1/game/{created['id']}/autosolve")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_retry(client: AsyncClient):
    created = await create_game(client, width=9, height=9, seed=3)
    game_id = created["id"]
    await client.post(f"/v1/game/{game_id}/autosolve", params={"wait": "true"})

    response = await client.post(f"/v1/game/{game_id}/retry")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == game_id
    assert data["width"] == 9
    assert data["height"] == 9
    assert data["finished"] is False
    assert data["started"] is False
    assert data["player"] == data["start"]


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/v1/game")
    assert "x-request-id" in response.headers
