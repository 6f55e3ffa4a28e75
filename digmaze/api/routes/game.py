"""Game routes for creating, playing and solving mazes."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from digmaze.api.deps import GameServiceDep
from digmaze.config import get_settings
from digmaze.core import path_cells
from digmaze.schemas.game import (
    GameCreateRequest,
    GameListResponse,
    GamePosition,
    GameState,
    GameSummary,
    MoveRequest,
    MoveResponse,
    SolveResponse,
)
from digmaze.services.game_service import (
    GameBusyError,
    GameFinishedError,
    GameNotFoundError,
    GameService,
    GameSession,
    InvalidGameSizeError,
)

logger = logging.getLogger(__name__)

settings = get_settings()
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/game", tags=["Games"])


def _position(cell) -> GamePosition:
    return GamePosition(x=cell.x, y=cell.y)


def _summary(game: GameSession) -> GameSummary:
    return GameSummary(
        id=game.id,
        width=game.board.width,
        height=game.board.height,
        started=game.started,
        finished=game.finished,
        created_at=game.created_at,
    )


def _state(game: GameSession) -> GameState:
    board = game.board
    return GameState(
        **_summary(game).model_dump(),
        start=_position(board.start),
        goal=_position(board.goal),
        player=_position(board.player),
        solving=game.is_solving,
        elapsed_ms=game.elapsed_ms(),
        elapsed=game.elapsed_display(),
        grid=board.render(),
    )


def _get_game(service: GameService, game_id: str) -> GameSession:
    try:
        return service.get_game(game_id)
    except GameNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


def _rule_error(e: Exception) -> HTTPException:
    """Translate a game rule violation into an HTTP error."""
    if isinstance(e, GameBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "",
    response_model=GameState,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(f"{settings.rate_limit_games}/minute")
async def create_game(
    request: Request,
    game_data: GameCreateRequest,
    service: GameServiceDep,
) -> GameState:
    """Generate a new maze and place the player on its start.

    Width and height default to the server configuration. Passing a seed
    makes the generated maze reproducible.
    """
    try:
        game = service.create_game(
            width=game_data.width,
            height=game_data.height,
            seed=game_data.seed,
        )
    except InvalidGameSizeError as e:
        logger.info(f"Rejected game size: {e}")
        raise HTTPException(
            status_code=422,
            detail=str(e),
        )

    return _state(game)


@router.get(
    "",
    response_model=GameListResponse,
)
async def list_games(service: GameServiceDep) -> GameListResponse:
    """List all games held by the server."""
    games = [_summary(game) for game in service.list_games()]
    return GameListResponse(games=games, total=len(games))


@router.get(
    "/{game_id}",
    response_model=GameState,
)
async def get_game(game_id: str, service: GameServiceDep) -> GameState:
    """Get the current state of a game, including a text rendering of the grid."""
    return _state(_get_game(service, game_id))


@router.delete(
    "/{game_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def end_game(game_id: str, service: GameServiceDep) -> Response:
    """End a game and stop any auto-solve running on it."""
    _get_game(service, game_id)
    service.end_game(game_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{game_id}/move",
    response_model=MoveResponse,
)
async def move(
    game_id: str,
    request: MoveRequest,
    service: GameServiceDep,
) -> MoveResponse:
    """Move the player one cell.

    Moving into a wall or off the grid is not an error: the player stays put
    and `moved` is false. The first move starts the game clock; reaching the
    top row finishes the game.
    """
    game = _get_game(service, game_id)

    try:
        outcome = service.move(game_id, request.direction)
    except (GameFinishedError, GameBusyError) as e:
        raise _rule_error(e)

    return MoveResponse(
        moved=outcome.moved,
        position=_position(game.board.player),
        finished=outcome.finished,
        elapsed_ms=game.elapsed_ms(),
        elapsed=game.elapsed_display(),
    )


@router.get(
    "/{game_id}/solve",
    response_model=SolveResponse,
)
async def solve(game_id: str, service: GameServiceDep) -> SolveResponse:
    """Shortest route from the player's current position to the goal.

    Does not move the player. Directions use 0=up, 1=right, 2=down, 3=left.
    """
    game = _get_game(service, game_id)
    directions = service.solve(game_id)
    cells = path_cells(game.board, directions)

    return SolveResponse(
        directions=[int(d) for d in directions],
        length=len(directions),
        path=[_position(cell) for cell in cells],
    )


@router.post(
    "/{game_id}/autosolve",
    response_model=GameState,
    status_code=status.HTTP_202_ACCEPTED,
)
async def auto_solve(
    game_id: str,
    response: Response,
    service: GameServiceDep,
    wait: bool = Query(False, description="Return only after the replay has ended"),
) -> GameState:
    """Replay the solved route step by step.

    Manual moves are rejected while the replay runs. With `wait=true` the
    response carries the final state.
    """
    _get_game(service, game_id)

    try:
        game = service.start_auto_solve(game_id)
    except (GameFinishedError, GameBusyError) as e:
        raise _rule_error(e)

    if wait:
        game = await service.wait_auto_solve(game_id)
        response.status_code = status.HTTP_200_OK

    return _state(game)


@router.delete(
    "/{game_id}/autosolve",
    response_model=GameState,
)
async def cancel_auto_solve(game_id: str, service: GameServiceDep) -> GameState:
    """Stop a running replay before its next step."""
    _get_game(service, game_id)

    if not service.cancel_auto_solve(game_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No auto-solve in progress",
        )

    game = await service.wait_auto_solve(game_id)
    return _state(game)


@router.post(
    "/{game_id}/retry",
    response_model=GameState,
)
async def retry(game_id: str, service: GameServiceDep) -> GameState:
    """Start over on a fresh maze of the same size."""
    _get_game(service, game_id)
    return _state(service.retry_game(game_id))
