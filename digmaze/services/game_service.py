"""Game service: in-memory maze games, the game clock and auto-solve replays."""

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from digmaze.config import MIN_DIMENSION, get_settings
from digmaze.core import Board, Direction, MovementController
from digmaze.core.cell import DirectionLike

logger = logging.getLogger(__name__)


class GameError(Exception):
    """Base exception for game service errors."""

    pass


class GameNotFoundError(GameError):
    """Exception raised for an unknown game id."""

    pass


class GameFinishedError(GameError):
    """Exception raised when acting on a game that is already won."""

    pass


class GameBusyError(GameError):
    """Exception raised when input arrives while an auto-solve replay runs."""

    pass


class InvalidGameSizeError(GameError, ValueError):
    """Exception raised for board dimensions outside the allowed range."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_elapsed(ms: int) -> str:
    """Format milliseconds as MM:SS.mmm."""
    minutes = ms // 1000 // 60
    seconds = ms // 1000 % 60
    return f"{minutes:02d}:{seconds:02d}.{ms % 1000:03d}"


@dataclass
class GameSession:
    """State of a single game."""

    id: str
    board: Board
    controller: MovementController
    created_at: datetime
    seed: Optional[int] = None
    started: bool = False
    finished: bool = False
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    auto_solve_task: Optional[asyncio.Task] = field(default=None, repr=False)
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)

    @property
    def is_solving(self) -> bool:
        """Whether an auto-solve replay is in flight."""
        return self.auto_solve_task is not None and not self.auto_solve_task.done()

    def elapsed_ms(self, now: Optional[datetime] = None) -> int:
        """Milliseconds since the first move, frozen once the game is finished."""
        if self.started_at is None:
            return 0
        end = self.ended_at or now or self.clock()
        return max(0, int((end - self.started_at).total_seconds() * 1000))

    def elapsed_display(self, now: Optional[datetime] = None) -> str:
        return format_elapsed(self.elapsed_ms(now))


@dataclass
class MoveOutcome:
    """Result of a manual move."""

    moved: bool
    finished: bool


class GameService:
    """
    Holds games in memory and applies the game rules around the core.

    Example usage:
        service = GameService()
        game = service.create_game(15, 15)
        service.move(game.id, Direction.UP)
        directions = service.solve(game.id)
    """

    def __init__(
        self,
        default_width: Optional[int] = None,
        default_height: Optional[int] = None,
        max_dimension: Optional[int] = None,
        autosolve_max_delay: Optional[float] = None,
        max_active_games: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        settings = get_settings()
        self.default_width = default_width or settings.default_width
        self.default_height = default_height or settings.default_height
        self.max_dimension = max_dimension or settings.max_dimension
        self.autosolve_max_delay = (
            settings.autosolve_max_delay
            if autosolve_max_delay is None
            else autosolve_max_delay
        )
        self.max_active_games = (
            settings.max_active_games if max_active_games is None else max_active_games
        )
        self._clock = clock
        self._games: dict[str, GameSession] = {}

    def _check_size(self, width: int, height: int) -> None:
        for name, value in (("width", width), ("height", height)):
            if not MIN_DIMENSION <= value <= self.max_dimension:
                raise InvalidGameSizeError(
                    f"{name} must be between {MIN_DIMENSION} and {self.max_dimension}, got {value}"
                )

    def _new_board(self, width: int, height: int, seed: Optional[int]) -> tuple[Board, MovementController]:
        rng = random.Random(seed)
        board = Board(width, height, rng=rng)
        controller = MovementController(board, rng=rng, max_delay=self.autosolve_max_delay)
        return board, controller

    def create_game(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> GameSession:
        """
        Generate a new maze and start a game on it.

        Args:
            width: Board width, defaults to settings.
            height: Board height, defaults to settings.
            seed: Optional seed for a reproducible maze.

        Raises:
            InvalidGameSizeError: If a dimension is out of range.
        """
        width = width if width is not None else self.default_width
        height = height if height is not None else self.default_height
        self._check_size(width, height)

        if self.max_active_games and len(self._games) >= self.max_active_games:
            oldest_id = next(iter(self._games))
            logger.info(f"Evicting game {oldest_id} (limit {self.max_active_games})")
            self.end_game(oldest_id)

        board, controller = self._new_board(width, height, seed)
        game = GameSession(
            id=f"game_{uuid.uuid4().hex[:12]}",
            board=board,
            controller=controller,
            created_at=self._clock(),
            seed=seed,
            clock=self._clock,
        )
        self._games[game.id] = game
        logger.info(f"Game {game.id} created ({width}x{height}, seed={seed})")
        return game

    def get_game(self, game_id: str) -> GameSession:
        """
        Get a game by id.

        Raises:
            GameNotFoundError: If the game does not exist.
        """
        game = self._games.get(game_id)
        if game is None:
            raise GameNotFoundError(f"Game not found: {game_id}")
        return game

    def list_games(self) -> list[GameSession]:
        return list(self._games.values())

    def end_game(self, game_id: str) -> None:
        """Remove a game, stopping any replay on it."""
        game = self.get_game(game_id)
        self._stop_replay(game)
        del self._games[game_id]

    def retry_game(self, game_id: str) -> GameSession:
        """Replace the maze with a fresh one of the same size and reset the clock."""
        game = self.get_game(game_id)
        self._stop_replay(game)

        board, controller = self._new_board(game.board.width, game.board.height, None)
        game.board = board
        game.controller = controller
        game.seed = None
        game.started = False
        game.finished = False
        game.started_at = None
        game.ended_at = None
        logger.info(f"Game {game.id} restarted with a new maze")
        return game

    def _record_progress(self, game: GameSession, reached_top: bool) -> None:
        if not game.started:
            game.started = True
            game.started_at = self._clock()
        if reached_top and not game.finished:
            game.finished = True
            game.ended_at = self._clock()
            logger.info(f"Game {game.id} finished in {game.elapsed_display()}")

    def _check_playable(self, game: GameSession) -> None:
        if game.finished:
            raise GameFinishedError(f"Game already finished: {game.id}")
        if game.is_solving:
            raise GameBusyError(f"Auto-solve in progress: {game.id}")

    def move(self, game_id: str, direction: DirectionLike) -> MoveOutcome:
        """
        Move the player one step.

        Raises:
            GameNotFoundError: If the game does not exist.
            GameFinishedError: If the game is already won.
            GameBusyError: If an auto-solve replay is running.
            InvalidDirectionError: If direction is not valid.
        """
        game = self.get_game(game_id)
        self._check_playable(game)

        before = game.board.player
        reached_top = game.controller.apply_move(direction)
        self._record_progress(game, reached_top)
        return MoveOutcome(moved=game.board.player is not before, finished=game.finished)

    def solve(self, game_id: str) -> list[Direction]:
        """Route from the player's current position to the goal."""
        return self.get_game(game_id).board.solve()

    def start_auto_solve(self, game_id: str) -> GameSession:
        """
        Schedule a replay of the solved route on the running event loop.

        Raises:
            GameFinishedError: If the game is already won.
            GameBusyError: If a replay is already running.
        """
        game = self.get_game(game_id)
        self._check_playable(game)

        async def on_step(direction: Direction, reached_top: bool) -> None:
            self._record_progress(game, reached_top)

        game.controller.begin()
        game.auto_solve_task = asyncio.create_task(
            game.controller.auto_solve(on_step=on_step),
            name=f"autosolve-{game.id}",
        )
        logger.info(f"Game {game.id} auto-solve started")
        return game

    async def wait_auto_solve(self, game_id: str) -> GameSession:
        """Wait for the current replay, if any, to end."""
        game = self.get_game(game_id)
        task = game.auto_solve_task
        if task is not None:
            await asyncio.wait({task})
        return game

    def cancel_auto_solve(self, game_id: str) -> bool:
        """
        Ask the running replay to stop before its next step.

        Returns:
            True if a replay was running.
        """
        game = self.get_game(game_id)
        if not game.is_solving:
            return False
        game.controller.cancel()
        logger.info(f"Game {game.id} auto-solve cancellation requested")
        return True

    def _stop_replay(self, game: GameSession) -> None:
        if game.is_solving:
            game.controller.cancel()
            game.auto_solve_task.cancel()
            # a task cancelled before its first step never reaches its finally
            game.controller.release()
        game.auto_solve_task = None

    async def shutdown(self) -> None:
        """Cancel every running replay."""
        tasks = [g.auto_solve_task for g in self._games.values() if g.is_solving]
        for game in self._games.values():
            self._stop_replay(game)
        if tasks:
            await asyncio.wait(tasks)
        logger.info(f"Stopped {len(tasks)} auto-solve replay(s)")


# Singleton instance
_game_service: Optional[GameService] = None


def get_game_service() -> GameService:
    """Get singleton game service."""
    global _game_service
    if _game_service is None:
        _game_service = GameService()
    return _game_service
