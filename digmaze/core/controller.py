"""
Movement controller.

Applies single validated moves and replays a solved route step by step with a
delay between steps. One delay is drawn per replay and reused for every step.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from .board import Board
from .cell import Direction, DirectionLike

logger = logging.getLogger(__name__)

StepCallback = Callable[[Direction, bool], Awaitable[None]]


class ReplayInProgressError(RuntimeError):
    """Exception raised when a replay is started while another one is running."""

    pass


class MovementController:
    """
    Drives the player on a board.

    Example usage:
        controller = MovementController(board, max_delay=0.05)

        reached_top = controller.apply_move("up")

        # Replays board.solve(); call controller.cancel() to stop early
        reached_top = await controller.auto_solve()
    """

    def __init__(
        self,
        board: Board,
        rng: Optional[random.Random] = None,
        max_delay: float = 0.1,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Args:
            board: Board to drive.
            rng: Random source for the replay delay.
            max_delay: Upper bound in seconds for the per-replay step delay.
            sleep: Awaitable used between replay steps. By default the pause
                ends early when the replay is cancelled.
        """
        self.board = board
        self.rng = rng if rng is not None else random.Random()
        self.max_delay = max_delay
        self._sleep = sleep
        self._cancelled = asyncio.Event()
        self._running = False
        self._reserved = False
        self.last_delay: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def apply_move(self, direction: DirectionLike) -> bool:
        """
        Move the player one step.

        Returns:
            True if the player is on the top row after the move.

        Raises:
            InvalidDirectionError: If direction is not a valid direction.
        """
        self.board.move_player(direction)
        return self.board.player_reached_top

    async def _pause(self, delay: float) -> None:
        if self._sleep is not None:
            await self._sleep(delay)
            return
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def begin(self) -> None:
        """
        Reserve the controller for a replay that will be awaited later.

        A cancel() issued after begin() stops the replay before its first
        step, even if auto_solve() has not started running yet.

        Raises:
            ReplayInProgressError: If another replay is running or reserved.
        """
        if self._running:
            raise ReplayInProgressError("Auto-solve already running")
        self._running = True
        self._reserved = True
        self._cancelled.clear()

    def release(self) -> None:
        """Mark the controller idle."""
        self._running = False
        self._reserved = False

    def cancel(self) -> None:
        """Stop a running replay before its next step."""
        self._cancelled.set()

    async def auto_solve(self, on_step: Optional[StepCallback] = None) -> bool:
        """
        Solve from the current position and replay the route.

        Args:
            on_step: Awaited after every applied step with the direction and
                whether the top row was reached.

        Returns:
            True if the replay reached the top row.

        Raises:
            ReplayInProgressError: If another replay is running.
        """
        if not self._reserved:
            self.begin()
        self._reserved = False
        try:
            directions = self.board.solve()
            delay = self.rng.random() * self.max_delay
            self.last_delay = delay
            logger.debug(f"Replaying {len(directions)} steps with {delay:.3f}s delay")

            reached_top = self.board.player_reached_top
            for i, direction in enumerate(directions):
                if self._cancelled.is_set():
                    logger.info(f"Auto-solve cancelled after {i} of {len(directions)} steps")
                    break

                reached_top = self.apply_move(direction)
                if on_step is not None:
                    await on_step(direction, reached_top)
                if reached_top:
                    break

                await self._pause(delay)

            return reached_top
        finally:
            self.release()
