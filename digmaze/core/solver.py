"""
Breadth-first shortest path from the player to the goal.

Neighbors are expanded in [up, right, down, left] order and the first visit of
a cell wins, so among equally short routes the solver always returns the one
that prefers up, then right, then down, then left at the first step where they
differ.
"""

from collections import deque
from typing import TYPE_CHECKING, Iterable, Optional

from .cell import Cell, Direction, DirectionLike

if TYPE_CHECKING:
    from .board import Board


def solve(board: "Board") -> list[Direction]:
    """
    Find the shortest route from the player to the goal.

    Args:
        board: Board with player and goal set.

    Returns:
        Directions to apply in order from the player's current cell.
        Empty if the player is on the goal or the goal is unreachable.
    """
    goal = board.goal
    queue: deque[tuple[Optional[Cell], Cell, Optional[Direction]]] = deque(
        [(None, board.player, None)]
    )
    visited: dict[Cell, tuple[Optional[Cell], Optional[Direction]]] = {}

    while queue:
        prev, cell, direction = queue.popleft()
        if cell in visited:
            continue
        visited[cell] = (prev, direction)
        if cell is goal:
            break

        for i, neighbor in enumerate(cell.around):
            if neighbor is not None and neighbor.is_path and neighbor not in visited:
                queue.append((cell, neighbor, Direction(i)))

    if goal not in visited:
        return []

    directions: list[Direction] = []
    cell = goal
    while True:
        prev, direction = visited[cell]
        if prev is None:
            break
        directions.append(direction)
        cell = prev

    directions.reverse()
    return directions


def path_cells(board: "Board", directions: Iterable[DirectionLike]) -> list[Cell]:
    """
    Follow directions from the player's cell without moving the player.

    Returns:
        The cells visited, starting with the player's cell. Stops early at the
        first step that would leave the grid or enter a wall.
    """
    cell = board.player
    cells = [cell]
    for direction in directions:
        neighbor = cell.get_neighbor_by_dir(direction)
        if neighbor is None or neighbor.is_wall:
            break
        cell = neighbor
        cells.append(cell)
    return cells
