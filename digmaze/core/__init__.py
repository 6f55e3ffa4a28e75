# Core module
from .cell import Cell, CellType, Direction, InvalidDirectionError
from .board import Board, MazeGenerationError, MazeParseError, MIN_SIZE
from .controller import MovementController, ReplayInProgressError
from .solver import solve, path_cells

__all__ = [
    "Cell",
    "CellType",
    "Direction",
    "InvalidDirectionError",
    "Board",
    "MazeGenerationError",
    "MazeParseError",
    "MIN_SIZE",
    "MovementController",
    "ReplayInProgressError",
    "solve",
    "path_cells",
]
