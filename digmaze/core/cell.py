"""
Grid cells and direction encoding.

Direction codes are shared by neighbor lookup, the solver output and the
HTTP API:
    0 = up
    1 = right
    2 = down
    3 = left
"""

from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .board import Board


class InvalidDirectionError(ValueError):
    """Exception raised for a direction outside the four valid codes."""

    pass


class Direction(IntEnum):
    """Movement directions, in neighbor order."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def delta(self) -> tuple[int, int]:
        """Get (dx, dy) for this direction."""
        deltas = {
            Direction.UP: (0, -1),
            Direction.RIGHT: (1, 0),
            Direction.DOWN: (0, 1),
            Direction.LEFT: (-1, 0),
        }
        return deltas[self]

    @property
    def opposite(self) -> "Direction":
        return Direction((self + 2) % 4)

    @classmethod
    def coerce(cls, value: Union["Direction", int, str]) -> "Direction":
        """
        Convert a direction code, numeric string or name to a Direction.

        Raises:
            InvalidDirectionError: If the value is not one of the four directions.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidDirectionError(f"invalid dir: {value!r}")
        if isinstance(value, str):
            name = value.strip()
            if name.isdigit():
                value = int(name)
            else:
                try:
                    return cls[name.upper()]
                except KeyError:
                    raise InvalidDirectionError(f"invalid dir: {value!r}") from None
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise InvalidDirectionError(f"invalid dir: {value!r}") from None


DirectionLike = Union[Direction, int, str]


class CellType(Enum):
    """Types of cells in the grid."""
    PATH = 0
    WALL = 1
    PLAYER = 2

    @property
    def char(self) -> str:
        """Character used for text rendering."""
        chars = {
            CellType.PATH: ".",
            CellType.WALL: "X",
            CellType.PLAYER: "@",
        }
        return chars[self]


class Cell:
    """
    A single grid position.

    Neighbors are resolved lazily through the owning board, so a cell never
    caches another cell. The board reference is only used for lookups.
    """

    __slots__ = ("board", "x", "y", "type")

    def __init__(self, board: "Board", x: int, y: int, type: CellType = CellType.WALL):
        self.board = board
        self.x = x
        self.y = y
        self.type = type

    def __repr__(self) -> str:
        return f"Cell(x={self.x}, y={self.y}, type={self.type.name})"

    def dig(self) -> "Cell":
        """Turn this cell into a path and return it."""
        self.type = CellType.PATH
        return self

    def get_neighbor_by_dir(self, direction: DirectionLike) -> Optional["Cell"]:
        """
        Get the neighbor in a direction.

        Raises:
            InvalidDirectionError: If direction is not 0..3 (or a direction name).
        """
        direction = Direction.coerce(direction)
        if direction == Direction.UP:
            return self.top
        if direction == Direction.RIGHT:
            return self.right
        if direction == Direction.DOWN:
            return self.bottom
        return self.left

    @property
    def top(self) -> Optional["Cell"]:
        return self.board.get_cell(self.x, self.y - 1)

    @property
    def right(self) -> Optional["Cell"]:
        return self.board.get_cell(self.x + 1, self.y)

    @property
    def bottom(self) -> Optional["Cell"]:
        return self.board.get_cell(self.x, self.y + 1)

    @property
    def left(self) -> Optional["Cell"]:
        return self.board.get_cell(self.x - 1, self.y)

    @property
    def around(self) -> list[Optional["Cell"]]:
        """Neighbors as [top, right, bottom, left]; off-grid entries are None."""
        return [self.top, self.right, self.bottom, self.left]

    @property
    def wall_count(self) -> int:
        """Number of in-bounds neighbors that are walls."""
        return sum(1 for c in self.around if c is not None and c.is_wall)

    @property
    def is_path(self) -> bool:
        return self.type == CellType.PATH

    @property
    def is_wall(self) -> bool:
        return self.type == CellType.WALL

    @property
    def is_player(self) -> bool:
        return self.type == CellType.PLAYER

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        """Convert position to dictionary."""
        return {"x": self.x, "y": self.y}
