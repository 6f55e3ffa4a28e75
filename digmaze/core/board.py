"""
Maze board: cell storage, maze generation and player movement.

The generator is a randomized growing-tree variant. Corridors are extended
greedily from the last dug cell; a cell is kept as a branch point when it
still had another direction available. A wall cell may only be dug while it
has more than two wall neighbors, which keeps every corridor one cell wide and
the maze free of loops.

Layout for a width x height board (origin at the top-left):
    - the seed is (width - 2, 1)
    - the goal is (width - 2, 0), on the top border
    - the start is on the bottom border, below the first path cell of row
      height - 2

Text format (used by ``Board.from_text`` and ``Board.render``):
    X = Wall
    . = Path (space is also accepted when parsing)
    S = Start
    E = Goal (exit)
    @ = Player
"""

import logging
import random
from typing import Optional

from .cell import Cell, CellType, Direction, DirectionLike
from . import solver

logger = logging.getLogger(__name__)

MIN_SIZE = 3


class MazeGenerationError(RuntimeError):
    """Exception raised when a generated maze breaks its layout guarantees."""

    pass


class MazeParseError(ValueError):
    """Exception raised when a text layout cannot be turned into a board."""

    pass


class Board:
    """
    A rectangular maze with a single player token.

    Example usage:
        board = Board(15, 15)
        board.move_player_up()
        directions = board.solve()
    """

    def __init__(self, width: int, height: int, rng: Optional[random.Random] = None):
        """
        Create a board and generate its maze.

        Args:
            width: Number of columns, at least MIN_SIZE.
            height: Number of rows, at least MIN_SIZE.
            rng: Random source for generation. Pass a seeded random.Random
                for reproducible mazes.
        """
        self._check_dimensions(width, height)
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else random.Random()
        self.cells: list[Cell] = []
        self.start: Optional[Cell] = None
        self.goal: Optional[Cell] = None
        self.player: Optional[Cell] = None
        self.init()

    @staticmethod
    def _check_dimensions(width: int, height: int) -> None:
        for name, value in (("width", width), ("height", height)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < MIN_SIZE:
                raise ValueError(f"{name} must be at least {MIN_SIZE}, got {value}")

    def _allocate(self) -> None:
        self.cells = [
            Cell(self, x, y, CellType.WALL)
            for y in range(self.height)
            for x in range(self.width)
        ]
        self.start = None
        self.goal = None
        self.player = None

    def init(self) -> None:
        """Generate the maze, open the goal and place the player on the start."""
        self._allocate()

        next_cell: Optional[Cell] = None
        points = [self.get_cell(self.width - 2, 1).dig()]

        while next_cell is not None or points:
            if next_cell is not None:
                cell = next_cell
            else:
                # swap-remove a random branch point
                i = self.rng.randrange(len(points))
                points[i], points[-1] = points[-1], points[i]
                cell = points.pop()

            targets = [
                c for c in cell.around
                if c is not None and c.is_wall and 2 < c.wall_count
            ]

            if not targets:
                next_cell = None
                continue

            next_cell = self.rng.choice(targets)
            next_cell.dig()

            if 1 < len(targets):
                points.append(cell)

        self.goal = self.get_cell(self.width - 2, 0)
        self.goal.dig()

        self.start = self._find_start()
        self.start.dig()
        self.set_player(self.start)

        logger.debug(
            f"Generated {self.width}x{self.height} maze with "
            f"{sum(1 for c in self.cells if not c.is_wall)} open cells, "
            f"start={self.start.position} goal={self.goal.position}"
        )

    def _find_start(self) -> Cell:
        """Find the bottom-border opening below the first path cell of row height - 2."""
        y = self.height - 2
        for x in range(1, self.width - 1):
            cell = self.get_cell(x, y)
            if cell.is_path:
                return cell.bottom
        raise MazeGenerationError(f"No path cell on row {y} to open the start below")

    @classmethod
    def from_text(cls, text: str) -> "Board":
        """
        Build a board from a text layout instead of generating one.

        Args:
            text: Multi-line grid using X . S E @ (see module docstring).

        Returns:
            Board with start, goal and player set. The player defaults to the start.

        Raises:
            MazeParseError: If the layout is empty, has invalid characters or is
                missing a unique start or goal.
        """
        if not text or not text.strip():
            raise MazeParseError("Maze text is empty")

        lines = text.strip("\n").split("\n")
        height = len(lines)
        width = max(len(line) for line in lines)
        if width < MIN_SIZE or height < MIN_SIZE:
            raise MazeParseError(
                f"Maze must be at least {MIN_SIZE}x{MIN_SIZE}, got {width}x{height}"
            )

        board = cls.__new__(cls)
        board.width = width
        board.height = height
        board.rng = random.Random()
        board._allocate()

        markers: dict[str, Optional[Cell]] = {"S": None, "E": None, "@": None}
        for y, line in enumerate(lines):
            for x, char in enumerate(line):
                cell = board.get_cell(x, y)
                if char == "X":
                    continue
                if char in (".", " "):
                    cell.dig()
                elif char in markers:
                    if markers[char] is not None:
                        raise MazeParseError(
                            f"Multiple '{char}' markers found: first at "
                            f"{markers[char].position}, second at ({x}, {y})"
                        )
                    markers[char] = cell.dig()
                else:
                    raise MazeParseError(
                        f"Invalid character '{char}' at position ({x}, {y})"
                    )

        if markers["S"] is None:
            raise MazeParseError("Maze must have a start position (S)")
        if markers["E"] is None:
            raise MazeParseError("Maze must have a goal position (E)")

        board.start = markers["S"]
        board.goal = markers["E"]
        board.set_player(markers["@"] or board.start)
        return board

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        """Get the cell at (x, y), or None outside the grid."""
        if x < 0 or self.width <= x or y < 0 or self.height <= y:
            return None
        return self.cells[y * self.width + x]

    def set_player(self, cell: Cell) -> None:
        """Move the player token to cell without checking adjacency."""
        if self.player is not None:
            self.player.type = CellType.PATH
        cell.type = CellType.PLAYER
        self.player = cell

    def _move_to(self, cell: Optional[Cell]) -> bool:
        if cell is not None and cell.is_path:
            self.set_player(cell)
            return True
        return False

    def move_player_up(self) -> bool:
        return self._move_to(self.player.top)

    def move_player_right(self) -> bool:
        return self._move_to(self.player.right)

    def move_player_down(self) -> bool:
        return self._move_to(self.player.bottom)

    def move_player_left(self) -> bool:
        return self._move_to(self.player.left)

    def move_player(self, direction: DirectionLike) -> bool:
        """
        Move the player one step. Walls and the grid edge are silent no-ops.

        Returns:
            True if the player moved.

        Raises:
            InvalidDirectionError: If direction is not a valid direction.
        """
        moves = {
            Direction.UP: self.move_player_up,
            Direction.RIGHT: self.move_player_right,
            Direction.DOWN: self.move_player_down,
            Direction.LEFT: self.move_player_left,
        }
        return moves[Direction.coerce(direction)]()

    def solve(self) -> list[Direction]:
        """Shortest list of directions from the player to the goal."""
        return solver.solve(self)

    @property
    def player_reached_top(self) -> bool:
        """Win condition: the player stands on the top row."""
        return self.player is not None and self.player.y == 0

    def render(self, show_player: bool = True) -> list[str]:
        """
        Render the grid as text rows.

        Args:
            show_player: Mark the player with '@'. When False, the player's cell
                is drawn as the path (or start/goal) underneath it.
        """
        rows = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                cell = self.cells[y * self.width + x]
                if cell.is_player and show_player:
                    row.append(CellType.PLAYER.char)
                elif cell is self.start:
                    row.append("S")
                elif cell is self.goal:
                    row.append("E")
                elif cell.is_wall:
                    row.append(CellType.WALL.char)
                else:
                    row.append(CellType.PATH.char)
            rows.append("".join(row))
        return rows

    def visualize(self) -> str:
        """ASCII visualization of the board."""
        return "\n".join(self.render())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "start": self.start.to_dict() if self.start else None,
            "goal": self.goal.to_dict() if self.goal else None,
            "player": self.player.to_dict() if self.player else None,
            "grid": self.render(),
        }


if __name__ == "__main__":
    board = Board(15, 15)
    print(board.visualize())

    directions = board.solve()
    print(f"\nSolution ({len(directions)} steps):")
    print(" ".join(d.name.lower() for d in directions))
