"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from digmaze.services.game_service import GameService, get_game_service


# Type alias for cleaner route signatures
GameServiceDep = Annotated[GameService, Depends(get_game_service)]
