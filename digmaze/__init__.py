"""Dig Maze: perfect maze generation, player movement and BFS solving."""

__version__ = "1.0.0"
