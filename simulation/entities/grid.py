# simulation/entities/grid.py

from simulation.utils.consts import GRID_SIZE


class Grid:
    """
    Represents the square playing field.
    Every cell is open; the only thing a robot can hit is the edge.
    """

    def __init__(self, size: int = GRID_SIZE):
        self.size = size

    def is_within_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def __repr__(self) -> str:
        return f"Grid({self.size}x{self.size})"
