"""Shared assertions and setup helpers for the test suite."""


def is_connected(cells):
    """Every consecutive pair of cells is 4-adjacent."""
    return all(abs(ax - bx) + abs(ay - by) == 1 for (ax, ay), (bx, by) in zip(cells, cells[1:]))


def park_food(grid, cell=None):
    """Move food to a cell out of the snake's way (bottom-right corner by default)."""
    size = grid.config.grid_size
    grid.food = cell if cell is not None else (size - 1, size - 1)
