# Food placement policy: random draws with a bounded retry, then a free-cell scan.
from __future__ import annotations

from collections.abc import Collection
import random


def free_cells(grid_size: int, occupied: Collection[tuple[int, int]]) -> list[tuple[int, int]]:
    """All cells of the board not in ``occupied``, in row-major order."""
    return [(x, y) for y in range(grid_size) for x in range(grid_size) if (x, y) not in occupied]


def place_food(
    rng: random.Random,
    grid_size: int,
    occupied: Collection[tuple[int, int]],
    retry_bound: int = 1000,
) -> tuple[int, int] | None:
    """
    Pick a uniformly random cell that is not in ``occupied``.

    Draws at most ``retry_bound`` random cells. When every draw lands on the
    snake, the free cells are enumerated and one is chosen among them, so a
    nearly full board still resolves without looping. Returns None only when
    no free cell exists (board full).
    """
    if retry_bound < 1:
        raise ValueError("retry_bound must be >= 1")
    if len(occupied) >= grid_size * grid_size:
        return None

    for _ in range(retry_bound):
        cell = (rng.randrange(grid_size), rng.randrange(grid_size))
        if cell not in occupied:
            return cell

    candidates = free_cells(grid_size, occupied)
    if not candidates:
        return None
    return rng.choice(candidates)
