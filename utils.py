# Shared helpers: board encoding, text rendering, HUD formatting, autopilot and score stats.
from __future__ import annotations

import numpy as np

try:
    from .game_logic import DIRECTIONS, EndReason, GridState, Snapshot, Vector
except ImportError:
    from game_logic import DIRECTIONS, EndReason, GridState, Snapshot, Vector


EMPTY = 0
FOOD = 1
BODY = 2
HEAD = 3

END_MESSAGES = {
    EndReason.WALL_COLLISION: "You hit the wall!",
    EndReason.SELF_COLLISION: "You ran into yourself!",
    EndReason.BOARD_FULL: "The board is full!",
}


def encode_board(snapshot: Snapshot, grid_size: int) -> np.ndarray:
    """
    Board as a (grid_size, grid_size) int8 array indexed [y, x]:
    - 0: empty
    - 1: food
    - 2: snake body
    - 3: snake head
    """
    board = np.zeros((grid_size, grid_size), dtype=np.int8)

    if snapshot.food is not None:
        fx, fy = snapshot.food
        board[fy, fx] = FOOD

    for idx, (x, y) in enumerate(snapshot.snake_cells):
        board[y, x] = HEAD if idx == 0 else BODY

    return board


def render_board(snapshot: Snapshot, grid_size: int) -> str:
    """Text board: '.' empty, '*' food, 'o' body, '@' head. Row 0 is printed first."""
    glyphs = np.array([".", "*", "o", "@"])
    board = glyphs[encode_board(snapshot, grid_size)]
    return "\n".join(" ".join(row) for row in board)


def format_speed(speed: float) -> str:
    """Speed as the HUD shows it, one decimal place."""
    return f"{round(speed * 10) / 10:.1f}"


def end_message(reason: EndReason | None) -> str:
    if reason is None:
        return ""
    return END_MESSAGES[reason]


def _next_xy(cell: Vector, direction: Vector) -> Vector:
    return cell[0] + direction[0], cell[1] + direction[1]


def _is_collision(grid: GridState, cell: Vector) -> bool:
    size = grid.config.grid_size
    x, y = cell
    if x < 0 or x >= size or y < 0 or y >= size:
        return True
    return grid.occupies(cell)


def _free_area(grid: GridState, start: Vector, limit: int) -> int:
    """Count reachable free cells from ``start`` (flood fill, capped at ``limit``)."""
    if _is_collision(grid, start):
        return 0
    seen = {start}
    frontier = [start]
    while frontier and len(seen) < limit:
        cell = frontier.pop()
        for direction in DIRECTIONS.values():
            nxt = _next_xy(cell, direction)
            if nxt not in seen and not _is_collision(grid, nxt):
                seen.add(nxt)
                frontier.append(nxt)
    return len(seen)


def greedy_direction(grid: GridState) -> Vector:
    """
    Pick the next direction for the autopilot.

    Safe moves (in bounds, off the body, not into the neck) are ranked by
    the free area they leave reachable, then by Manhattan distance to the
    food. Falls back to the current direction when nothing is safe.
    """
    head = grid.head
    neck = grid.neck
    limit = len(grid.body) + 1
    best: Vector | None = None
    best_key: tuple[int, int] | None = None

    for direction in DIRECTIONS.values():
        nxt = _next_xy(head, direction)
        if nxt == neck or _is_collision(grid, nxt):
            continue
        area = _free_area(grid, nxt, limit)
        if grid.food is not None:
            dist = abs(grid.food[0] - nxt[0]) + abs(grid.food[1] - nxt[1])
        else:
            dist = 0
        key = (-min(area, limit), dist)
        if best_key is None or key < best_key:
            best_key = key
            best = direction

    return best if best is not None else grid.direction


def summarize_scores(scores: list[float]) -> dict[str, float]:
    """Mean/median/min/max/std and quartiles for a list of final scores."""
    if not scores:
        raise ValueError("scores cannot be empty")
    arr = np.asarray(scores, dtype=np.float32)
    return {
        "mean": float(arr.mean()),
        "median": float(np.median(arr)),
        "max": float(arr.max()),
        "min": float(arr.min()),
        "std": float(arr.std()),
        "p25": float(np.percentile(arr, 25)),
        "p75": float(np.percentile(arr, 75)),
    }
