# Core Snake grid state and rules, independent from GUI/driver code.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import random

try:
    from .food_placement import place_food
except ImportError:
    from food_placement import place_food


Vector = tuple[int, int]

UP: Vector = (0, -1)
DOWN: Vector = (0, 1)
LEFT: Vector = (-1, 0)
RIGHT: Vector = (1, 0)
DIRECTIONS: dict[str, Vector] = {"up": UP, "down": DOWN, "left": LEFT, "right": RIGHT}
VALID_DIRECTIONS = frozenset(DIRECTIONS.values())

MIN_GRID_SIZE = 3


class EndReason(str, Enum):
    WALL_COLLISION = "wall"
    SELF_COLLISION = "self"
    BOARD_FULL = "board_full"


@dataclass
class SnakeConfig:
    """Session settings, fixed for the lifetime of a GridState."""
    grid_size: int = 20
    initial_speed: float = 5.0       # moves per second
    speed_increment: float = 0.3     # added after each food
    max_speed: float = 25.0
    food_retry_bound: int = 1000

    def __post_init__(self) -> None:
        if self.grid_size < MIN_GRID_SIZE:
            raise ValueError(f"grid_size must be >= {MIN_GRID_SIZE}, got {self.grid_size}.")
        if self.initial_speed <= 0:
            raise ValueError("initial_speed must be > 0.")
        if self.speed_increment < 0:
            raise ValueError("speed_increment must be >= 0.")
        if self.max_speed < self.initial_speed:
            raise ValueError("max_speed cannot be lower than initial_speed.")
        if self.food_retry_bound < 1:
            raise ValueError("food_retry_bound must be >= 1.")


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of a session handed to render/HUD collaborators."""
    snake_cells: tuple[Vector, ...]
    food: Vector | None
    score: int
    speed: float
    ended: bool
    end_reason: EndReason | None = None
    tick: int = 0

    @property
    def head(self) -> Vector:
        return self.snake_cells[0]

    @property
    def length(self) -> int:
        return len(self.snake_cells)


class GridState:
    """Pure grid state + tick transition (no timers, no drawing)."""
    def __init__(self, config: SnakeConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config if config is not None else SnakeConfig()
        self.rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        """Start a fresh session: centered head, neck to its left, heading right."""
        size = self.config.grid_size
        cx = size // 2
        cy = size // 2

        self.body: deque[Vector] = deque([(cx, cy), (cx - 1, cy)])   # head at index 0
        self.occupied: set[Vector] = set(self.body)                    # O(1) collision lookup
        self.direction: Vector = RIGHT
        self.queued_direction: Vector = RIGHT                          # applied next tick
        self.score = 0
        self.speed = float(self.config.initial_speed)
        self.pending_growth = 0
        self.ticks = 0
        self.running = True
        self.end_reason: EndReason | None = None
        self.food: Vector | None = None
        self.place_food()

    @property
    def head(self) -> Vector:
        return self.body[0]

    @property
    def neck(self) -> Vector | None:
        return self.body[1] if len(self.body) > 1 else None

    def occupies(self, cell: Vector) -> bool:
        return cell in self.occupied

    def _points_into_neck(self, v: Vector) -> bool:
        neck = self.neck
        if neck is None:
            return False
        hx, hy = self.head
        return (hx + v[0], hy + v[1]) == neck

    def request_direction(self, v: Vector) -> bool:
        """Queue a direction for the next tick; reversals and non-unit vectors are ignored."""
        try:
            v = tuple(v)
            if v not in VALID_DIRECTIONS:
                return False
        except TypeError:
            return False
        v = (int(v[0]), int(v[1]))
        if self._points_into_neck(v):
            return False
        self.queued_direction = v
        return True

    def place_food(self) -> bool:
        """Relocate food to a free cell. Returns False when the board is full."""
        cell = place_food(self.rng, self.config.grid_size, self.occupied, self.config.food_retry_bound)
        self.food = cell
        return cell is not None

    def _end(self, reason: EndReason) -> None:
        self.running = False
        self.end_reason = reason

    def advance(self) -> Snapshot:
        """Advance one tick and return the resulting snapshot."""
        if not self.running:
            return self.snapshot()

        # The queued value may predate a change of neck, so check it again here.
        if not self._points_into_neck(self.queued_direction):
            self.direction = self.queued_direction

        hx, hy = self.head
        new_head = (hx + self.direction[0], hy + self.direction[1])
        size = self.config.grid_size

        if not (0 <= new_head[0] < size and 0 <= new_head[1] < size):
            self._end(EndReason.WALL_COLLISION)
            return self.snapshot()

        # Tested against the full body: the current tail cell counts as occupied.
        if new_head in self.occupied:
            self._end(EndReason.SELF_COLLISION)
            return self.snapshot()

        self.body.appendleft(new_head)
        self.occupied.add(new_head)
        self.ticks += 1

        board_full = False
        if new_head == self.food:
            self.score += 1
            self.pending_growth += 1
            self.speed = min(self.config.max_speed, self.speed + self.config.speed_increment)
            board_full = not self.place_food()

        if self.pending_growth > 0:
            self.pending_growth -= 1
        else:
            old_tail = self.body.pop()
            self.occupied.discard(old_tail)

        if board_full:
            self._end(EndReason.BOARD_FULL)
        return self.snapshot()

    def snapshot(self) -> Snapshot:
        return Snapshot(
            snake_cells=tuple(self.body),
            food=self.food,
            score=self.score,
            speed=self.speed,
            ended=not self.running,
            end_reason=self.end_reason,
            tick=self.ticks,
        )
