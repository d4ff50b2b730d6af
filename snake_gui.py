# Manual Snake player GUI: draws snapshots and forwards key presses to the driver.
from __future__ import annotations

import tkinter as tk

# Support both package imports and running this file directly.
try:
    from .game_logic import DOWN, LEFT, RIGHT, UP, GridState, SnakeConfig, Snapshot
    from .ticker import DriverState, GameDriver, TkScheduler
    from .utils import end_message, format_speed
except ImportError:
    from game_logic import DOWN, LEFT, RIGHT, UP, GridState, SnakeConfig, Snapshot
    from ticker import DriverState, GameDriver, TkScheduler
    from utils import end_message, format_speed


KEY_DIRECTIONS = {
    "Up": UP,
    "Down": DOWN,
    "Left": LEFT,
    "Right": RIGHT,
    "w": UP,
    "s": DOWN,
    "a": LEFT,
    "d": RIGHT,
}
START_KEYS = ("space", "Return")


class SnakeApp:
    """Tkinter presentation layer for GameDriver."""
    BG = "#072617"
    SIDEBAR_BG = "#05200f"
    GRID_COLOR = "#0b3f1b"
    BORDER_COLOR = "#053216"
    SNAKE_HEAD = "#adebad"
    SNAKE_BODY = "#55c16a"
    FOOD_COLOR = "#dfffe6"
    TEXT_PRIMARY = "#e6f7ea"
    TEXT_MUTED = "#8fbf9a"
    ACCENT = "#55c16a"

    def __init__(self, root: tk.Tk, config: SnakeConfig | None = None, cell_size: int = 24) -> None:
        self.root = root
        self.root.title("Snake")
        self.root.configure(bg=self.BG)

        self.config = config if config is not None else SnakeConfig()
        self.cell_size = cell_size
        self.driver = GameDriver(GridState(self.config), TkScheduler(self.root), on_tick=self.draw)

        self._build_layout()
        self._bind_keys()
        self.draw(self.driver.snapshot())

    def _build_layout(self) -> None:
        """Create game canvas + right sidebar with score/speed and the start button."""
        side = self.config.grid_size * self.cell_size
        container = tk.Frame(self.root, bg=self.BG)
        container.pack(padx=16, pady=16)

        self.canvas = tk.Canvas(container, width=side, height=side, bg=self.BG, highlightthickness=0, bd=0)
        self.canvas.grid(row=0, column=0, padx=(0, 16))

        sidebar = tk.Frame(container, bg=self.SIDEBAR_BG)
        sidebar.grid(row=0, column=1, sticky="ns")

        self.score_var = tk.StringVar(value="Score: 0")
        self.speed_var = tk.StringVar(value=f"Speed: {format_speed(self.config.initial_speed)}")
        self.state_var = tk.StringVar(value="State: Ready")

        for var in (self.score_var, self.speed_var, self.state_var):
            tk.Label(
                sidebar,
                textvariable=var,
                fg=self.TEXT_PRIMARY,
                bg=self.SIDEBAR_BG,
                font=("Helvetica", 12),
                anchor="w",
            ).pack(fill="x", padx=12, pady=4)

        tk.Button(
            sidebar,
            text="Start",
            command=self.start_game,
            fg="#072617",
            bg=self.ACCENT,
            activebackground=self.SNAKE_HEAD,
            bd=0,
            relief="flat",
            font=("Helvetica", 12, "bold"),
            padx=12,
            pady=8,
        ).pack(fill="x", padx=12, pady=(12, 4))

        tk.Label(
            sidebar,
            text="Move: Arrow keys / WASD\nStart: Space / Enter",
            fg=self.TEXT_MUTED,
            bg=self.SIDEBAR_BG,
            justify="left",
            font=("Helvetica", 10),
        ).pack(anchor="w", padx=12, pady=(4, 12))

    def _bind_keys(self) -> None:
        for key, direction in KEY_DIRECTIONS.items():
            self.root.bind(f"<{key}>" if len(key) > 1 else key, lambda _e, d=direction: self.driver.request_direction(d))
        for key in START_KEYS:
            self.root.bind(f"<{key}>", lambda _e: self._start_if_idle())

    def _start_if_idle(self) -> None:
        if self.driver.state is not DriverState.RUNNING:
            self.start_game()

    def start_game(self) -> None:
        self.driver.start()

    def draw(self, snap: Snapshot) -> None:
        """Render board, food, snake, HUD labels and the game-over overlay."""
        self.canvas.delete("all")
        size = self.config.grid_size
        cell = self.cell_size
        side = size * cell

        for i in range(size + 1):
            pos = i * cell
            self.canvas.create_line(0, pos, side, pos, fill=self.GRID_COLOR)
            self.canvas.create_line(pos, 0, pos, side, fill=self.GRID_COLOR)
        self.canvas.create_rectangle(1, 1, side - 1, side - 1, outline=self.BORDER_COLOR, width=2)

        if snap.food is not None:
            self._draw_cell(snap.food, self.FOOD_COLOR, 4)
        for idx, part in enumerate(snap.snake_cells):
            # Head is drawn slightly larger.
            self._draw_cell(part, self.SNAKE_HEAD if idx == 0 else self.SNAKE_BODY, 3 if idx == 0 else 5)

        self.score_var.set(f"Score: {snap.score}")
        self.speed_var.set(f"Speed: {format_speed(snap.speed)}")

        if snap.ended:
            self.state_var.set("State: Game Over")
            self.canvas.create_rectangle(0, 0, side, side, fill="#000000", stipple="gray50", outline="")
            self.canvas.create_text(
                side // 2,
                side // 2 - 14,
                text="Game Over",
                fill=self.TEXT_PRIMARY,
                font=("Helvetica", 22, "bold"),
            )
            self.canvas.create_text(
                side // 2,
                side // 2 + 18,
                text=f"{end_message(snap.end_reason)} Score: {snap.score}",
                fill=self.TEXT_MUTED,
                font=("Helvetica", 12),
            )
        elif self.driver.state is DriverState.RUNNING:
            self.state_var.set("State: Running")

    def _draw_cell(self, cell: tuple[int, int], color: str, inset: int) -> None:
        x, y = cell
        c = self.cell_size
        self.canvas.create_rectangle(
            x * c + inset, y * c + inset, (x + 1) * c - inset, (y + 1) * c - inset, fill=color, outline=""
        )


def run_player_gui() -> None:
    """Launch the manual Snake player interface."""
    root = tk.Tk()
    SnakeApp(root)
    root.mainloop()


if __name__ == "__main__":
    run_player_gui()
