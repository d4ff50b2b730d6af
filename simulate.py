# Headless Snake sessions driven by the autopilot, with a score report and optional histogram.
from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
import random
from typing import Callable

from matplotlib.figure import Figure

try:
    from .game_logic import EndReason, GridState, SnakeConfig
    from .ticker import DriverState, GameDriver, ManualScheduler
    from .utils import greedy_direction, render_board, summarize_scores
except ImportError:
    from game_logic import EndReason, GridState, SnakeConfig
    from ticker import DriverState, GameDriver, ManualScheduler
    from utils import greedy_direction, render_board, summarize_scores


@dataclass
class GameResult:
    score: int
    length: int
    ticks: int
    final_speed: float
    end_reason: EndReason | None   # None when the tick cap stopped the session
    elapsed_ms: float              # virtual time spent on the scheduler clock


def play_one(grid: GridState, max_ticks: int) -> GameResult:
    """Play one session on a virtual clock, steering with the autopilot before each tick."""
    scheduler = ManualScheduler()
    driver = GameDriver(grid, scheduler)
    driver.start()

    while driver.state is DriverState.RUNNING and grid.ticks < max_ticks:
        driver.request_direction(greedy_direction(grid))
        if not scheduler.run_next():
            break

    if driver.state is DriverState.RUNNING:
        driver.stop()

    snap = driver.snapshot()
    return GameResult(
        score=snap.score,
        length=snap.length,
        ticks=snap.tick,
        final_speed=snap.speed,
        end_reason=driver.end_reason,
        elapsed_ms=scheduler.now,
    )


def run_games(
    games: int,
    config: SnakeConfig,
    seed: int | None = None,
    max_ticks: int = 5000,
    on_result: Callable[[int, GridState, GameResult], None] | None = None,
) -> list[GameResult]:
    """Play ``games`` sessions on one grid (reset between games) and return their results."""
    if games <= 0:
        raise ValueError("games must be > 0")
    if max_ticks <= 0:
        raise ValueError("max_ticks must be > 0")

    grid = GridState(config, rng=random.Random(seed))
    results: list[GameResult] = []
    for game in range(1, games + 1):
        result = play_one(grid, max_ticks)
        results.append(result)
        if on_result is not None:
            on_result(game, grid, result)
    return results


def print_report(results: list[GameResult]) -> None:
    stats = summarize_scores([r.score for r in results])
    reasons: dict[str, int] = {}
    for result in results:
        key = result.end_reason.value if result.end_reason else "tick_limit"
        reasons[key] = reasons.get(key, 0) + 1

    print("=" * 40)
    print("SIMULATION RESULTS")
    print("=" * 40)
    print(f"{'Metric':<20} {'Score':>15}")
    print("-" * 40)
    for name, key in (
        ("Mean score", "mean"),
        ("Median score", "median"),
        ("Max score", "max"),
        ("Min score", "min"),
        ("Std dev", "std"),
        ("25th percentile", "p25"),
        ("75th percentile", "p75"),
    ):
        print(f"{name:<20} {stats[key]:>15.2f}")
    print("=" * 40)
    print("End reasons: " + ", ".join(f"{k}={v}" for k, v in sorted(reasons.items())))


def plot_scores(results: list[GameResult], path: str) -> None:
    """Write a histogram of final scores to ``path``."""
    scores = [r.score for r in results]
    # Bare Figure: no pyplot state or backend switch involved.
    fig = Figure(figsize=(8, 4.5))
    ax = fig.subplots()
    ax.hist(scores, bins=max(1, min(30, len(set(scores)))), color="#55c16a", edgecolor="#053216")
    ax.set_title("Final score distribution")
    ax.set_xlabel("Score")
    ax.set_ylabel("Games")
    ax.grid(alpha=0.25)
    fig.tight_layout()
    fig.savefig(path)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run headless Snake sessions with the autopilot")
    parser.add_argument("--games", type=int, default=20, help="Number of sessions to play")
    parser.add_argument("--grid-size", type=int, default=20, help="Cells per row/column")
    parser.add_argument("--initial-speed", type=float, default=5.0, help="Starting moves per second")
    parser.add_argument("--speed-increment", type=float, default=0.3, help="Speed added per food")
    parser.add_argument("--max-speed", type=float, default=25.0, help="Speed cap")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for food placement")
    parser.add_argument("--max-ticks", type=int, default=5000, help="Tick cap per session")
    parser.add_argument("--show-board", action="store_true", help="Print the final board of each session")
    parser.add_argument("--plot", default=None, help="Save a score histogram to this path")
    parser.add_argument("--verbose", action="store_true", help="Log driver lifecycle events")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    config = SnakeConfig(
        grid_size=args.grid_size,
        initial_speed=args.initial_speed,
        speed_increment=args.speed_increment,
        max_speed=args.max_speed,
    )

    print(f"Running {args.games} sessions on a {config.grid_size}x{config.grid_size} grid...")

    def report(game: int, grid: GridState, result: GameResult) -> None:
        if args.show_board:
            reason = result.end_reason.value if result.end_reason else "tick_limit"
            print(f"\nGame {game}: score={result.score} ticks={result.ticks} end={reason}")
            print(render_board(grid.snapshot(), config.grid_size))
        elif game % 10 == 0 or game == args.games:
            print(f"Game {game}/{args.games}", end="\r", flush=True)

    results = run_games(args.games, config, seed=args.seed, max_ticks=args.max_ticks, on_result=report)
    print()

    print_report(results)
    if args.plot:
        plot_scores(results, args.plot)
        print(f"Saved score histogram: {args.plot}")


if __name__ == "__main__":
    main()
