"""
Tests for ticker.py - scheduler backends and the GameDriver state machine.
"""

import asyncio
import random

import pytest

from game_logic import LEFT, UP, EndReason, GridState, SnakeConfig
from helpers import park_food
from ticker import AsyncioScheduler, DriverState, GameDriver, ManualScheduler, TkScheduler


class FakeWidget:
    """Stands in for a Tk widget's after/after_cancel."""

    def __init__(self):
        self.scheduled = {}
        self.cancelled = []
        self._next = 0

    def after(self, ms, callback):
        self._next += 1
        handle = f"after#{self._next}"
        self.scheduled[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle):
        self.cancelled.append(handle)
        self.scheduled.pop(handle, None)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def driver(grid, scheduler):
    return GameDriver(grid, scheduler)


class TestManualScheduler:
    """Virtual clock behaviour."""

    def test_callbacks_fire_in_due_order(self, scheduler):
        calls = []
        scheduler.call_later(30, lambda: calls.append("b"))
        scheduler.call_later(10, lambda: calls.append("a"))
        assert scheduler.advance_time(50) == 2
        assert calls == ["a", "b"]
        assert scheduler.now == 50

    def test_cancelled_callback_never_fires(self, scheduler):
        calls = []
        handle = scheduler.call_later(10, lambda: calls.append("x"))
        scheduler.cancel(handle)
        scheduler.cancel(handle)
        assert scheduler.pending == 0
        assert scheduler.advance_time(100) == 0
        assert calls == []

    def test_run_next_jumps_the_clock(self, scheduler):
        calls = []
        scheduler.call_later(200, lambda: calls.append(scheduler.now))
        assert scheduler.run_next() is True
        assert calls == [200]
        assert scheduler.run_next() is False

    def test_callbacks_scheduled_while_advancing_also_fire(self, scheduler):
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(10, lambda: calls.append("second"))

        scheduler.call_later(10, first)
        scheduler.advance_time(25)
        assert calls == ["first", "second"]


class TestTkScheduler:
    def test_delay_is_rounded_to_whole_milliseconds(self):
        widget = FakeWidget()
        tk_scheduler = TkScheduler(widget)
        handle = tk_scheduler.call_later(1000 / 5.3, lambda: None)
        assert widget.scheduled[handle][0] == 189
        tk_scheduler.cancel(handle)
        assert widget.cancelled == [handle]

    def test_driver_keeps_one_tk_timer(self, grid):
        widget = FakeWidget()
        driver = GameDriver(grid, TkScheduler(widget))
        driver.start()
        driver.start()
        assert len(widget.scheduled) == 1
        driver.stop()
        assert widget.scheduled == {}


class TestAsyncioScheduler:
    def test_driver_ticks_on_an_event_loop(self):
        config = SnakeConfig(grid_size=100, initial_speed=100.0, max_speed=100.0)
        seen = []

        async def scenario():
            grid = GridState(config, rng=random.Random(5))
            driver = GameDriver(grid, AsyncioScheduler(), on_tick=seen.append)
            driver.start()
            park_food(grid)
            await asyncio.sleep(0.1)
            driver.stop()
            return driver

        driver = asyncio.run(scenario())
        assert driver.state is DriverState.IDLE
        assert len(seen) >= 2
        assert seen[0].tick == 0


class TestGameDriver:
    """Driver state machine."""

    def test_new_driver_is_idle_and_unscheduled(self, driver, scheduler):
        assert driver.state is DriverState.IDLE
        assert scheduler.pending == 0
        assert driver.end_reason is None
        assert driver.final_score is None

    def test_start_resets_and_schedules_at_speed_period(self, driver, scheduler, grid):
        driver.start()
        assert driver.state is DriverState.RUNNING
        assert scheduler.pending == 1
        assert driver.period_ms == pytest.approx(200.0)

        park_food(grid)
        assert scheduler.advance_time(199) == 0
        assert scheduler.advance_time(1) == 1
        assert driver.snapshot().head == (11, 10)
        assert scheduler.pending == 1

    def test_ticks_follow_the_period(self, driver, scheduler, grid):
        driver.start()
        park_food(grid)
        assert scheduler.advance_time(1000) == 5
        assert grid.ticks == 5

    def test_speed_change_reschedules_from_next_tick(self, driver, scheduler, grid):
        driver.start()
        grid.food = (11, 10)
        scheduler.advance_time(200)
        assert driver.snapshot().score == 1
        park_food(grid)

        assert scheduler.pending == 1
        new_period = 1000 / 5.3
        assert driver.period_ms == pytest.approx(new_period)
        assert scheduler.advance_time(new_period - 1) == 0
        assert scheduler.advance_time(2) == 1

    def test_wall_collision_ends_and_stops_scheduling(self, driver, scheduler, grid):
        driver.start()
        park_food(grid)
        driver.request_direction(UP)
        scheduler.run_next()
        driver.request_direction(LEFT)
        while driver.state is DriverState.RUNNING:
            assert scheduler.run_next() is True

        assert driver.state is DriverState.ENDED
        assert driver.end_reason is EndReason.WALL_COLLISION
        assert driver.final_score == 0
        assert driver.snapshot().head == (0, 9)
        assert scheduler.pending == 0
        assert scheduler.advance_time(10_000) == 0

    def test_stop_is_idempotent_and_silent(self, driver, scheduler):
        driver.start()
        driver.stop()
        driver.stop()
        assert driver.state is DriverState.IDLE
        assert driver.end_reason is None
        assert scheduler.pending == 0

    def test_restart_after_end(self, driver, scheduler, grid):
        driver.start()
        park_food(grid)
        while driver.state is DriverState.RUNNING:
            scheduler.run_next()
        assert driver.state is DriverState.ENDED

        driver.start()
        assert driver.state is DriverState.RUNNING
        assert driver.snapshot().snake_cells == ((10, 10), (9, 10))
        assert driver.snapshot().ended is False
        assert scheduler.pending == 1

    def test_restart_while_running_never_doubles_timers(self, driver, scheduler):
        for _ in range(3):
            driver.start()
        assert scheduler.pending == 1

    def test_on_tick_receives_snapshots(self, grid, scheduler):
        seen = []
        driver = GameDriver(grid, scheduler, on_tick=seen.append)
        driver.start()
        park_food(grid)
        scheduler.run_next()
        assert [s.tick for s in seen] == [0, 1]
        assert seen[-1] is driver.snapshot()

    def test_on_tick_can_stop_the_session(self, grid, scheduler):
        driver = GameDriver(grid, scheduler)
        driver.on_tick = lambda snap: driver.stop() if snap.tick >= 2 else None
        driver.start()
        park_food(grid)
        scheduler.advance_time(5000)
        assert driver.state is DriverState.IDLE
        assert grid.ticks == 2
        assert scheduler.pending == 0

    def test_manual_tick_is_ignored_when_idle(self, driver, grid):
        snap = driver.tick()
        assert grid.ticks == 0
        assert snap.tick == 0

    def test_direction_requests_go_through_the_grid_rules(self, driver):
        driver.start()
        assert driver.request_direction(LEFT) is False
        assert driver.request_direction(UP) is True
