# Tick scheduling: pluggable timer backends and the driver state machine around GridState.
from __future__ import annotations

import asyncio
from enum import Enum
import heapq
import itertools
import logging
from typing import Any, Callable, Protocol

try:
    from .game_logic import EndReason, GridState, Snapshot, Vector
except ImportError:
    from game_logic import EndReason, GridState, Snapshot, Vector


logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class TkScheduler:
    """Schedules callbacks on a Tk widget's event loop."""
    def __init__(self, widget) -> None:
        self.widget = widget

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> str:
        # Tk only accepts whole milliseconds.
        return self.widget.after(max(1, int(round(delay_ms))), callback)

    def cancel(self, handle: str) -> None:
        self.widget.after_cancel(handle)


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop (the running one by default)."""
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop if loop is not None else asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class ManualScheduler:
    """
    Virtual-clock scheduler for tests and headless runs.

    Nothing fires on its own: callers move time forward with ``advance_time``
    or jump straight to the next due callback with ``run_next``.
    """
    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int]] = []
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._ids = itertools.count(1)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        heapq.heappush(self._queue, (self.now + delay_ms, handle))
        return handle

    def cancel(self, handle: int) -> None:
        self._callbacks.pop(handle, None)

    def _pop_due(self, until: float | None) -> tuple[float, Callable[[], None]] | None:
        while self._queue:
            due, handle = self._queue[0]
            if handle not in self._callbacks:
                heapq.heappop(self._queue)
                continue
            if until is not None and due > until:
                return None
            heapq.heappop(self._queue)
            return due, self._callbacks.pop(handle)
        return None

    def run_next(self) -> bool:
        """Jump to the earliest pending callback and run it. Returns False if none is pending."""
        item = self._pop_due(None)
        if item is None:
            return False
        due, callback = item
        self.now = max(self.now, due)
        callback()
        return True

    def advance_time(self, ms: float) -> int:
        """Move the clock forward by ``ms``, running everything that falls due. Returns the run count."""
        target = self.now + ms
        fired = 0
        while True:
            item = self._pop_due(target)
            if item is None:
                break
            due, callback = item
            self.now = max(self.now, due)
            callback()
            fired += 1
        self.now = target
        return fired


class DriverState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class GameDriver:
    """Runs GridState.advance() on a timer whose period follows the current speed."""
    def __init__(
        self,
        grid: GridState,
        scheduler: Scheduler,
        on_tick: Callable[[Snapshot], None] | None = None,
    ) -> None:
        self.grid = grid
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.state = DriverState.IDLE
        self._handle: Any = None
        self._period_ms: float | None = None
        self._last: Snapshot = grid.snapshot()

    @property
    def period_ms(self) -> float:
        return 1000.0 / self.grid.speed

    @property
    def end_reason(self) -> EndReason | None:
        return self._last.end_reason if self.state is DriverState.ENDED else None

    @property
    def final_score(self) -> int | None:
        return self._last.score if self.state is DriverState.ENDED else None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def snapshot(self) -> Snapshot:
        """Latest observed state; render/HUD read this and never touch the grid directly."""
        return self._last

    def request_direction(self, v: Vector) -> bool:
        return self.grid.request_direction(v)

    def _cancel(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None

    def _arm(self) -> None:
        """Replace any pending timer with one at the current period."""
        self._cancel()
        period = self.period_ms
        if self._period_ms is not None and period != self._period_ms:
            logger.debug("Tick period changed: %.1f ms -> %.1f ms", self._period_ms, period)
        self._period_ms = period
        self._handle = self.scheduler.call_later(period, self._on_timer)

    def start(self) -> None:
        """Reset the grid and begin ticking (also restarts a running session)."""
        self._cancel()
        self.grid.reset()
        self._last = self.grid.snapshot()
        self._period_ms = None
        self.state = DriverState.RUNNING
        logger.info("Session started (grid=%d, speed=%.1f)", self.grid.config.grid_size, self.grid.speed)
        self._notify()
        self._arm()

    def stop(self) -> None:
        """Abandon the session without signalling game over. Safe to call repeatedly."""
        self._cancel()
        if self.state is DriverState.RUNNING:
            self.state = DriverState.IDLE
            logger.info("Session stopped at score %d", self._last.score)

    def _on_timer(self) -> None:
        self._handle = None
        if self.state is not DriverState.RUNNING:
            return
        self.tick()

    def tick(self) -> Snapshot:
        """Advance once, then end or re-arm. Exposed so callers can step without a timer."""
        if self.state is not DriverState.RUNNING:
            return self._last
        self._cancel()
        self._last = self.grid.advance()

        if self._last.ended:
            self.state = DriverState.ENDED
            logger.info(
                "Session ended: %s (score=%d, length=%d)",
                self._last.end_reason.value if self._last.end_reason else "unknown",
                self._last.score,
                self._last.length,
            )
            self._notify()
            return self._last

        self._notify()
        # on_tick may have stopped or restarted the session.
        if self.state is DriverState.RUNNING and self._handle is None:
            self._arm()
        return self._last

    def _notify(self) -> None:
        if self.on_tick is not None:
            self.on_tick(self._last)
