import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from intake.config import ELAPSED_TICK_SECONDS

logger = logging.getLogger(__name__)

TickCallback = Callable[[str], Awaitable[None] | None]


def format_elapsed(elapsed: timedelta | float) -> str:
    """Render a duration as HH:MM:SS. Hours widen past 99 instead of wrapping."""
    if isinstance(elapsed, timedelta):
        elapsed = elapsed.total_seconds()
    total = max(int(elapsed), 0)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def utc_now() -> datetime:
    return datetime.now(UTC)


class ElapsedTimeTracker:
    """Owned one-second ticker counting up from a fixed start instant.

    There is no pause, resume or reset. ``cancel()`` must be called when the
    encounter is torn down; it releases the tick task exactly once.
    """

    def __init__(
        self,
        start_instant: datetime | None = None,
        *,
        interval: float = ELAPSED_TICK_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        on_tick: TickCallback | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self._clock = clock
        self._start_instant = start_instant or clock()
        self._interval = interval
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        self._released = False
        self.last_value = "00:00:00"

    @property
    def start_instant(self) -> datetime:
        return self._start_instant

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def released(self) -> bool:
        return self._released

    def elapsed(self, now: datetime | None = None) -> timedelta:
        now = now or self._clock()
        return max(now - self._start_instant, timedelta(0))

    def current(self, now: datetime | None = None) -> str:
        return format_elapsed(self.elapsed(now))

    def start(self) -> None:
        """Schedule the tick task on the running event loop."""
        if self._released:
            raise RuntimeError("Elapsed-time tracker was cancelled and cannot be restarted")
        if self._task is not None:
            raise RuntimeError("Elapsed-time tracker already started")
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> bool:
        """Release the tick task. Returns False if it was already released."""
        if self._released:
            return False
        self._released = True
        if self._task is not None:
            self._task.cancel()
            self._task = None
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.last_value = self.current()
            if self._on_tick is None:
                continue
            try:
                result = self._on_tick(self.last_value)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Elapsed-time tick callback failed")
