"""
ReadTrack Save Debouncer - coalesced, single-writer progress persistence
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union
from app.core.exceptions import ProgressStoreException

logger = logging.getLogger(__name__)

SaveResult = Union[bool, None, Awaitable[Union[bool, None]]]

class TimerHandle(Protocol):
    def cancel(self) -> None: ...

class Clock(Protocol):
    """Source of time and delayed callbacks for the debouncer"""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

class LoopClock:
    """Clock backed by the running asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self.loop or asyncio.get_running_loop()

    def time(self) -> float:
        return self._get_loop().time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._get_loop().call_later(delay, callback)

class _ManualTimer:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

class ManualClock:
    """
    Logical clock for driving timers without wall-clock delay
    Timers fire synchronously from advance(), in due order
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._timers: List[_ManualTimer] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self.now + max(0.0, delay), callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            due = [timer for timer in self._timers if not timer.cancelled and timer.when <= target]
            if not due: break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()

        self._timers = [timer for timer in self._timers if not timer.cancelled]
        self.now = target

class SaveDebouncer:
    """
    Debounces persistence writes of the latest scheduled payload

    Only the most recent payload is ever written. Writes never overlap: a
    change arriving while a write is in flight is written right after it.
    Failed writes leave the payload dirty so the next change or flush()
    retries it.
    """

    def __init__(
        self,
        save: Callable[[Any], SaveResult],
        delay: float = 2.0,
        clock: Optional[Clock] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        name: str = "progress",
    ):
        self._save = save
        self.delay = delay
        self.clock = clock or LoopClock()
        self._on_error = on_error
        self.name = name

        self._latest: Any = None
        self._latest_revision = 0
        self._saved: Any = None
        self._saved_revision = 0

        self._timer: Optional[TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._write_after_flight = False
        self._closed = False

        self.last_error: Optional[Exception] = None
        self.write_count = 0

    @property
    def pending(self) -> bool:
        """A debounce timer is armed"""
        return self._timer is not None

    @property
    def writing(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def dirty(self) -> bool:
        """The latest payload has not been persisted"""
        return self._latest_revision > self._saved_revision and self._latest != self._saved

    def mark_saved(self, payload: Any):
        """Record a payload as already persisted, e.g. state loaded from the store"""
        self._latest_revision += 1
        self._latest = payload
        self._saved, self._saved_revision = payload, self._latest_revision

    def schedule(self, payload: Any):
        """
        Register a new payload and restart the quiet window
        Args:
            payload: Latest state to persist; replaces anything still pending
        """
        if self._closed:
            logger.warning(f"Ignoring {self.name} save scheduled after close")
            return

        self._latest_revision += 1
        self._latest = payload
        self.cancel()

        if self.writing:
            self._write_after_flight = True
            return

        if not self.dirty: return

        self._timer = self.clock.call_later(self.delay, self._on_timer)

    def cancel(self):
        """Drop the armed timer without writing"""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self):
        self._timer = None
        if self.writing:
            self._write_after_flight = True
            return
        self._start_writer()

    def _start_writer(self) -> asyncio.Task:
        self._in_flight = asyncio.ensure_future(self._write_loop())
        return self._in_flight

    async def _write_loop(self):
        while True:
            self._write_after_flight = False
            await self._write_latest()
            if not self._write_after_flight: break

    async def _write_latest(self) -> bool:
        if not self.dirty: return True

        payload, revision = self._latest, self._latest_revision
        try:
            result = self._save(payload)
            if inspect.isawaitable(result): result = await result
            if result is False:
                raise ProgressStoreException(f"Store rejected {self.name} write")

        except Exception as e:
            self.last_error = e
            logger.error(f"Failed to save {self.name}: {str(e)}")
            if self._on_error: self._on_error(e)
            return False

        self.write_count += 1
        self.last_error = None
        # a write that finished after newer changes never marks them saved
        if revision > self._saved_revision:
            self._saved, self._saved_revision = payload, revision

        return True

    async def wait_idle(self):
        """Wait until no write is in flight"""
        while self.writing:
            await self._in_flight

    async def flush(self) -> bool:
        """
        Write the latest payload now
        Returns:
            True when nothing is left unsaved
        """
        self.cancel()

        if self.writing:
            self._write_after_flight = True
            await self.wait_idle()
            return not self.dirty

        if not self.dirty: return True

        await self._start_writer()
        return not self.dirty

    async def close(self) -> bool:
        """Cancel the timer and attempt one final flush"""
        try:
            saved = await self.flush()
        except Exception as e:
            logger.error(f"Final {self.name} flush failed: {str(e)}", exc_info=True)
            saved = False
        finally:
            self._closed = True

        if not saved:
            logger.warning(f"Closing with unsaved {self.name}")
        return saved
