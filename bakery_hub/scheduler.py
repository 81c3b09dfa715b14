"""Cancellable timer sources for the session runtime.

IOLoopScheduler runs on the tornado IOLoop. VirtualScheduler keeps a virtual
clock that only moves when advanced, which makes timer behaviour
deterministic in tests.

Callbacks may return an awaitable; both schedulers wait on it.
"""

import heapq
import inspect
import itertools
import logging
from datetime import datetime, timedelta, timezone

log = logging.getLogger('bakery_hub.scheduler')


class _TimeoutHandle:
    def __init__(self, io_loop, callback):
        self._io_loop = io_loop
        self._callback = callback
        self._timeout = None
        self.cancelled = False

    def _run(self):
        self._timeout = None
        if self.cancelled:
            return None
        return self._callback()

    def cancel(self):
        self.cancelled = True
        if self._timeout is not None:
            self._io_loop.remove_timeout(self._timeout)
            self._timeout = None


class _PeriodicHandle:
    def __init__(self, periodic_callback):
        self._periodic_callback = periodic_callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        self._periodic_callback.stop()


class IOLoopScheduler:
    """Scheduler backed by tornado's IOLoop timers and PeriodicCallback."""

    def __init__(self, io_loop=None):
        from tornado.ioloop import IOLoop
        self.io_loop = io_loop or IOLoop.current()

    def now(self):
        return self.io_loop.time()

    def utcnow(self):
        return datetime.now(timezone.utc)

    def call_later(self, delay, callback):
        handle = _TimeoutHandle(self.io_loop, callback)
        handle._timeout = self.io_loop.call_later(delay, handle._run)
        return handle

    def call_soon(self, callback):
        return self.call_later(0, callback)

    def call_every(self, interval, callback):
        """Run callback every interval seconds. The first run is after one interval."""
        from tornado.ioloop import PeriodicCallback
        periodic_callback = PeriodicCallback(callback, interval * 1000)
        periodic_callback.start()
        return _PeriodicHandle(periodic_callback)


class _VirtualTimer:
    def __init__(self, scheduler, when, callback, interval=None):
        self._scheduler = scheduler
        self.when = when
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class VirtualScheduler:
    """Scheduler with a manually advanced clock.

    Usage:
        clock = VirtualScheduler()
        guard.start()
        await clock.advance(30 * 60)
    """

    def __init__(self, start=0.0, epoch=None):
        self._now = float(start)
        self._epoch = epoch or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._queue = []
        self._seq = itertools.count()

    def now(self):
        return self._now

    def utcnow(self):
        return self._epoch + timedelta(seconds=self._now)

    def _push(self, timer):
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))

    def call_later(self, delay, callback):
        timer = _VirtualTimer(self, self._now + delay, callback)
        self._push(timer)
        return timer

    def call_soon(self, callback):
        return self.call_later(0, callback)

    def call_every(self, interval, callback):
        """Run callback every interval seconds. The first run is after one interval."""
        timer = _VirtualTimer(self, self._now + interval, callback, interval=interval)
        self._push(timer)
        return timer

    @property
    def pending(self):
        """Number of armed, non-cancelled timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    async def advance(self, seconds):
        """Move the clock forward, firing every timer that falls due on the way."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = when
            if timer.interval is not None:
                timer.when = when + timer.interval
                self._push(timer)
            result = timer.callback()
            if inspect.isawaitable(result):
                await result
        self._now = target

    async def run_pending(self):
        """Fire timers that are already due without moving the clock."""
        await self.advance(0)
