"""Activity tracking and inactivity logout."""

import logging

from .events import ACTIVITY_EVENTS

log = logging.getLogger('bakery_hub.session')


class ActivityTracker:
    """Observes input events and reports throttled activity.

    An event is accepted only if at least `throttle` seconds have passed since
    the last accepted one; accepted events call on_activity. This bounds the
    number of timer rearms under continuous input (mouse movement, scrolling).
    """

    def __init__(self, events, scheduler, on_activity, throttle, kinds=ACTIVITY_EVENTS):
        self.events = events
        self.scheduler = scheduler
        self.on_activity = on_activity
        self.throttle = throttle
        self.kinds = tuple(kinds)
        self.last_activity = None
        self._listening = False

    def start(self):
        if self._listening:
            return
        self.last_activity = self.scheduler.now()
        for kind in self.kinds:
            self.events.add_listener(kind, self._handle_event, passive=True)
        self._listening = True

    def stop(self):
        if not self._listening:
            return
        for kind in self.kinds:
            self.events.remove_listener(kind, self._handle_event)
        self._listening = False

    def _handle_event(self, kind):
        now = self.scheduler.now()
        if now - self.last_activity < self.throttle:
            return
        self.last_activity = now
        self.on_activity()


class InactivityGuard:
    """Signs the user out after `inactivity_timeout` seconds without accepted activity.

    The deadline is always at least inactivity_timeout after some accepted
    activity, and at most inactivity_timeout + throttle after the latest input.
    """

    def __init__(self, store, navigate_to, scheduler, config, events, login_path='/login'):
        self.store = store
        self.login_path = login_path
        self.navigate_to = navigate_to
        self.scheduler = scheduler
        self.timeout = config.inactivity_timeout
        self.tracker = ActivityTracker(events, scheduler, self._rearm, config.activity_throttle)
        self._timer = None
        self.running = False

    @property
    def deadline(self):
        """Clock time at which the pending timer fires, or None."""
        if self._timer is None:
            return None
        return self.tracker.last_activity + self.timeout

    def start(self):
        if self.running:
            return
        self.running = True
        self.tracker.start()
        self._arm()
        log.info(f"[InactivityGuard] Armed - timeout={self.timeout}s, throttle={self.tracker.throttle}s")

    def stop(self):
        if not self.running:
            return
        self.running = False
        self.tracker.stop()
        self._cancel()
        log.info("[InactivityGuard] Stopped")

    def _arm(self):
        self._timer = self.scheduler.call_later(self.timeout, self._expire)

    def _cancel(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _rearm(self):
        if not self.running:
            return
        self._cancel()
        self._arm()

    async def _expire(self):
        self._timer = None
        if not self.running:
            return
        # fires at most once per start()
        self.stop()
        log.info(f"[InactivityGuard] No activity for {self.timeout}s, signing out")
        try:
            await self.store.sign_out()
            self.navigate_to(self.login_path, {'reason': 'inactivity'})
        except Exception as e:
            log.error(f"[InactivityGuard] Error auto-logging out: {e}")
