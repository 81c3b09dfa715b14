"""Window-scope activity event target."""

import logging

log = logging.getLogger('bakery_hub.session')

ACTIVITY_EVENTS = ('mousedown', 'mousemove', 'keydown', 'scroll', 'touchstart')


class ActivityEventSource:
    """Dispatches input events of a browser tab to registered listeners.

    Listeners are called synchronously, in registration order. Passive
    listeners cannot cancel or block the event.
    """

    def __init__(self):
        self._listeners = {}

    def add_listener(self, kind, callback, passive=True):
        listeners = self._listeners.setdefault(kind, [])
        if any(cb is callback for cb, _ in listeners):
            return
        listeners.append((callback, passive))

    def remove_listener(self, kind, callback):
        listeners = self._listeners.get(kind, [])
        self._listeners[kind] = [(cb, passive) for cb, passive in listeners if cb is not callback]
        if not self._listeners[kind]:
            del self._listeners[kind]

    def listener_count(self, kind=None):
        if kind is not None:
            return len(self._listeners.get(kind, []))
        return sum(len(listeners) for listeners in self._listeners.values())

    def dispatch(self, kind):
        """Deliver an event. Returns the number of listeners notified."""
        listeners = list(self._listeners.get(kind, []))
        for callback, _ in listeners:
            try:
                callback(kind)
            except Exception as e:
                log.error(f"[Events] Listener error for '{kind}': {e}")
        return len(listeners)
