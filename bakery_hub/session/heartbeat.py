"""Periodic liveness heartbeat for the 'who is online' view."""

import logging
import platform

from .. import __version__

log = logging.getLogger('bakery_hub.session')


def default_client_info():
    return f"bakery-hub/{__version__} (Python {platform.python_version()}; {platform.system()})"


class HeartbeatPublisher:
    """Upserts a last-seen row for the signed-in user every `interval` seconds.

    Only one row per user is kept: concurrent tabs and devices overwrite each
    other and the most recent writer wins.
    """

    def __init__(self, store, scheduler, interval, client_info=None):
        self.store = store
        self.scheduler = scheduler
        self.interval = interval
        self.client_info = client_info or default_client_info()
        self._initial = None
        self._periodic = None

    @property
    def running(self):
        return self._periodic is not None

    def start(self):
        if self.running:
            return
        self._initial = self.scheduler.call_soon(self.beat)
        self._periodic = self.scheduler.call_every(self.interval, self.beat)
        log.info(f"[Heartbeat] Started - interval={self.interval}s")

    def stop(self):
        if not self.running:
            return
        self._initial.cancel()
        self._periodic.cancel()
        self._initial = None
        self._periodic = None
        log.info("[Heartbeat] Stopped")

    async def beat(self):
        """Publish one heartbeat. Returns True if a row was written."""
        try:
            session = await self.store.get_current_session()
            if session is None:
                return False
            await self.store.upsert_liveness(session.user_id, self.scheduler.utcnow(), self.client_info)
            return True
        except Exception as e:
            log.error(f"[Heartbeat] Failed to update heartbeat: {e}")
            return False
