"""Periodic re-validation that the signed-in account is still enabled."""

import logging

log = logging.getLogger('bakery_hub.session')


class AccountActivePoller:
    """Forces logout when an administrator deactivates the signed-in account.

    Fails open: only an explicit `active == False` triggers logout. A missing
    profile or a failed read skips enforcement for that tick.
    """

    def __init__(self, store, navigate_to, scheduler, interval, login_path='/login'):
        self.store = store
        self.navigate_to = navigate_to
        self.scheduler = scheduler
        self.interval = interval
        self.login_path = login_path
        self._initial = None
        self._periodic = None

    @property
    def running(self):
        return self._periodic is not None

    def start(self):
        """Check immediately, then every `interval` seconds."""
        if self.running:
            return
        self._initial = self.scheduler.call_soon(self.check_active)
        self._periodic = self.scheduler.call_every(self.interval, self.check_active)
        log.info(f"[AccountPoller] Started - interval={self.interval}s")

    def stop(self):
        if not self.running:
            return
        self._initial.cancel()
        self._periodic.cancel()
        self._initial = None
        self._periodic = None
        log.info("[AccountPoller] Stopped")

    def set_interval(self, interval):
        """Change the polling period. Timers are re-created only if it differs."""
        if interval == self.interval:
            return
        self.interval = interval
        if self.running:
            self.stop()
            self.start()

    async def check_active(self):
        """One poll. Returns True if the session was terminated."""
        try:
            session = await self.store.get_current_session()
        except Exception as e:
            log.info(f"[AccountPoller] Session lookup failed, skipping this cycle: {e}")
            return False

        if session is None:
            return False

        active = await self.store.get_profile_active_flag(session.user_id)
        if active is not False:
            return False

        log.warning(f"[AccountPoller] Account {session.user_id} deactivated, signing out")
        try:
            await self.store.sign_out()
        except Exception as e:
            log.error(f"[AccountPoller] Sign out failed for {session.user_id}: {e}")
            return False

        self.navigate_to(self.login_path, {'deactivated': '1'})
        return True
