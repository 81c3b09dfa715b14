"""Handlers for the back-office 'who is online' panel."""

import logging
from datetime import datetime, timedelta, timezone

from tornado import web

from ..session.store import SessionStoreError
from .base import BaseHandler

log = logging.getLogger('bakery_hub.handlers')


class ActiveSessionsHandler(BaseHandler):
    """Handler for listing recently active users (admin only)."""

    async def get(self):
        self.require_admin()

        window_minutes = self.settings['bakery_config']['presence_window_minutes']
        try:
            users = await self.presence.list_active(timedelta(minutes=window_minutes))
        except SessionStoreError as e:
            log.error(f"[Active Sessions] Error listing active users: {e}")
            raise web.HTTPError(503, reason="session store unavailable")

        log.info(f"[Active Sessions] Admin {self.current_user.user_id}: returning {len(users)} user(s)")
        self.finish({
            "sessions": users,
            "count": len(users),
            "window_minutes": window_minutes,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })


class ForceLogoutHandler(BaseHandler):
    """Handler for invalidating every session of a user (admin only)."""

    async def post(self, user_id):
        self.require_admin()

        log.info(f"[Force Logout] Admin {self.current_user.user_id} requested logout of {user_id}")
        try:
            invalidated = await self.presence.force_logout(user_id)
        except SessionStoreError as e:
            log.error(f"[Force Logout] Error logging out {user_id}: {e}")
            raise web.HTTPError(503, reason="session store unavailable")

        self.finish({"success": True, "user_id": user_id, "invalidated": invalidated})


class PruneSessionsHandler(BaseHandler):
    """Handler for removing stale liveness rows (admin only)."""

    async def post(self):
        self.require_admin()

        retention_hours = self.settings['bakery_config']['presence_retention_hours']
        try:
            deleted = await self.presence.prune_stale(timedelta(hours=retention_hours))
        except SessionStoreError as e:
            log.error(f"[Prune Sessions] Error pruning liveness rows: {e}")
            raise web.HTTPError(503, reason="session store unavailable")

        log.info(f"[Prune Sessions] Admin {self.current_user.user_id} pruned {deleted} row(s)")
        self.finish({"success": True, "deleted": deleted, "retention_hours": retention_hours})
