"""Handlers for session info and the per-tab session runtime."""

import json
import logging
from urllib.parse import urlencode

from tornado import websocket
from tornado.ioloop import IOLoop

from ..session.events import ACTIVITY_EVENTS, ActivityEventSource
from ..session.lifecycle import SessionLifecycle
from .base import BaseHandler, SessionAuthMixin

log = logging.getLogger('bakery_hub.handlers')


class SessionInfoHandler(BaseHandler):
    """Handler for getting the caller's session info and guard timings."""

    async def get(self):
        guard_config = self.settings['guard_config']
        profile = self.current_profile

        self.finish({
            "user_id": self.current_user.user_id,
            "full_name": profile.full_name if profile else None,
            "role": profile.role if profile else None,
            "inactivity_timeout": guard_config.inactivity_timeout,
            "activity_throttle": guard_config.activity_throttle,
            "active_poll_interval": guard_config.active_poll_interval,
            "heartbeat_interval": guard_config.heartbeat_interval,
        })


class SessionSocketHandler(SessionAuthMixin, websocket.WebSocketHandler):
    """Runs the inactivity guard, account poller and heartbeat for one browser tab.

    Client -> server: {"type": "activity", "event": "mousemove"}
    Server -> client: {"type": "navigate", "path": "/login", "query": {...}, "url": "..."}
    """

    lifecycle = None
    store = None

    async def prepare(self):
        session, self.store = await self.authenticate()
        self.user_id = session.user_id

    async def get(self, *args, **kwargs):
        await super().get(*args, **kwargs)
        # upgrade refused (not a WebSocket request, bad origin): open/on_close never run
        if self.lifecycle is None and self.store is not None:
            await self.store.close()
            self.store = None

    def open(self):
        bakery_config = self.settings['bakery_config']
        self.events = ActivityEventSource()
        self.lifecycle = SessionLifecycle(
            self.store,
            self.events,
            self.navigate_to,
            self.settings['scheduler_factory'](),
            config=self.settings['guard_config'],
            client_info=self.request.headers.get('User-Agent'),
            login_path=bakery_config['login_url'],
        )
        self.lifecycle.start()
        log.info(f"[SessionSocket] Opened for {self.user_id}")

    def on_message(self, message):
        try:
            data = json.loads(message)
        except (TypeError, ValueError):
            log.info(f"[SessionSocket] Ignoring malformed message from {self.user_id}")
            return

        if not isinstance(data, dict) or data.get('type') != 'activity':
            return

        kind = data.get('event')
        if kind in ACTIVITY_EVENTS:
            self.events.dispatch(kind)

    def navigate_to(self, path, query=None):
        url = f"{path}?{urlencode(query)}" if query else path
        try:
            self.write_message({"type": "navigate", "path": path, "query": query or {}, "url": url})
            log.info(f"[SessionSocket] Sent {self.user_id} to {url}")
        except websocket.WebSocketClosedError:
            log.info(f"[SessionSocket] Socket closed before redirect of {self.user_id} to {url}")

    def on_close(self):
        if self.lifecycle is not None:
            self.lifecycle.stop()
        if self.store is not None:
            IOLoop.current().add_callback(self.store.close)
            self.store = None
        log.info(f"[SessionSocket] Closed for {getattr(self, 'user_id', None)}")
