"""Request guard shared by every handler."""

import logging

from tornado import web

from ..session.presence import is_admin
from ..session.store import SessionStoreError

log = logging.getLogger('bakery_hub.handlers')


class SessionAuthMixin:
    """Resolves the caller's session and refuses deactivated accounts.

    The token is read from the session cookie, then an `Authorization: Bearer`
    header, then a `token` query argument (for WebSocket clients).
    """

    current_profile = None

    def get_session_token(self):
        cookie_name = self.settings['bakery_config']['cookie_name']
        token = self.get_cookie(cookie_name)

        if not token:
            authorization = self.request.headers.get('Authorization', '')
            if authorization.startswith('Bearer '):
                token = authorization[len('Bearer '):].strip()

        if not token:
            token = self.get_query_argument('token', None)

        return token or None

    async def authenticate(self):
        """Return (session, store) for the caller. Raises HTTPError 401/403/503.

        The caller owns the returned store and must close it.
        """
        token = self.get_session_token()
        if not token:
            raise web.HTTPError(401, reason="unauthorized")

        store = self.settings['store_factory'](token)
        try:
            session = await store.get_current_session()
        except SessionStoreError as e:
            await store.close()
            log.error(f"[Auth] Session store unavailable: {e}")
            raise web.HTTPError(503, reason="session store unavailable")

        if session is None:
            await store.close()
            raise web.HTTPError(401, reason="unauthorized")

        try:
            profile = await self.settings['presence'].get_profile(session.user_id)
        except SessionStoreError as e:
            await store.close()
            log.error(f"[Auth] Profile lookup failed for {session.user_id}: {e}")
            raise web.HTTPError(503, reason="session store unavailable")

        if profile is not None and profile.active is False:
            await store.close()
            self.clear_cookie(self.settings['bakery_config']['cookie_name'])
            log.warning(f"[Auth] Refused deactivated account {session.user_id}")
            raise web.HTTPError(403, reason="deactivated")

        self.current_user = session
        self.current_profile = profile
        return session, store

    def require_admin(self):
        if not is_admin(self.current_profile):
            raise web.HTTPError(403, reason="admin required")

    def write_error(self, status_code, **kwargs):
        self.finish({"error": self._reason})


class BaseHandler(SessionAuthMixin, web.RequestHandler):
    """JSON API handler with the account guard applied in prepare()."""

    async def prepare(self):
        _, store = await self.authenticate()
        await store.close()

    @property
    def presence(self):
        return self.settings['presence']
