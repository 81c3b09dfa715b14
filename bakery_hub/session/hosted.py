"""Clients for the hosted auth + row API."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import aiohttp

from .model import Profile
from .presence import presence_entry
from .store import Session, SessionStore, SessionStoreError

log = logging.getLogger('bakery_hub.session')

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


def parse_timestamp(value):
    """Parse a timestamp column as returned by the row API."""
    if isinstance(value, str) and value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


class HostedClient:
    """Shared REST plumbing: base URL, API key headers and a lazy aiohttp session.

    Auth endpoints live under /auth/v1, table rows under /rest/v1. Every
    request carries the project API key; user-scoped requests also carry an
    access token so row-level security applies.
    """

    REQUEST_TIMEOUT = 10

    def __init__(self, base_url, api_key, access_token=None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.access_token = access_token
        self._http = None

    def _headers(self, **extra):
        headers = {'apikey': self.api_key, 'Authorization': f'Bearer {self.access_token or self.api_key}'}
        headers.update(extra)
        return headers

    def _client(self):
        if self._http is None or self._http.closed:
            timeout = aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT)
            self._http = aiohttp.ClientSession(timeout=timeout)
        return self._http

    async def _request(self, method, path, what, headers=None, **kwargs):
        """Send a request and return the decoded JSON body (None if empty).

        Raises SessionStoreError on transport errors, non-2xx statuses and
        undecodable bodies.
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._client().request(method, url, headers=self._headers(**(headers or {})), **kwargs) as resp:
                if resp.status >= 300:
                    body = await resp.text()
                    raise SessionStoreError(f"{what} failed: {resp.status} {body[:200]}")
                body = await resp.text()
                if not body:
                    return None
                return await resp.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            raise SessionStoreError(f"{what} failed: {e}") from e

    async def close(self):
        if self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None


class HostedSessionStore(HostedClient, SessionStore):
    """Session store bound to one tab's access token on the hosted backend."""

    async def get_current_session(self):
        if not self.access_token:
            return None

        url = f"{self.base_url}/auth/v1/user"
        try:
            async with self._client().get(url, headers=self._headers()) as resp:
                if resp.status in (401, 403):
                    return None
                if resp.status != 200:
                    raise SessionStoreError(f"user request failed: {resp.status}")
                user = await resp.json()
        except TRANSPORT_ERRORS as e:
            raise SessionStoreError(f"user request failed: {e}") from e

        user_id = user.get('id') if isinstance(user, dict) else None
        if not user_id:
            return None
        return Session(user_id=user_id, access_token=self.access_token)

    async def sign_out(self):
        if not self.access_token:
            return

        url = f"{self.base_url}/auth/v1/logout"
        try:
            async with self._client().post(url, headers=self._headers()) as resp:
                if resp.status >= 300 and resp.status != 401:
                    raise SessionStoreError(f"logout failed: {resp.status}")
        except TRANSPORT_ERRORS as e:
            raise SessionStoreError(f"logout failed: {e}") from e
        self.access_token = None

    async def get_profile_active_flag(self, user_id):
        params = {'id': f'eq.{user_id}', 'select': 'active'}
        try:
            rows = await self._request('GET', '/rest/v1/profiles', 'profile request', params=params)
        except SessionStoreError as e:
            log.info(f"[HostedStore] Error reading active flag for {user_id}: {e}")
            return None

        if not isinstance(rows, list) or len(rows) != 1 or not isinstance(rows[0], dict):
            return None
        active = rows[0].get('active')
        return active if isinstance(active, bool) else None

    async def upsert_liveness(self, user_id, timestamp, client_info):
        payload = [{
            'user_id': user_id,
            'last_seen_at': timestamp.isoformat(),
            'user_agent': client_info,
        }]
        await self._request(
            'POST', '/rest/v1/user_sessions', f"liveness upsert for {user_id}",
            headers={'Prefer': 'resolution=merge-duplicates,return=minimal'},
            params={'on_conflict': 'user_id'},
            json=payload,
        )


class HostedPresenceMonitor(HostedClient):
    """Presence operations against the hosted backend, authenticated with the API key.

    Mirrors PresenceMonitor. Force logout goes through the backend's
    `force_logout_user` function, which revokes the user's sessions and
    refresh tokens.
    """

    DEFAULT_WINDOW = timedelta(hours=2)
    DEFAULT_RETENTION = timedelta(hours=24)

    async def get_profile(self, user_id):
        params = {'id': f'eq.{user_id}', 'select': 'id,email,full_name,role,active'}
        rows = await self._request('GET', '/rest/v1/profiles', 'profile request', params=params)
        if not isinstance(rows, list) or len(rows) != 1 or not isinstance(rows[0], dict):
            return None
        row = rows[0]
        active = row.get('active')
        return Profile(
            id=user_id,
            email=row.get('email'),
            full_name=row.get('full_name'),
            role=row.get('role'),
            active=active if isinstance(active, bool) else None,
        )

    async def list_active(self, window=None, now=None):
        """Users seen within `window`, most recent first."""
        window = window or self.DEFAULT_WINDOW
        cutoff = (now or datetime.now(timezone.utc)) - window
        params = {
            'select': 'user_id,last_seen_at,user_agent,profiles(email,full_name,role)',
            'last_seen_at': f'gte.{cutoff.isoformat()}',
            'order': 'last_seen_at.desc',
        }
        rows = await self._request('GET', '/rest/v1/user_sessions', 'active sessions request', params=params)

        active_users = []
        for row in rows or []:
            profile = row.get('profiles')
            if isinstance(profile, list):
                profile = profile[0] if profile else None
            profile = profile or {}
            try:
                last_seen = parse_timestamp(row.get('last_seen_at'))
            except (TypeError, ValueError):
                log.info(f"[HostedPresence] Skipping row with bad timestamp for {row.get('user_id')}")
                continue
            active_users.append(presence_entry(
                row.get('user_id'), last_seen, row.get('user_agent'),
                email=profile.get('email'),
                full_name=profile.get('full_name'),
                role=profile.get('role'),
            ))
        return active_users

    async def force_logout(self, user_id):
        """Revoke every session of a user and drop their liveness row.

        Returns the number of sessions revoked if the backend reports it, else None.
        """
        result = await self._request(
            'POST', '/rest/v1/rpc/force_logout_user', f"force logout of {user_id}",
            json={'target_user_id': user_id},
        )
        await self._request(
            'DELETE', '/rest/v1/user_sessions', f"liveness delete for {user_id}",
            params={'user_id': f'eq.{user_id}'},
        )
        log.info(f"[HostedPresence] Forced logout of {user_id}")
        return result if isinstance(result, int) and not isinstance(result, bool) else None

    async def prune_stale(self, older_than=None, now=None):
        """Remove liveness rows not refreshed within `older_than`. Returns the count."""
        older_than = older_than or self.DEFAULT_RETENTION
        cutoff = (now or datetime.now(timezone.utc)) - older_than
        rows = await self._request(
            'DELETE', '/rest/v1/user_sessions', 'liveness prune',
            headers={'Prefer': 'return=representation'},
            params={'last_seen_at': f'lt.{cutoff.isoformat()}', 'select': 'user_id'},
        )
        count = len(rows) if isinstance(rows, list) else 0
        if count > 0:
            log.info(f"[HostedPresence] Pruned {count} stale liveness row(s)")
        return count
