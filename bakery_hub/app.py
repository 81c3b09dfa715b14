"""Tornado application for the session service.

Serves the per-tab session runtime over a WebSocket and the admin presence
API. Run with `bakery-hub` or `python -m bakery_hub.app`.
"""

import asyncio
import logging
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from tornado import web

from .config import SessionGuardConfig, get_app_config
from .handlers import (
    ActiveSessionsHandler,
    ForceLogoutHandler,
    PruneSessionsHandler,
    SessionInfoHandler,
    SessionSocketHandler,
    SettingsHandler,
)
from .scheduler import IOLoopScheduler
from .session.hosted import HostedPresenceMonitor, HostedSessionStore
from .session.model import SessionBase
from .session.presence import PresenceMonitor
from .session.store import SqlSessionStore

log = logging.getLogger('bakery_hub.app')


def make_store_factory(config, session_factory):
    """Return token -> SessionStore for the configured backend."""
    if config['use_hosted_store']:
        def hosted_store(token):
            return HostedSessionStore(config['hosted_url'], config['hosted_api_key'], access_token=token)
        return hosted_store

    def sql_store(token):
        return SqlSessionStore(session_factory, access_token=token)
    return sql_store


def make_presence(config, session_factory):
    """Return the presence monitor reading the same backend the tabs write to."""
    if config['use_hosted_store']:
        return HostedPresenceMonitor(config['hosted_url'], config['hosted_api_key'])
    return PresenceMonitor(session_factory)


def make_app(config=None, guard_config=None, session_factory=None, store_factory=None,
             scheduler_factory=None, presence=None):
    """Build the tornado Application.

    Args:
        config: dict from get_app_config()
        guard_config: SessionGuardConfig shared by every tab
        session_factory: SQLAlchemy sessionmaker (created from config['db_url'] if omitted)
        store_factory: token -> SessionStore (backend chosen from config if omitted)
        scheduler_factory: () -> scheduler for each tab's runtime
        presence: presence monitor (backend chosen from config if omitted)
    """
    config = config or get_app_config()

    if session_factory is None and not config['use_hosted_store']:
        engine = create_engine(config['db_url'])
        SessionBase.metadata.create_all(engine)
        session_factory = sessionmaker(bind=engine)
        log.info(f"[App] Database initialized: {config['db_url']}")

    handlers = [
        (r"/api/session", SessionInfoHandler),
        (r"/api/session/ws", SessionSocketHandler),
        (r"/api/sessions/active", ActiveSessionsHandler),
        (r"/api/sessions/prune", PruneSessionsHandler),
        (r"/api/users/([^/]+)/force-logout", ForceLogoutHandler),
        (r"/api/settings", SettingsHandler),
    ]

    return web.Application(
        handlers,
        bakery_config=config,
        guard_config=guard_config or SessionGuardConfig(),
        presence=presence or make_presence(config, session_factory),
        store_factory=store_factory or make_store_factory(config, session_factory),
        scheduler_factory=scheduler_factory or IOLoopScheduler,
    )


async def serve(config):
    app = make_app(config)
    app.listen(config['port'])
    log.info(f"Session service listening on port {config['port']}")
    await asyncio.Event().wait()


def main():
    """Entry point for the session service."""
    logging.basicConfig(
        level=logging.INFO,
        format='[%(levelname)1.1s %(asctime)s.%(msecs)03d %(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    config = get_app_config()
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        log.info("Shutting down")
        sys.exit(0)


if __name__ == '__main__':
    main()
