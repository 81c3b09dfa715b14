"""Environment-driven configuration for the session runtime and web app."""

import logging
import os

log = logging.getLogger('bakery_hub.config')


def get_env_int(name, default, min_val, max_val):
    """Get integer from environment with validation."""
    try:
        value = int(os.environ.get(name, default))
        if value < min_val or value > max_val:
            log.info(f"[Config] {name}={value} out of range ({min_val}-{max_val}), using default {default}")
            return default
        return value
    except (ValueError, TypeError):
        log.info(f"[Config] {name} invalid, using default {default}")
        return default


class SessionGuardConfig:
    """Timings shared by the inactivity guard, account poller and heartbeat.

    All values are seconds. Explicit keyword arguments win over the
    environment, which wins over the defaults.
    """

    DEFAULT_INACTIVITY_TIMEOUT = 30 * 60
    DEFAULT_ACTIVITY_THROTTLE = 5
    DEFAULT_ACTIVE_POLL_INTERVAL = 60
    DEFAULT_HEARTBEAT_INTERVAL = 5 * 60

    def __init__(self, inactivity_timeout=None, activity_throttle=None,
                 active_poll_interval=None, heartbeat_interval=None):
        self.inactivity_timeout = inactivity_timeout if inactivity_timeout is not None else get_env_int(
            "BAKERY_SESSION_INACTIVITY_TIMEOUT", self.DEFAULT_INACTIVITY_TIMEOUT, 60, 86400)
        self.activity_throttle = activity_throttle if activity_throttle is not None else get_env_int(
            "BAKERY_SESSION_ACTIVITY_THROTTLE", self.DEFAULT_ACTIVITY_THROTTLE, 1, 300)
        self.active_poll_interval = active_poll_interval if active_poll_interval is not None else get_env_int(
            "BAKERY_SESSION_ACTIVE_POLL_INTERVAL", self.DEFAULT_ACTIVE_POLL_INTERVAL, 5, 3600)
        self.heartbeat_interval = heartbeat_interval if heartbeat_interval is not None else get_env_int(
            "BAKERY_SESSION_HEARTBEAT_INTERVAL", self.DEFAULT_HEARTBEAT_INTERVAL, 10, 3600)

    def __repr__(self):
        return (
            f"SessionGuardConfig(inactivity_timeout={self.inactivity_timeout}, "
            f"activity_throttle={self.activity_throttle}, "
            f"active_poll_interval={self.active_poll_interval}, "
            f"heartbeat_interval={self.heartbeat_interval})"
        )


def get_app_config():
    """Build the web app settings dict (stored as tornado setting 'bakery_config')."""
    hosted_url = os.environ.get('BAKERY_HOSTED_URL', '').rstrip('/')
    hosted_api_key = os.environ.get('BAKERY_HOSTED_API_KEY', '')

    config = {
        'db_url': os.environ.get('BAKERY_DB_URL', 'sqlite:////data/bakery_sessions.sqlite'),
        'hosted_url': hosted_url,
        'hosted_api_key': hosted_api_key,
        'use_hosted_store': bool(hosted_url and hosted_api_key),
        'cookie_name': os.environ.get('BAKERY_COOKIE_NAME', 'bakery_session'),
        'login_url': os.environ.get('BAKERY_LOGIN_URL', '/login'),
        'port': get_env_int('BAKERY_PORT', 8000, 1, 65535),
        'presence_window_minutes': get_env_int('BAKERY_PRESENCE_WINDOW', 120, 1, 1440),
        'presence_retention_hours': get_env_int('BAKERY_PRESENCE_RETENTION', 24, 1, 720),
    }

    log.info(
        f"[Config] db={config['db_url']}, hosted={'yes' if config['use_hosted_store'] else 'no'}, "
        f"port={config['port']}, presence_window={config['presence_window_minutes']}m, "
        f"retention={config['presence_retention_hours']}h"
    )
    return config
