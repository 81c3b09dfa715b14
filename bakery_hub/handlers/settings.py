"""Handler for the read-only settings view."""

import logging
import os

import yaml

from .base import BaseHandler

log = logging.getLogger('bakery_hub.handlers')

SETTINGS_DICT_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'settings_dictionary.yml')


def load_settings(path=SETTINGS_DICT_PATH):
    """Load settings from YAML dictionary file and populate with env values."""
    settings = []
    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}

        for category, items in config.items():
            if not isinstance(items, list):
                continue

            for item in items:
                name = item.get('name', '')
                default = str(item.get('default', ''))
                value = os.environ.get(name, default)

                if not value and 'empty_display' in item:
                    value = item['empty_display']
                if item.get('secret') and value and value != item.get('empty_display'):
                    value = '********'

                settings.append({
                    "category": category,
                    "name": name,
                    "value": value,
                    "description": item.get('description', ''),
                })
    except FileNotFoundError:
        log.error(f"[Settings] Settings dictionary not found: {path}")
    except Exception as e:
        log.error(f"[Settings] Error loading settings dictionary: {e}")

    return settings


class SettingsHandler(BaseHandler):
    """Handler for listing the recognised settings (admin only, read-only)."""

    async def get(self):
        self.require_admin()

        log.info(f"[Settings] Admin {self.current_user.user_id} accessed settings")
        self.finish({"settings": load_settings()})
