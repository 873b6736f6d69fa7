"""WSGI entry point for gunicorn.

Usage:
    gunicorn push_relay.wsgi:app --bind 0.0.0.0:3001
"""
from push_core.config import ExpoConfig
from push_core.delivery import ExpoPushClient, NotificationDispatcher

from push_relay.app import create_app

_expo_config = ExpoConfig()
_dispatcher = NotificationDispatcher(
    ExpoPushClient(_expo_config), batch_size=_expo_config.max_batch_size
)
app = create_app(_dispatcher)
