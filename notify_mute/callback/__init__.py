"""Callback server for Slack interactive buttons."""

from .app import create_app
from .routes import WebhookBody, callback_bp, parse_webhook

__all__ = [
    "create_app",
    "callback_bp",
    "parse_webhook",
    "WebhookBody",
]
