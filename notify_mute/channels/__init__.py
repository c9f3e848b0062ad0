"""Notification channels for notify-mute."""

from .slack import (
    SlackWebhookChannel,
    SlackMessage,
    SlackAttachment,
    SlackAction,
    SlackField,
    build_suppression_actions,
)

__all__ = [
    "SlackWebhookChannel",
    "SlackMessage",
    "SlackAttachment",
    "SlackAction",
    "SlackField",
    "build_suppression_actions",
]
