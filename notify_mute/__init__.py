"""Duplicate notification suppression for Slack alerts."""

from .config import Config, SlackConfig
from .dispatcher import Dispatcher, NotificationPayload, render_message
from .errors import (
    NotifyMuteError,
    SerializationError,
    StorageError,
    CorruptStateError,
    DeliveryError,
    PayloadParseError,
    InvalidFingerprintError,
)
from .fingerprint import (
    canonical_json,
    fingerprint,
    fingerprint_hex,
    parse_fingerprint,
)
from .channels import (
    SlackWebhookChannel,
    SlackMessage,
    SlackAttachment,
    SlackAction,
    SlackField,
    build_suppression_actions,
)
from .suppression_store import (
    SuppressionStore,
    SuppressionState,
    SuppressionRecord,
)

__all__ = [
    # Config
    "Config",
    "SlackConfig",
    # Dispatch
    "Dispatcher",
    "NotificationPayload",
    "render_message",
    # Errors
    "NotifyMuteError",
    "SerializationError",
    "StorageError",
    "CorruptStateError",
    "DeliveryError",
    "PayloadParseError",
    "InvalidFingerprintError",
    # Fingerprints
    "canonical_json",
    "fingerprint",
    "fingerprint_hex",
    "parse_fingerprint",
    # Channels
    "SlackWebhookChannel",
    "SlackMessage",
    "SlackAttachment",
    "SlackAction",
    "SlackField",
    "build_suppression_actions",
    # Suppression Store
    "SuppressionStore",
    "SuppressionState",
    "SuppressionRecord",
]
