"""Send-once dispatcher.

Runs check -> send -> snooze as one critical section per fingerprint, so
two callers racing on the same alert cannot both deliver it. The lock is
the store's per-fingerprint lock, which the callback handler's mute and
snooze writes also take.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .channels import (
    SlackAttachment,
    SlackField,
    SlackMessage,
    SlackWebhookChannel,
    build_suppression_actions,
)
from .config import SlackConfig
from .fingerprint import canonical_json, fingerprint_hex
from .suppression_store import SuppressionStore

logger = logging.getLogger(__name__)

REMINDER_TITLE = "You will be periodically reminded of this alert."
FALLBACK_TEXT = "Unable to mute"


@dataclass
class NotificationPayload:
    """An alert to send, identified by its key.

    The key may be any JSON-serializable value (a string, a dict of
    host and check, etc.). Payloads are never persisted.
    """
    key: Any
    text: str
    fields: list[SlackField] = field(default_factory=list)
    title: str = REMINDER_TITLE


def render_message(payload: NotificationPayload, fingerprint: str) -> SlackMessage:
    """Render a payload as a Slack message with Mute/Snooze buttons."""
    return SlackMessage(
        text=payload.text,
        attachments=[
            SlackAttachment(
                title=payload.title,
                fields=list(payload.fields),
                fallback=FALLBACK_TEXT,
                callback_id=canonical_json(payload.key).decode("utf-8"),
                actions=build_suppression_actions(fingerprint),
            )
        ],
    )


class Dispatcher:
    """Delivers notifications unless their fingerprint is suppressed."""

    def __init__(
        self,
        store: SuppressionStore,
        channel: SlackWebhookChannel | None = None,
    ):
        """
        Args:
            store: Shared suppression store
            channel: Delivery channel. If None, one is built per call from
                     SlackConfig.webhook_url.
        """
        self.store = store
        self.channel = channel

    def _channel_for(self, config: SlackConfig) -> SlackWebhookChannel:
        if self.channel is not None:
            return self.channel
        return SlackWebhookChannel(config.webhook_url, timeout=config.timeout)

    def maybe_notify(self, payload: NotificationPayload, config: SlackConfig) -> bool:
        """Send a notification unless it is snoozed or muted.

        On success the fingerprint is snoozed for config.default_snooze.

        Returns:
            True if the notification was delivered, False if suppressed.

        Raises:
            SerializationError: If payload.key cannot be serialized.
            StorageError: If the suppression store fails (including
                CorruptStateError for undecodable records).
            DeliveryError: If the send failed. No snooze is recorded, so the
                next call retries delivery.
        """
        fingerprint = fingerprint_hex(payload.key)

        with self.store.locked(fingerprint):
            if not self.store.should_send(fingerprint):
                logger.debug(f"Suppressed notification for {fingerprint}")
                return False

            message = render_message(payload, fingerprint)
            self._channel_for(config).send(message)

            self.store.record_snooze(fingerprint, config.default_snooze)

        logger.info(f"Sent notification for {fingerprint}")
        return True
