"""Slack incoming webhook channel.

Sends legacy message attachments with interactive buttons. Button presses
are posted back by Slack to the callback endpoint (see notify_mute.callback),
carrying the button's ``value`` verbatim.

Setup:
1. Create a Slack app with Incoming Webhooks and Interactivity enabled
2. Point the Interactivity request URL at the callback server's ``/``
3. Copy the webhook URL into SLACK_WEBHOOK_URL
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from ..errors import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#3AA3E3"


@dataclass
class SlackAction:
    """Interactive button on a Slack attachment."""
    name: str
    text: str
    value: str
    type: str = "button"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "text": self.text,
            "type": self.type,
            "value": self.value,
        }


@dataclass
class SlackField:
    """Title/value pair shown in an attachment."""
    title: str
    value: str
    short: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "value": self.value, "short": self.short}


@dataclass
class SlackAttachment:
    """Legacy Slack message attachment."""
    fallback: str
    callback_id: str
    title: str | None = None
    fields: list[SlackField] = field(default_factory=list)
    color: str = DEFAULT_COLOR
    attachment_type: str = "default"
    actions: list[SlackAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.title:
            data["title"] = self.title
        if self.fields:
            data["fields"] = [f.to_dict() for f in self.fields]
        data.update({
            "fallback": self.fallback,
            "callback_id": self.callback_id,
            "color": self.color,
            "attachment_type": self.attachment_type,
            "actions": [a.to_dict() for a in self.actions],
        })
        return data


@dataclass
class SlackMessage:
    """Slack message body."""
    text: str
    attachments: list[SlackAttachment] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "attachments": [a.to_dict() for a in self.attachments],
        }


def build_suppression_actions(fingerprint: str) -> list[SlackAction]:
    """Build the Mute and Snooze buttons for an alert.

    Both buttons carry the fingerprint so the callback can find the
    suppression record without the original alert key.
    """
    return [
        SlackAction(name="mute", text="Mute", value=fingerprint),
        SlackAction(name="snooze", text="Snooze", value=fingerprint),
    ]


class SlackWebhookChannel:
    """Send messages to Slack via an incoming webhook."""

    def __init__(self, webhook_url: str, timeout: float = 30):
        """
        Initialize Slack webhook channel.

        Args:
            webhook_url: The incoming webhook URL
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    def is_configured(self) -> bool:
        """Check if channel is configured."""
        return bool(self.webhook_url)

    def send(self, message: SlackMessage) -> None:
        """
        Send a message to Slack.

        Raises:
            DeliveryError: If no webhook is configured, the request fails,
                or Slack answers with a non-2xx status.
        """
        if not self.webhook_url:
            raise DeliveryError("No Slack webhook URL configured")

        try:
            response = requests.post(
                self.webhook_url,
                json=message.to_payload(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to send Slack notification: {e}")
            raise DeliveryError(f"Slack request failed: {e}") from e

        response_text = response.text[:200]
        if not 200 <= response.status_code < 300:
            logger.error(f"Slack rejected notification: {response.status_code} - {response_text}")
            raise DeliveryError(
                f"Slack returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_text=response_text,
            )

        logger.debug(f"Response from Slack: {response_text}")
        logger.info("Slack notification sent")

    def send_simple(self, text: str) -> None:
        """Send a plain text message with no buttons."""
        self.send(SlackMessage(text=text))


def test_webhook(webhook_url: str) -> bool:
    """
    Send a test message to verify webhook configuration.

    Usage:
        python -c "from notify_mute.channels.slack import test_webhook; test_webhook('YOUR_URL')"
    """
    channel = SlackWebhookChannel(webhook_url)

    print("Sending test to Slack webhook...")

    try:
        channel.send_simple("notify-mute test message. If you see this, your webhook is working!")
    except DeliveryError as e:
        print(f"FAILED - {e}")
        return False

    print("SUCCESS! Check your Slack channel for the test message.")
    return True
