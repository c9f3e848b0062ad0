"""Tests for the Slack webhook channel."""

from unittest.mock import Mock, patch

import pytest
import requests

from notify_mute.channels import (
    SlackAttachment,
    SlackMessage,
    SlackWebhookChannel,
    build_suppression_actions,
)
from notify_mute.errors import DeliveryError

WEBHOOK_URL = "https://hooks.slack.com/services/T0/B0/xyz"


def _response(status_code: int, text: str = "ok") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def message():
    return SlackMessage(
        text="Foo",
        attachments=[
            SlackAttachment(
                fallback="Unable to mute",
                callback_id='"Bar"',
                actions=build_suppression_actions("0" * 64),
            )
        ],
    )


class TestSuppressionActions:
    """Test Mute/Snooze button construction."""

    def test_two_buttons(self):
        actions = build_suppression_actions("f" * 64)
        assert [(a.name, a.text, a.type, a.value) for a in actions] == [
            ("mute", "Mute", "button", "f" * 64),
            ("snooze", "Snooze", "button", "f" * 64),
        ]


class TestSlackWebhookChannel:
    """Test webhook delivery."""

    def test_is_configured(self):
        assert SlackWebhookChannel(WEBHOOK_URL).is_configured()
        assert not SlackWebhookChannel("").is_configured()

    def test_posts_json(self, message):
        channel = SlackWebhookChannel(WEBHOOK_URL, timeout=5)
        with patch("notify_mute.channels.slack.requests.post", return_value=_response(200)) as post:
            channel.send(message)

        post.assert_called_once()
        args, kwargs = post.call_args
        assert args[0] == WEBHOOK_URL
        assert kwargs["timeout"] == 5
        assert kwargs["json"] == message.to_payload()
        assert kwargs["json"]["attachments"][0]["actions"][1]["name"] == "snooze"

    def test_non_2xx_raises(self, message):
        channel = SlackWebhookChannel(WEBHOOK_URL)
        with patch(
            "notify_mute.channels.slack.requests.post",
            return_value=_response(404, "no_service"),
        ):
            with pytest.raises(DeliveryError) as exc_info:
                channel.send(message)

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_text == "no_service"

    def test_network_error_raises(self, message):
        channel = SlackWebhookChannel(WEBHOOK_URL)
        with patch(
            "notify_mute.channels.slack.requests.post",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(DeliveryError) as exc_info:
                channel.send(message)

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_unconfigured_raises(self, message):
        with patch("notify_mute.channels.slack.requests.post") as post:
            with pytest.raises(DeliveryError):
                SlackWebhookChannel("").send(message)
        post.assert_not_called()

    def test_send_simple(self):
        channel = SlackWebhookChannel(WEBHOOK_URL)
        with patch("notify_mute.channels.slack.requests.post", return_value=_response(200)) as post:
            channel.send_simple("hello")

        assert post.call_args.kwargs["json"] == {"text": "hello", "attachments": []}
