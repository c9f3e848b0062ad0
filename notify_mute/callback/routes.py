"""Routes for Slack interactive button callbacks."""

import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request

from ..channels import SlackAction
from ..errors import NotifyMuteError, PayloadParseError
from ..fingerprint import parse_fingerprint

logger = logging.getLogger(__name__)

callback_bp = Blueprint("callback", __name__)


@dataclass
class WebhookBody:
    """Parsed interactive message payload."""
    actions: list[SlackAction] = field(default_factory=list)
    token: str | None = None


def parse_webhook(form) -> WebhookBody:
    """Parse the form-encoded ``payload`` field Slack posts on button press.

    Args:
        form: Mapping of form fields (e.g. request.form)

    Raises:
        PayloadParseError: If the field is missing, is not a JSON object,
            or its actions are not a list of {name, value} strings.
    """
    payload_string = form.get("payload")
    if not payload_string:
        raise PayloadParseError("No payload in body")

    try:
        data = json.loads(payload_string)
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable payload: {payload_string[:200]}")
        raise PayloadParseError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PayloadParseError("Payload is not a JSON object")

    raw_actions = data.get("actions", [])
    if not isinstance(raw_actions, list):
        raise PayloadParseError("Payload actions is not a list")

    actions = []
    for raw in raw_actions:
        if not isinstance(raw, dict):
            raise PayloadParseError("Action is not a JSON object")
        name = raw.get("name")
        value = raw.get("value")
        if not isinstance(name, str) or not isinstance(value, str):
            raise PayloadParseError("Action name and value must be strings")
        actions.append(SlackAction(
            name=name,
            text=str(raw.get("text") or ""),
            type=str(raw.get("type") or "button"),
            value=value,
        ))

    token = data.get("token")
    return WebhookBody(
        actions=actions,
        token=token if isinstance(token, str) else None,
    )


def _apply_action(action: SlackAction, snooze: timedelta) -> None:
    """Apply one button press to the suppression store."""
    store = current_app.suppression_store

    if action.name == "mute":
        store.record_mute(parse_fingerprint(action.value))
    elif action.name == "snooze":
        store.record_snooze(parse_fingerprint(action.value), snooze)
    else:
        logger.debug(f"Ignoring unknown action {action.name!r}")


@callback_bp.route("/", methods=["POST"])
def handle_callback():
    """Handle a Slack button press.

    Responds 400 if the payload cannot be parsed. Once parsed, always
    responds 200; a failing action is logged and the rest still run.
    """
    try:
        body = parse_webhook(request.form)
    except PayloadParseError as e:
        logger.warning(f"Rejected callback: {e}")
        return "Bad request", 400

    expected_token = current_app.config.get("CALLBACK_TOKEN")
    provided_token = (body.token or "").encode("utf-8")
    if expected_token and not secrets.compare_digest(provided_token, expected_token.encode("utf-8")):
        logger.warning("Rejected callback with invalid verification token")
        return "Invalid token", 401

    snooze = timedelta(days=current_app.config.get("CALLBACK_SNOOZE_DAYS", 30))

    for action in body.actions:
        try:
            _apply_action(action, snooze)
        except NotifyMuteError as e:
            logger.error(f"Failed to apply {action.name} action: {e}")

    return "Request executed", 200


@callback_bp.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return jsonify({"status": "ok"})
