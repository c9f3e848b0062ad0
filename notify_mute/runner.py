#!/usr/bin/env python3
"""CLI runner for notify-mute.

Usage:
    notify-mute serve                        # Run the callback server
    notify-mute send --key '"host-1/disk"' --text "Disk almost full"
    notify-mute status '"host-1/disk"'       # Key (JSON) or fingerprint
    notify-mute mute <fingerprint>
    notify-mute snooze <fingerprint> --hours 4
    notify-mute clear <fingerprint>
    notify-mute list
"""

import argparse
import json
import logging
import sys
from datetime import timedelta

from .config import SlackConfig, config
from .dispatcher import Dispatcher, NotificationPayload
from .errors import NotifyMuteError
from .fingerprint import fingerprint_hex, is_fingerprint, parse_fingerprint
from .suppression_store import SuppressionStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from HTTP libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def _parse_key(raw: str):
    """Parse a JSON alert key, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _resolve_fingerprint(raw: str) -> str:
    """Accept either a fingerprint or an alert key."""
    if is_fingerprint(raw):
        return raw.lower()
    return fingerprint_hex(_parse_key(raw))


def cmd_serve(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    from .callback import create_app

    app = create_app(config, store=store)
    host = args.host or config.HOST
    port = args.port or config.PORT
    logger.info(f"Starting callback server on {host}:{port}")
    app.run(host=host, port=port, threaded=True)
    return 0


def cmd_send(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    if args.snooze_hours is not None:
        slack_config.default_snooze = timedelta(hours=args.snooze_hours)

    dispatcher = Dispatcher(store)
    payload = NotificationPayload(key=_parse_key(args.key), text=args.text)
    sent = dispatcher.maybe_notify(payload, slack_config)
    print("sent" if sent else "suppressed")
    return 0


def cmd_status(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    fingerprint = _resolve_fingerprint(args.key)
    record = store.get_record(fingerprint)
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def cmd_mute(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    record = store.record_mute(parse_fingerprint(args.fingerprint))
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def cmd_snooze(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    record = store.record_snooze(
        parse_fingerprint(args.fingerprint),
        timedelta(hours=args.hours),
    )
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def cmd_clear(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    removed = store.clear(parse_fingerprint(args.fingerprint))
    print("cleared" if removed else "not suppressed")
    return 0


def cmd_list(args, store: SuppressionStore, slack_config: SlackConfig) -> int:
    for record in store.list_records():
        print(json.dumps(record.to_dict()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="notify-mute - Slack notifications with mute and snooze"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help=f"Suppression store directory (default: {config.DATA_DIR})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the callback server")
    serve.add_argument("--host", type=str, default=None, help=f"Bind address (default: {config.HOST})")
    serve.add_argument("--port", type=int, default=None, help=f"Port (default: {config.PORT})")
    serve.set_defaults(func=cmd_serve)

    send = subparsers.add_parser("send", help="Send a notification unless suppressed")
    send.add_argument("--key", required=True, help="Alert key as JSON (plain strings allowed)")
    send.add_argument("--text", required=True, help="Message text")
    send.add_argument(
        "--snooze-hours",
        type=float,
        default=None,
        help=f"Snooze after sending (default: {config.DEFAULT_SNOOZE_SECONDS}s)",
    )
    send.set_defaults(func=cmd_send)

    status = subparsers.add_parser("status", help="Show suppression state")
    status.add_argument("key", help="Fingerprint or alert key as JSON")
    status.set_defaults(func=cmd_status)

    mute = subparsers.add_parser("mute", help="Mute a fingerprint")
    mute.add_argument("fingerprint")
    mute.set_defaults(func=cmd_mute)

    snooze = subparsers.add_parser("snooze", help="Snooze a fingerprint")
    snooze.add_argument("fingerprint")
    snooze.add_argument("--hours", type=float, default=4, help="Snooze duration (default: 4)")
    snooze.set_defaults(func=cmd_snooze)

    clear = subparsers.add_parser("clear", help="Remove suppression for a fingerprint")
    clear.add_argument("fingerprint")
    clear.set_defaults(func=cmd_clear)

    list_cmd = subparsers.add_parser("list", help="List stored suppression records")
    list_cmd.set_defaults(func=cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    slack_config = config.slack_config()
    if args.data_dir:
        slack_config.data_dir = args.data_dir

    try:
        with SuppressionStore(data_dir=slack_config.data_dir) as store:
            return args.func(args, store, slack_config)
    except NotifyMuteError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
