"""Tests for the CLI runner."""

import json
from unittest.mock import patch

import pytest

from notify_mute.config import Config
from notify_mute.runner import main
from notify_mute.suppression_store import SuppressionState, SuppressionStore

BAR_FINGERPRINT = "9cf3754f15467c507012911cc590ee7a571bdb4c6bba30c605868304033db330"


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep log lines out of captured stdout."""
    with patch("notify_mute.runner.setup_logging"):
        yield


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")


def _state(data_dir: str) -> SuppressionState:
    with SuppressionStore(data_dir=data_dir) as store:
        return store.get_record(BAR_FINGERPRINT).state


class TestRunner:
    """Test operator subcommands."""

    def test_status_by_key(self, data_dir, capsys):
        assert main(["--data-dir", data_dir, "status", '"Bar"']) == 0

        out = json.loads(capsys.readouterr().out)
        assert out["fingerprint"] == BAR_FINGERPRINT
        assert out["state"] == "unset"

    def test_mute_then_clear(self, data_dir, capsys):
        assert main(["--data-dir", data_dir, "mute", BAR_FINGERPRINT]) == 0
        assert _state(data_dir) == SuppressionState.MUTED

        assert main(["--data-dir", data_dir, "clear", BAR_FINGERPRINT]) == 0
        assert _state(data_dir) == SuppressionState.UNSET
        assert capsys.readouterr().out.strip().endswith("cleared")

    def test_snooze(self, data_dir, capsys):
        assert main(["--data-dir", data_dir, "snooze", BAR_FINGERPRINT, "--hours", "2"]) == 0
        assert _state(data_dir) == SuppressionState.SNOOZED

    def test_invalid_fingerprint(self, data_dir):
        assert main(["--data-dir", data_dir, "mute", "nope"]) == 1

    def test_list(self, data_dir, capsys):
        main(["--data-dir", data_dir, "mute", BAR_FINGERPRINT])
        capsys.readouterr()

        assert main(["--data-dir", data_dir, "list"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line)["fingerprint"] for line in lines] == [BAR_FINGERPRINT]

    def test_send(self, data_dir, capsys):
        with patch("notify_mute.dispatcher.SlackWebhookChannel") as channel_cls:
            assert main(["--data-dir", data_dir, "send", "--key", "Bar", "--text", "Foo"]) == 0
            assert main(["--data-dir", data_dir, "send", "--key", "Bar", "--text", "Foo"]) == 0

        assert capsys.readouterr().out.split() == ["sent", "suppressed"]
        channel_cls.return_value.send.assert_called_once()
        assert _state(data_dir) == SuppressionState.SNOOZED

    def test_store_opened_from_configured_data_dir(self, tmp_path, monkeypatch):
        configured = tmp_path / "configured"
        monkeypatch.setattr(Config, "DATA_DIR", str(configured))

        assert main(["mute", BAR_FINGERPRINT]) == 0

        assert (configured / "suppression.db").exists()
        assert _state(str(configured)) == SuppressionState.MUTED
