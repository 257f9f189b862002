"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from hms2osc import cli
from hms2osc.bridge_sim import (
    SimulatedBridge,
    SimulatedLightLevel,
    SimulatedPresence,
    SimulatedTemperature,
)

CONFIG: dict[str, Any] = {
    "bridgeHost": "127.0.0.1",
    "oscOutAddr": "127.0.0.1:9000",
    "pollInterval": 0.1,
    "sensors": [
        {"name": "Motion", "oscAddress": "/motion"},
        {"name": "Light", "oscAddress": "/light"},
        {"name": "Temp", "oscAddress": "/temp", "enabled": False},
    ],
}


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG), encoding="utf-8")
    return path


@pytest.fixture
def fake_bridge(monkeypatch: pytest.MonkeyPatch) -> SimulatedBridge:
    bridge = SimulatedBridge([
        SimulatedTemperature("Temp"),
        SimulatedPresence("Motion", presence=True),
        SimulatedLightLevel("Light", lightlevel=10001),
    ])
    monkeypatch.setattr(cli, "configure_logging", lambda log_filter: None)
    monkeypatch.setattr(cli, "ensure_user", lambda host, path, timeout=None: "user")
    monkeypatch.setattr(cli, "HueBridge", lambda host, username: bridge)
    return bridge


class TestListMode:
    """Tests for --list."""

    def test_prints_resolved_sensors(
        self,
        config_path: Path,
        fake_bridge: SimulatedBridge,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert cli.main(["--config", str(config_path), "--list"]) == 0

        lines = capsys.readouterr().out.strip().split("\n")
        records = [json.loads(line) for line in lines]
        assert [r["name"] for r in records] == ["Motion", "Light"]
        assert [r["id"] for r in records] == ["2", "3"]
        assert records[0]["state"] == {"presence": True}
        assert records[1]["kind"] == "LightLevel"

    def test_no_udp_send(
        self,
        config_path: Path,
        fake_bridge: SimulatedBridge,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _no_sender(*args: Any, **kwargs: Any) -> None:
            raise AssertionError("--list must not open a UDP sender")

        monkeypatch.setattr(cli, "OscUdpSender", _no_sender)
        assert cli.main(["--config", str(config_path), "--list"]) == 0
        assert fake_bridge.reads == 0


class TestErrors:
    """Fatal errors end with exit status 1."""

    def test_missing_config(self, fake_bridge: SimulatedBridge) -> None:
        assert cli.main(["--config", "/nonexistent/config.json"]) == 1

    def test_unmatched_sensor(
        self, tmp_path: Path, fake_bridge: SimulatedBridge, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(dict(CONFIG, sensors=[{"name": "Nope", "oscAddress": "/n"}])),
            encoding="utf-8",
        )
        with caplog.at_level(logging.ERROR, logger="hms2osc"):
            assert cli.main(["--config", str(path), "--list"]) == 1
        assert "Nope" in caplog.text

    def test_config_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.parse_args([])


class TestLogFilter:
    """Tests for --log parsing."""

    def test_plain_level(self) -> None:
        assert cli.parse_log_filter("debug") == (logging.DEBUG, {})

    def test_module_overrides(self) -> None:
        root, overrides = cli.parse_log_filter("hms2osc.engine=debug, warn")
        assert root == logging.WARNING
        assert overrides == {"hms2osc.engine": logging.DEBUG}

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            cli.parse_log_filter("chatty")

    def test_bad_level_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit):
            cli.parse_args(["--config", "c.json", "--log", "chatty"])

    def test_default_is_info(self) -> None:
        args = cli.parse_args(["--config", "c.json"])
        assert args.log == "info"
        assert args.list is False
        assert args.pair_timeout is None
