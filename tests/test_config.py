"""Tests for configuration loading, validation and address helpers."""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any

import pytest

from hms2osc.config import (
    Config,
    SensorConfig,
    bind_addr_for,
    load_config,
    load_config_from_dict,
    resolve_host,
    resolve_socket_addr,
    split_host_port,
    validate_config,
)
from hms2osc.errors import ConfigError


# ---------------------------------------------------------------------------
# Sample raw dicts
# ---------------------------------------------------------------------------

VALID_RAW: dict[str, Any] = {
    "bridgeHost": "192.168.1.20",
    "oscOutAddr": "127.0.0.1:9000",
    "pollInterval": 0.25,
    "sensors": [
        {"name": "Hue motion sensor 1", "oscAddress": "/hall/presence", "sendChangesOnly": True},
        {"name": "Hue temperature sensor 1", "oscAddress": "/hall/temp", "enabled": False},
    ],
}


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict."""

    def test_parses_valid_dict(self) -> None:
        config = load_config_from_dict(VALID_RAW)
        assert config.bridge_host == "192.168.1.20"
        assert config.osc_out_addr == "127.0.0.1:9000"
        assert config.poll_interval == 0.25
        assert len(config.sensors) == 2
        assert config.sensors[0].osc_address == "/hall/presence"

    def test_sensor_defaults(self) -> None:
        config = load_config_from_dict(VALID_RAW)
        first, second = config.sensors
        assert first.enabled is True
        assert first.send_changes_only is True
        assert second.enabled is False
        assert second.send_changes_only is False

    def test_default_poll_interval(self) -> None:
        raw = {k: v for k, v in VALID_RAW.items() if k != "pollInterval"}
        assert load_config_from_dict(raw).poll_interval == 1.0

    def test_missing_bridge_host(self) -> None:
        raw = {k: v for k, v in VALID_RAW.items() if k != "bridgeHost"}
        with pytest.raises(ConfigError, match="bridgeHost"):
            load_config_from_dict(raw)

    def test_sensor_missing_osc_address(self) -> None:
        raw = dict(VALID_RAW, sensors=[{"name": "A"}])
        with pytest.raises(ConfigError, match="oscAddress"):
            load_config_from_dict(raw)

    def test_non_numeric_poll_interval(self) -> None:
        raw = dict(VALID_RAW, pollInterval="often")
        with pytest.raises(ConfigError, match="pollInterval"):
            load_config_from_dict(raw)

    def test_invalid_values_rejected(self) -> None:
        raw = dict(VALID_RAW, pollInterval=-1)
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config_from_dict(raw)

    def test_string_enabled_rejected(self) -> None:
        raw = dict(VALID_RAW, sensors=[{"name": "A", "oscAddress": "/a", "enabled": "false"}])
        with pytest.raises(ConfigError, match="Sensor #0: field 'enabled' must be a boolean"):
            load_config_from_dict(raw)

    def test_numeric_send_changes_only_rejected(self) -> None:
        raw = dict(VALID_RAW, sensors=[{"name": "A", "oscAddress": "/a", "sendChangesOnly": 1}])
        with pytest.raises(ConfigError, match="sendChangesOnly"):
            load_config_from_dict(raw)

    def test_null_sensor_name_rejected(self) -> None:
        raw = dict(VALID_RAW, sensors=[{"name": None, "oscAddress": "/a"}])
        with pytest.raises(ConfigError, match="Sensor #0: field 'name' must be a string"):
            load_config_from_dict(raw)

    def test_numeric_bridge_host_rejected(self) -> None:
        raw = dict(VALID_RAW, bridgeHost=192)
        with pytest.raises(ConfigError, match="bridgeHost"):
            load_config_from_dict(raw)

    def test_boolean_poll_interval_rejected(self) -> None:
        raw = dict(VALID_RAW, pollInterval=True)
        with pytest.raises(ConfigError, match="pollInterval must be a number"):
            load_config_from_dict(raw)

    @pytest.mark.parametrize("interval", [float("nan"), float("inf")])
    def test_non_finite_poll_interval_rejected(self, interval: float) -> None:
        raw = dict(VALID_RAW, pollInterval=interval)
        with pytest.raises(ConfigError, match="finite"):
            load_config_from_dict(raw)


class TestLoadConfigFromFile:
    """Tests for load_config with JSON and YAML files."""

    def test_loads_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(VALID_RAW), encoding="utf-8")
        config = load_config(path)
        assert config.sensors[0].name == "Hue motion sensor 1"

    def test_loads_tab_indented_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(VALID_RAW, indent="\t"), encoding="utf-8")
        config = load_config(path)
        assert config.poll_interval == 0.25
        assert config.sensors[1].enabled is False

    def test_infinite_poll_interval_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            '{"bridgeHost": "h", "oscOutAddr": "h:1", "pollInterval": Infinity, "sensors": []}',
            encoding="utf-8",
        )
        with pytest.raises(ConfigError, match="finite"):
            load_config(path)

    def test_loads_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "bridgeHost: hue.local\n"
            "oscOutAddr: localhost:9000\n"
            "sensors:\n"
            "  - name: Motion\n"
            "    oscAddress: /motion\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.bridge_host == "hue.local"
        assert config.sensors[0].osc_address == "/motion"

    def test_file_not_found(self) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config("/nonexistent/path/config.json")

    def test_malformed_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"bridgeHost": [', encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot parse"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


class TestValidateConfig:
    """Tests for config validation."""

    def _valid_config(self) -> Config:
        return Config(
            bridge_host="10.0.0.2",
            osc_out_addr="127.0.0.1:9000",
            poll_interval=1.0,
            sensors=[SensorConfig(name="A", osc_address="/a")],
        )

    def test_valid_config_has_no_errors(self) -> None:
        assert validate_config(self._valid_config()) == []

    def test_empty_bridge_host(self) -> None:
        config = self._valid_config()
        config.bridge_host = " "
        assert any("bridgeHost" in e for e in validate_config(config))

    def test_bad_osc_out_addr(self) -> None:
        config = self._valid_config()
        config.osc_out_addr = "localhost"
        assert any("host:port" in e for e in validate_config(config))

    def test_negative_poll_interval(self) -> None:
        config = self._valid_config()
        config.poll_interval = -0.5
        assert any("pollInterval" in e for e in validate_config(config))

    def test_osc_address_must_start_with_slash(self) -> None:
        config = self._valid_config()
        config.sensors = [SensorConfig(name="A", osc_address="a")]
        assert any("oscAddress" in e for e in validate_config(config))

    def test_non_finite_poll_interval(self) -> None:
        config = self._valid_config()
        config.poll_interval = float("nan")
        assert any("finite" in e for e in validate_config(config))

    def test_all_sensors_disabled_is_valid(self) -> None:
        config = self._valid_config()
        config.sensors = [SensorConfig(name="A", osc_address="/a", enabled=False)]
        assert validate_config(config) == []

    def test_no_sensors_is_valid(self) -> None:
        config = self._valid_config()
        config.sensors = []
        assert validate_config(config) == []


class TestAddressHelpers:
    """Tests for host/port parsing and resolution."""

    def test_split_ipv4(self) -> None:
        assert split_host_port("127.0.0.1:9000") == ("127.0.0.1", 9000)

    def test_split_ipv6(self) -> None:
        assert split_host_port("[::1]:9000") == ("::1", 9000)

    @pytest.mark.parametrize("addr", ["localhost", ":9000", "host:port", "host:70000"])
    def test_split_rejects(self, addr: str) -> None:
        with pytest.raises(ConfigError):
            split_host_port(addr)

    def test_resolve_host_literal(self) -> None:
        assert resolve_host("127.0.0.1") == "127.0.0.1"

    def test_resolve_socket_addr_ipv4(self) -> None:
        family, sockaddr = resolve_socket_addr("127.0.0.1:9000")
        assert family == socket.AF_INET
        assert sockaddr == ("127.0.0.1", 9000)

    def test_unresolvable_host(self) -> None:
        with pytest.raises(ConfigError, match="Cannot resolve"):
            resolve_host("no-such-host.invalid")

    def test_bind_addr_matches_family(self) -> None:
        assert bind_addr_for(socket.AF_INET) == ("0.0.0.0", 0)
        assert bind_addr_for(socket.AF_INET6) == ("::", 0)
