from __future__ import annotations

from typer.testing import CliRunner

from nbpbridge import cli
from nbpbridge.core.errors import ClientTimeoutError, ConfigLoadError, DeviceResetError
from nbpbridge.core.model import (
    Battery,
    BridgeConfig,
    ControlReply,
    Endpoints,
    OutboundEvent,
    WeatherReading,
    WireChange,
)

CONFIG = BridgeConfig(
    device_id="nbp",
    backplate_device="/dev/ttyO2",
    driver="fake_backplate:open_backplate",
    endpoints=Endpoints(control="tcp://*:5550", events="tcp://*:5551"),
)

runner = CliRunner()


def _fake_load_config(path=None, device_id="nbp"):
    return CONFIG


def test_config_command(monkeypatch):
    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    result = runner.invoke(cli.app, ["config"])
    assert result.exit_code == 0
    assert "device: nbp" in result.stdout
    assert "control: tcp://*:5550" in result.stdout
    assert "periodic_interval_s: 30" in result.stdout


def test_config_error_is_clean(monkeypatch):
    def failing(path=None, device_id="nbp"):
        raise ConfigLoadError("No config file found")

    monkeypatch.setattr(cli, "load_config", failing)
    result = runner.invoke(cli.app, ["config"])
    assert result.exit_code == 1
    assert "Error: No config file found" in result.stderr
    assert "Traceback" not in result.stderr


def test_run_applies_backplate_override(monkeypatch):
    seen = []

    class FakeBridge:
        def run(self):
            seen.append("run")

    def fake_open_bridge(config):
        seen.append(config.backplate_device)
        return FakeBridge()

    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    monkeypatch.setattr(cli, "open_bridge", fake_open_bridge)
    result = runner.invoke(cli.app, ["run", "--backplate", "/dev/ttyUSB0"])
    assert result.exit_code == 0
    assert seen == ["/dev/ttyUSB0", "run"]


def test_run_setup_failure_exits_nonzero(monkeypatch):
    def fake_open_bridge(config):
        raise DeviceResetError("Could not send reset to backplate")

    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    monkeypatch.setattr(cli, "open_bridge", fake_open_bridge)
    result = runner.invoke(cli.app, ["run"])
    assert result.exit_code == 1
    assert "Error: Could not send reset to backplate" in result.stderr


def test_set_wire_reports_each_item(monkeypatch):
    calls = []

    def fake_send(endpoint, items, timeout_s):
        calls.append((endpoint, list(items)))
        return ControlReply(success=(True, False))

    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    monkeypatch.setattr(cli, "send_wire_request", fake_send)
    result = runner.invoke(cli.app, ["set-wire", "g=on", "5=off"])
    assert result.exit_code == 1
    assert "G=on: ok" in result.stdout
    assert "Y2=off: FAILED" in result.stdout
    assert calls == [("tcp://127.0.0.1:5550", [WireChange(2, True), WireChange(5, False)])]


def test_set_wire_rejects_bad_spec(monkeypatch):
    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    result = runner.invoke(cli.app, ["set-wire", "Q9=on"])
    assert result.exit_code != 0


def test_set_wire_timeout(monkeypatch):
    def fake_send(endpoint, items, timeout_s):
        raise ClientTimeoutError("No reply from tcp://127.0.0.1:5550 within 5.0s")

    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    monkeypatch.setattr(cli, "send_wire_request", fake_send)
    result = runner.invoke(cli.app, ["set-wire", "W1=on"])
    assert result.exit_code == 1
    assert "Error: No reply" in result.stderr


def test_watch_prints_events(monkeypatch):
    def fake_watch(endpoint, timeout_s=None):
        assert endpoint == "tcp://127.0.0.1:5551"
        yield OutboundEvent()
        yield OutboundEvent(weather=WeatherReading(2150, 455), battery=Battery(True, 3712))
        yield OutboundEvent(wire_change=(WireChange(0, True),))
        raise AssertionError("watch should stop after --count events")

    monkeypatch.setattr(cli, "load_config", _fake_load_config)
    monkeypatch.setattr(cli, "watch_events", fake_watch)
    result = runner.invoke(cli.app, ["watch", "--count", "3"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines == [
        "(no data)",
        "weather temperature=21.50C humidity=45.5%; battery 3.712V charging",
        "wire W1=on",
    ]
