from __future__ import annotations

from pathlib import Path

from nbpbridge import api
from nbpbridge.api import Client
from nbpbridge.core.model import ControlReply, WireChange


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "bridge.yaml"
    path.write_text(
        """
devices:
  nbp:
    driver: fake_backplate:open_backplate
    endpoints:
      control: tcp://0.0.0.0:5550
      events: ipc:///run/nbp-events
""",
        encoding="utf-8",
    )
    return path


def test_client_endpoints_from_config_file(tmp_path: Path) -> None:
    client = Client.from_config_file(_write_config(tmp_path), timeout_s=1.5)
    assert client.control_endpoint == "tcp://127.0.0.1:5550"
    assert client.events_endpoint == "ipc:///run/nbp-events"
    assert client.timeout_s == 1.5


def test_client_set_wires_uses_control_endpoint(monkeypatch, tmp_path: Path) -> None:
    calls = []

    def fake_send(endpoint, items, *, timeout_s):
        calls.append((endpoint, tuple(items), timeout_s))
        return ControlReply(success=(True,))

    monkeypatch.setattr(api, "send_wire_request", fake_send)
    client = Client.from_config_file(_write_config(tmp_path))

    reply = client.set_wires([WireChange(2, True)])
    assert reply.success == (True,)
    assert calls == [("tcp://127.0.0.1:5550", (WireChange(2, True),), 5.0)]


def test_public_names_exported() -> None:
    for name in ("open_bridge", "BridgeLoop", "DeviceSession", "DeviceListener", "NbpBridgeError"):
        assert name in api.__all__
        assert hasattr(api, name)
