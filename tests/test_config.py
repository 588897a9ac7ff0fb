from __future__ import annotations

from pathlib import Path

import pytest

from nbpbridge.core.config import load_config
from nbpbridge.core.errors import ConfigLoadError, ConfigValidationError


def _write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_from_xdg_with_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write_config(
        tmp_path / "cfg" / "nbpbridge" / "config.yaml",
        """
devices:
  nbp:
    driver: backplate_driver:open_backplate
    endpoints:
      control: tcp://*:5550
      events: tcp://*:5551
""",
    )

    config = load_config()
    assert config.device_id == "nbp"
    assert config.backplate_device == "/dev/ttyO2"
    assert config.driver == "backplate_driver:open_backplate"
    assert config.endpoints.control == "tcp://*:5550"
    assert config.endpoints.events == "tcp://*:5551"
    assert config.periodic_interval_s == 30.0
    assert config.debug_frames is False


def test_explicit_path_and_device_section(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "bridge.yaml",
        """
devices:
  nbp:
    driver: a.b:c
    endpoints: {control: "tcp://*:1", events: "tcp://*:2"}
  upstairs:
    backplate_device: /dev/ttyUSB1
    driver: a.b:c
    endpoints: {control: "ipc:///run/up-ctl", events: "ipc:///run/up-ev"}
    periodic_interval_s: 5
    debug_frames: true
""",
    )

    config = load_config(path, "upstairs")
    assert config.backplate_device == "/dev/ttyUSB1"
    assert config.periodic_interval_s == 5.0
    assert config.debug_frames is True


def test_unknown_device_section_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "bridge.yaml",
        """
devices:
  nbp:
    driver: a.b:c
    endpoints: {control: "tcp://*:1", events: "tcp://*:2"}
""",
    )

    with pytest.raises(ConfigValidationError) as exc:
        load_config(path, "garage")
    assert "Available: nbp" in str(exc.value)


def test_missing_endpoints_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "bridge.yaml",
        """
devices:
  nbp:
    driver: a.b:c
""",
    )

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "bridge.yaml",
        """
devices:
  nbp:
    driver: a.b:c
    driver: d.e:f
    endpoints: {control: "tcp://*:1", events: "tcp://*:2"}
""",
    )

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_non_boolean_debug_flag_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "bridge.yaml",
        """
devices:
  nbp:
    driver: a.b:c
    endpoints: {control: "tcp://*:1", events: "tcp://*:2"}
    debug_frames: "yes"
""",
    )

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_missing_file_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "content",
    [
        'devices:\n  nbp:\n    driver: a.b:c\n    endpoints: {control: "tcp://*:1", control: "tcp://*:3", events: "tcp://*:2"}\n',
        "- devices\n",
        "devices: [unterminated\n",
    ],
)
def test_malformed_documents_rejected(tmp_path: Path, content: str) -> None:
    path = _write_config(tmp_path / "bridge.yaml", content)

    with pytest.raises(ConfigValidationError):
        load_config(path)
