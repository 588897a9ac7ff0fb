"""Stable public API for building tooling on top of nbpbridge.

This module is the supported integration surface for third-party callers:
backplate drivers implement the protocols re-exported here, and remote tools
use `Client` to talk to a running bridge.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

from nbpbridge.core.bridge import BridgeLoop, BridgeSession
from nbpbridge.core.config import DEFAULT_DEVICE_ID, load_config
from nbpbridge.core.errors import (
    BridgeSetupError,
    ClientTimeoutError,
    CodecError,
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    DeviceOpenError,
    DeviceResetError,
    EndpointBindError,
    EventDecodeError,
    NbpBridgeError,
    RequestDecodeError,
)
from nbpbridge.core.model import (
    Battery,
    BridgeConfig,
    ControlReply,
    ControlRequest,
    DeviceState,
    HVACWire,
    MessageType,
    OutboundEvent,
    PowerStatus,
    WeatherReading,
    WireChange,
)
from nbpbridge.core.service import client_endpoint, open_bridge, send_wire_request, watch_events
from nbpbridge.transports.base import DeviceListener, DeviceSession

__all__ = [
    "NbpBridgeError",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "BridgeSetupError",
    "DeviceOpenError",
    "DeviceResetError",
    "EndpointBindError",
    "CodecError",
    "RequestDecodeError",
    "EventDecodeError",
    "ClientTimeoutError",
    "Battery",
    "BridgeConfig",
    "ControlReply",
    "ControlRequest",
    "DeviceState",
    "HVACWire",
    "MessageType",
    "OutboundEvent",
    "PowerStatus",
    "WeatherReading",
    "WireChange",
    "DeviceListener",
    "DeviceSession",
    "BridgeLoop",
    "BridgeSession",
    "open_bridge",
    "Client",
]


class Client:
    """Public client for a running bridge.

    Endpoints come from the same config file the bridge reads; wildcard bind
    addresses are rewritten to loopback.
    """

    def __init__(self, config: BridgeConfig, *, timeout_s: float = 5.0) -> None:
        self.config = config
        self.timeout_s = timeout_s

    @classmethod
    def from_config_file(
        cls,
        path: Path | None = None,
        *,
        device_id: str = DEFAULT_DEVICE_ID,
        timeout_s: float = 5.0,
    ) -> Client:
        return cls(load_config(path, device_id), timeout_s=timeout_s)

    @property
    def control_endpoint(self) -> str:
        return client_endpoint(self.config.endpoints.control)

    @property
    def events_endpoint(self) -> str:
        return client_endpoint(self.config.endpoints.events)

    def set_wires(self, items: Sequence[WireChange]) -> ControlReply:
        return send_wire_request(self.control_endpoint, items, timeout_s=self.timeout_s)

    def events(self, *, timeout_s: float | None = None) -> Iterator[OutboundEvent]:
        return watch_events(self.events_endpoint, timeout_s=timeout_s)
