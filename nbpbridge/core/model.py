"""Core data models used across the bridge loop, codec, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

CHARGING_FLAG_MASK = 0x40


class MessageType(Enum):
    """Device-protocol messages the bridge sends to the backplate."""

    RESET = "reset"
    REQ_PERIODIC = "req_periodic"


class HVACWire(IntEnum):
    W1 = 0
    Y1 = 1
    G = 2
    OB = 3
    W2 = 4
    Y2 = 5
    STAR = 6


def is_known_wire(wire: int) -> bool:
    try:
        HVACWire(wire)
    except ValueError:
        return False
    return True


def wire_label(wire: int) -> str:
    try:
        return HVACWire(wire).name
    except ValueError:
        return str(wire)


@dataclass(frozen=True)
class WeatherReading:
    temperature: int
    humidity: int


@dataclass(frozen=True)
class PowerStatus:
    """Raw power telemetry as delivered by the backplate.

    Only ``flags`` and ``vb_mv`` are carried into device state and events; the
    remaining readings are logged.
    """

    state: int
    flags: int
    vi_cv: int
    vo_mv: int
    vb_mv: int
    px0: int = 0
    u1: int = 0
    u2: int = 0
    u3: int = 0
    pins: int = 0
    wires: int = 0


@dataclass(frozen=True)
class PowerReading:
    flags: int
    voltage: int

    @property
    def charging(self) -> bool:
        return not (self.flags & CHARGING_FLAG_MASK)


@dataclass(frozen=True)
class Battery:
    charging: bool
    voltage: int


@dataclass(frozen=True)
class WireChange:
    wire: int
    connect: bool


@dataclass(frozen=True)
class OutboundEvent:
    weather: WeatherReading | None = None
    battery: Battery | None = None
    wire_change: tuple[WireChange, ...] = ()


@dataclass(frozen=True)
class ControlRequest:
    items: tuple[WireChange, ...]


@dataclass(frozen=True)
class ControlReply:
    success: tuple[bool, ...]


@dataclass(frozen=True)
class Endpoints:
    control: str
    events: str


@dataclass(frozen=True)
class BridgeConfig:
    device_id: str
    backplate_device: str
    driver: str
    endpoints: Endpoints
    periodic_interval_s: float = 30.0
    debug_frames: bool = False


@dataclass
class DeviceState:
    """Last-known backplate state.

    Mutated on the loop thread only: by device callbacks, and by control
    requests whose wire set succeeded.
    """

    weather: WeatherReading | None = None
    power: PowerReading | None = None
    wires: dict[int, bool] = field(default_factory=dict)

    def wire_asserted(self, wire: int) -> bool | None:
        return self.wires.get(wire)

    def known_wires(self) -> list[WireChange]:
        return [WireChange(wire=wire, connect=self.wires[wire]) for wire in sorted(self.wires)]
