"""Translation of backplate callbacks into published events."""

from __future__ import annotations

import logging
from collections.abc import Callable

from nbpbridge.core.codec import encode_event
from nbpbridge.core.model import (
    Battery,
    DeviceState,
    OutboundEvent,
    PowerReading,
    PowerStatus,
    WeatherReading,
    WireChange,
)
from nbpbridge.transports.base import EventPublisher

LOGGER = logging.getLogger(__name__)


def format_weather(reading: WeatherReading) -> str:
    temperature = reading.temperature
    humidity = reading.humidity
    fahrenheit = temperature * 90 // 5 + 32000
    return (
        f"Temperature {temperature // 100:3d}.{temperature % 100:02d} C "
        f"({fahrenheit // 1000:4d}.{fahrenheit % 1000:03d} F)    "
        f"Humidity: {humidity // 10}.{humidity % 10}%"
    )


def format_power_status(status: PowerStatus) -> str:
    # Same layout as the stock firmware log so one regex charts both.
    return (
        f"power status: flags {status.flags:02x}, "
        f"vi {status.vi_cv // 100}.{status.vi_cv % 100:02d}V, "
        f"vo {status.vo_mv // 1000}.{status.vo_mv % 1000:03d}V; "
        f"vb {status.vb_mv // 1000}.{status.vb_mv % 1000:03d}V"
    )


def battery_from_power(power: PowerReading) -> Battery:
    return Battery(charging=power.charging, voltage=power.voltage)


def weather_event(reading: WeatherReading) -> OutboundEvent:
    return OutboundEvent(weather=reading)


def battery_event(power: PowerReading) -> OutboundEvent:
    return OutboundEvent(battery=battery_from_power(power))


def wire_event(wire: int, connect: bool) -> OutboundEvent:
    return OutboundEvent(wire_change=(WireChange(wire=wire, connect=connect),))


class EventEncoder:
    """Device listener that updates state and publishes one event per callback.

    ``reset_hook`` is consumed by the first reset-complete delivery; any later
    delivery finds no hook and is ignored.
    """

    def __init__(
        self,
        state: DeviceState,
        publisher: EventPublisher,
        *,
        reset_hook: Callable[[], None] | None = None,
        debug_frames: bool = False,
    ) -> None:
        self.state = state
        self.publisher = publisher
        self.reset_hook = reset_hook
        self.debug_frames = debug_frames

    def emit(self, event: OutboundEvent) -> None:
        self.publisher.publish(encode_event(event))

    def on_log(self, text: str) -> None:
        LOGGER.info("Backplate: %s", text)

    def on_weather(self, temperature: int, humidity: int) -> None:
        reading = WeatherReading(temperature=temperature, humidity=humidity)
        self.state.weather = reading
        LOGGER.info("%s", format_weather(reading))
        self.emit(weather_event(reading))

    def on_power_status(self, status: PowerStatus) -> None:
        power = PowerReading(flags=status.flags, voltage=status.vb_mv)
        self.state.power = power
        LOGGER.info("%s", format_power_status(status))
        LOGGER.debug(
            "power status raw: state %02x px0 %02x u1 %d u2 %d u3 %d pins %02x wires %02x",
            status.state,
            status.px0,
            status.u1,
            status.u2,
            status.u3,
            status.pins,
            status.wires,
        )
        self.emit(battery_event(power))

    def on_wire_asserted(self, wire: int, connect: bool) -> None:
        LOGGER.info("Setting FET %u to %d", wire, connect)
        self.state.wires[wire] = connect
        self.emit(wire_event(wire, connect))

    def on_reset_complete(self, present_mask: int) -> None:
        hook = self.reset_hook
        if hook is None:
            LOGGER.debug("Ignoring repeated reset-complete (wires %04x)", present_mask)
            return
        self.reset_hook = None
        LOGGER.info("Backplate reset complete")
        hook()

    def on_message(self, message_type: int, payload: bytes) -> None:
        if self.debug_frames:
            LOGGER.debug("msg %04x data %s", message_type, payload.hex())
