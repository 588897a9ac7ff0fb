"""Transport interfaces."""

from __future__ import annotations

from typing import Any, Protocol

from nbpbridge.core.model import MessageType, PowerStatus


class DeviceListener(Protocol):
    def on_log(self, text: str) -> None: ...

    def on_weather(self, temperature: int, humidity: int) -> None: ...

    def on_power_status(self, status: PowerStatus) -> None: ...

    def on_wire_asserted(self, wire: int, connect: bool) -> None: ...

    def on_reset_complete(self, present_mask: int) -> None: ...

    def on_message(self, message_type: int, payload: bytes) -> None: ...


class DeviceSession(Protocol):
    def fileno(self) -> int:
        """Return the file descriptor of the device link for polling."""

    def send(self, message_type: MessageType, payload: bytes = b"") -> bool:
        """Send one framed message to the backplate."""

    def read(self, listener: DeviceListener) -> None:
        """Drain pending frames and dispatch each to the matching listener method."""

    def wire_asserted(self, wire: int) -> bool | None:
        """Return the asserted state of a wire, or None when unknown."""

    def set_wire(self, wire: int, connect: bool) -> bool:
        """Connect or disconnect a wire and report success."""


class ControlChannel(Protocol):
    @property
    def socket(self) -> Any: ...

    def recv(self) -> bytes: ...

    def send(self, data: bytes) -> None: ...


class EventPublisher(Protocol):
    @property
    def socket(self) -> Any: ...

    def bind(self) -> None: ...

    def publish(self, data: bytes) -> None: ...

    def recv_notification(self) -> bytes: ...
