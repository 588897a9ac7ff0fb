"""The bridge loop: one poll point for the device link, control and publish channels."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import zmq

from nbpbridge.core.control import handle_control
from nbpbridge.core.events import EventEncoder
from nbpbridge.core.model import DeviceState, HVACWire, MessageType
from nbpbridge.core.snapshot import handle_subscription
from nbpbridge.transports.base import ControlChannel, DeviceListener, DeviceSession, EventPublisher

DEFAULT_PERIODIC_INTERVAL_S = 30.0
LOGGER = logging.getLogger(__name__)


@dataclass
class BridgeSession:
    device: DeviceSession
    control: ControlChannel
    publisher: EventPublisher
    state: DeviceState = field(default_factory=DeviceState)
    periodic_interval_s: float = DEFAULT_PERIODIC_INTERVAL_S
    # Starts in the past so the first iteration requests periodic data.
    next_refresh: float = float("-inf")


class BridgeLoop:
    def __init__(
        self,
        session: BridgeSession,
        *,
        listener: DeviceListener | None = None,
        poller: Any | None = None,
        clock: Callable[[], float] = time.monotonic,
        debug_frames: bool = False,
    ) -> None:
        self.session = session
        self.listener = listener or EventEncoder(
            session.state,
            session.publisher,
            reset_hook=self._on_reset_complete,
            debug_frames=debug_frames,
        )
        self._clock = clock
        self._device_fd = session.device.fileno()
        self._poller = poller or zmq.Poller()
        self._poller.register(self._device_fd, zmq.POLLIN)
        self._poller.register(session.control.socket, zmq.POLLIN)
        self._poller.register(session.publisher.socket, zmq.POLLIN)

    def request_periodic(self, now: float) -> None:
        self.session.next_refresh = now + self.session.periodic_interval_s
        self.session.device.send(MessageType.REQ_PERIODIC)
        LOGGER.debug("Periodic data request")

    def _on_reset_complete(self) -> None:
        self.sync_wires()
        self.request_periodic(self._clock())
        self.session.publisher.bind()

    def sync_wires(self) -> None:
        """Seed wire state with whatever the backplate already reports as asserted."""
        for wire in HVACWire:
            asserted = self.session.device.wire_asserted(wire)
            if asserted is not None:
                self.session.state.wires[int(wire)] = asserted

    def poll_timeout_ms(self, now: float) -> int:
        return max(0, math.ceil((self.session.next_refresh - now) * 1000))

    def run_once(self) -> None:
        session = self.session
        now = self._clock()
        if now >= session.next_refresh:
            self.request_periodic(now)

        try:
            ready = dict(self._poller.poll(self.poll_timeout_ms(now)))
        except zmq.ZMQError as exc:
            LOGGER.debug("Poll failed, retrying next cycle: %s", exc)
            return
        if not ready:
            return

        if ready.get(self._device_fd, 0) & zmq.POLLIN:
            session.device.read(self.listener)
        if ready.get(session.control.socket, 0) & zmq.POLLIN:
            handle_control(session.control, session.device, session.state)
        if ready.get(session.publisher.socket, 0) & zmq.POLLIN:
            handle_subscription(session.publisher, session.state)

    def run(self) -> None:
        LOGGER.info("Bridge loop started")
        while True:
            self.run_once()
