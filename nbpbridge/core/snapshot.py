"""Full-state snapshot published when a new subscriber joins."""

from __future__ import annotations

import logging

from nbpbridge.core.codec import encode_event
from nbpbridge.core.events import battery_from_power
from nbpbridge.core.model import DeviceState, OutboundEvent
from nbpbridge.transports.base import EventPublisher

LOGGER = logging.getLogger(__name__)


def is_subscribe(notification: bytes) -> bool:
    """XPUB notifications lead with 1 for subscribe and 0 for unsubscribe."""
    return len(notification) >= 1 and notification[0] != 0


def build_snapshot(state: DeviceState) -> OutboundEvent:
    return OutboundEvent(
        weather=state.weather,
        battery=battery_from_power(state.power) if state.power is not None else None,
        wire_change=tuple(state.known_wires()),
    )


def handle_subscription(publisher: EventPublisher, state: DeviceState) -> bool:
    notification = publisher.recv_notification()
    if not is_subscribe(notification):
        return False
    LOGGER.debug("New subscriber (topic %r), publishing snapshot", notification[1:])
    publisher.publish(encode_event(build_snapshot(state)))
    return True
