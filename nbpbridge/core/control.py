"""Batched wire-set requests arriving on the control channel."""

from __future__ import annotations

import logging

from nbpbridge.core.codec import decode_request, encode_reply
from nbpbridge.core.errors import RequestDecodeError
from nbpbridge.core.model import ControlReply, ControlRequest, DeviceState, is_known_wire, wire_label
from nbpbridge.transports.base import ControlChannel, DeviceSession

LOGGER = logging.getLogger(__name__)


def apply_request(device: DeviceSession, state: DeviceState, request: ControlRequest) -> ControlReply:
    """Apply each item in order; one failure never skips the items after it."""
    results: list[bool] = []
    for item in request.items:
        if not is_known_wire(item.wire):
            LOGGER.warning("Refusing unknown wire %d", item.wire)
            results.append(False)
            continue
        ok = bool(device.set_wire(item.wire, item.connect))
        if ok:
            state.wires[item.wire] = item.connect
        else:
            LOGGER.warning(
                "Failed to %s wire %s",
                "connect" if item.connect else "disconnect",
                wire_label(item.wire),
            )
        results.append(ok)
    return ControlReply(success=tuple(results))


def handle_control(channel: ControlChannel, device: DeviceSession, state: DeviceState) -> ControlReply:
    data = channel.recv()
    try:
        request = decode_request(data)
    except RequestDecodeError as exc:
        LOGGER.error("Rejecting control request: %s", exc)
        request = ControlRequest(items=())
    reply = apply_request(device, state, request)
    channel.send(encode_reply(reply))
    return reply
