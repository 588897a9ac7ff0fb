"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import zmq

from nbpbridge.core.bridge import BridgeLoop, BridgeSession
from nbpbridge.core.codec import decode_event, decode_reply, encode_request
from nbpbridge.core.errors import ClientTimeoutError
from nbpbridge.core.model import BridgeConfig, ControlReply, ControlRequest, OutboundEvent, WireChange
from nbpbridge.transports.device import open_device, reset_device
from nbpbridge.transports.zmq_channels import ZMQControlChannel, ZMQEventPublisher

LOGGER = logging.getLogger(__name__)


def open_bridge(config: BridgeConfig, *, context: zmq.Context | None = None) -> BridgeLoop:
    """Open the backplate, request a reset and wire up both channels.

    The events endpoint stays unbound until the backplate reports that its
    reset is complete.
    """
    device = open_device(config.driver, config.backplate_device)
    reset_device(device)

    context = context or zmq.Context.instance()
    control = ZMQControlChannel(context, config.endpoints.control)
    publisher = ZMQEventPublisher(context, config.endpoints.events)

    session = BridgeSession(
        device=device,
        control=control,
        publisher=publisher,
        periodic_interval_s=config.periodic_interval_s,
    )
    return BridgeLoop(session, debug_frames=config.debug_frames)


def client_endpoint(endpoint: str) -> str:
    """Turn a wildcard bind address into one a local client can connect to."""
    return endpoint.replace("://*:", "://127.0.0.1:").replace("://0.0.0.0:", "://127.0.0.1:")


def send_wire_request(
    endpoint: str,
    items: Sequence[WireChange],
    *,
    timeout_s: float = 5.0,
    context: zmq.Context | None = None,
) -> ControlReply:
    context = context or zmq.Context.instance()
    socket = context.socket(zmq.REQ)
    socket.setsockopt(zmq.LINGER, 0)
    socket.setsockopt(zmq.RCVTIMEO, int(timeout_s * 1000))
    try:
        socket.connect(endpoint)
        socket.send(encode_request(ControlRequest(items=tuple(items))))
        try:
            data = socket.recv()
        except zmq.Again as exc:
            raise ClientTimeoutError(f"No reply from {endpoint} within {timeout_s}s") from exc
    finally:
        socket.close()
    return decode_reply(data)


def watch_events(
    endpoint: str,
    *,
    timeout_s: float | None = None,
    context: zmq.Context | None = None,
) -> Iterator[OutboundEvent]:
    """Yield events published by a running bridge.

    The first event after connecting is the bridge's full-state snapshot.
    """
    context = context or zmq.Context.instance()
    socket = context.socket(zmq.SUB)
    socket.setsockopt(zmq.LINGER, 0)
    if timeout_s is not None:
        socket.setsockopt(zmq.RCVTIMEO, int(timeout_s * 1000))
    socket.setsockopt(zmq.SUBSCRIBE, b"")
    try:
        socket.connect(endpoint)
        while True:
            try:
                data = socket.recv()
            except zmq.Again as exc:
                raise ClientTimeoutError(f"No event from {endpoint} within {timeout_s}s") from exc
            yield decode_event(data)
    finally:
        socket.close()
