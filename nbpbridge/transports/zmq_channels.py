"""ZeroMQ control and publish channels."""

from __future__ import annotations

import logging

import zmq

from nbpbridge.core.errors import EndpointBindError

LOGGER = logging.getLogger(__name__)


def _bind(socket: zmq.Socket, endpoint: str, *, name: str) -> None:
    try:
        socket.bind(endpoint)
    except zmq.ZMQError as exc:
        raise EndpointBindError(f"Could not bind {name} endpoint {endpoint}: {exc}") from exc
    LOGGER.info("Bound %s endpoint %s", name, endpoint)


class ZMQControlChannel:
    """Request/reply channel: one request in, one reply out per cycle."""

    def __init__(self, context: zmq.Context, endpoint: str) -> None:
        self.endpoint = endpoint
        self._socket = context.socket(zmq.REP)
        self._socket.setsockopt(zmq.LINGER, 0)
        _bind(self._socket, endpoint, name="control")

    @property
    def socket(self) -> zmq.Socket:
        return self._socket

    def recv(self) -> bytes:
        return self._socket.recv()

    def send(self, data: bytes) -> None:
        self._socket.send(data)

    def close(self) -> None:
        self._socket.close()


class ZMQEventPublisher:
    """XPUB socket that also surfaces subscription notifications.

    The socket is created unbound; ``bind`` is deferred until the backplate has
    confirmed its reset.
    """

    def __init__(self, context: zmq.Context, endpoint: str) -> None:
        self.endpoint = endpoint
        self.bound = False
        self._socket = context.socket(zmq.XPUB)
        self._socket.setsockopt(zmq.XPUB_VERBOSE, 1)
        self._socket.setsockopt(zmq.LINGER, 0)

    @property
    def socket(self) -> zmq.Socket:
        return self._socket

    def bind(self) -> None:
        _bind(self._socket, self.endpoint, name="events")
        self.bound = True

    def publish(self, data: bytes) -> None:
        self._socket.send(data)

    def recv_notification(self) -> bytes:
        return self._socket.recv()

    def close(self) -> None:
        self._socket.close()
