"""Backplate driver loading.

The framed device protocol lives outside this package. A driver is any
callable ``open(path) -> DeviceSession`` referenced as ``package.module:attr``.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable

from nbpbridge.core.errors import DeviceOpenError, DeviceResetError
from nbpbridge.core.model import MessageType
from nbpbridge.transports.base import DeviceSession

LOGGER = logging.getLogger(__name__)

DriverFactory = Callable[[str], DeviceSession | None]


def load_driver(reference: str) -> DriverFactory:
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise DeviceOpenError(
            f"Invalid driver reference '{reference}'. Expected 'package.module:callable'."
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise DeviceOpenError(f"Could not import driver module '{module_name}': {exc}") from exc

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise DeviceOpenError(f"Driver '{reference}' is not a callable")
    return factory


def open_device(reference: str, path: str) -> DeviceSession:
    factory = load_driver(reference)
    try:
        device = factory(path)
    except OSError as exc:
        raise DeviceOpenError(f"Could not open backplate link {path}: {exc}") from exc
    if device is None:
        raise DeviceOpenError(f"Driver '{reference}' failed to open {path}")
    LOGGER.info("Opened backplate link %s", path)
    return device


def reset_device(device: DeviceSession) -> None:
    if not device.send(MessageType.RESET):
        raise DeviceResetError("Could not send reset to backplate")
    LOGGER.debug("Backplate reset requested")
