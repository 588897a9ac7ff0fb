"""JSON wire format for events, control requests and replies."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import ValidationError, validators

from nbpbridge.core.errors import EventDecodeError, RequestDecodeError
from nbpbridge.core.model import (
    Battery,
    ControlReply,
    ControlRequest,
    OutboundEvent,
    WeatherReading,
    WireChange,
)


@lru_cache(maxsize=1)
def _request_validator() -> Any:
    schema_text = resources.files("nbpbridge.schemas").joinpath("request.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _dumps(doc: dict[str, Any]) -> bytes:
    return json.dumps(doc, separators=(",", ":")).encode("utf-8")


def _loads(data: bytes, error_cls: type[Exception]) -> Any:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise error_cls(f"Payload is not valid JSON: {exc}") from exc


def _wire_doc(change: WireChange) -> dict[str, Any]:
    return {"wire": change.wire, "connect": change.connect}


def encode_event(event: OutboundEvent) -> bytes:
    doc: dict[str, Any] = {}
    if event.weather is not None:
        doc["weather"] = {
            "temperature": event.weather.temperature,
            "humidity": event.weather.humidity,
        }
    if event.battery is not None:
        doc["battery"] = {
            "charging": event.battery.charging,
            "voltage": event.battery.voltage,
        }
    if event.wire_change:
        doc["wire_change"] = [_wire_doc(change) for change in event.wire_change]
    return _dumps(doc)


def decode_event(data: bytes) -> OutboundEvent:
    doc = _loads(data, EventDecodeError)
    if not isinstance(doc, dict):
        raise EventDecodeError("Event payload must be a JSON object")
    try:
        weather = doc.get("weather")
        battery = doc.get("battery")
        return OutboundEvent(
            weather=WeatherReading(int(weather["temperature"]), int(weather["humidity"]))
            if weather is not None
            else None,
            battery=Battery(bool(battery["charging"]), int(battery["voltage"]))
            if battery is not None
            else None,
            wire_change=tuple(
                WireChange(wire=int(item["wire"]), connect=bool(item["connect"]))
                for item in doc.get("wire_change", [])
            ),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise EventDecodeError(f"Malformed event payload: {exc}") from exc


def encode_request(request: ControlRequest) -> bytes:
    return _dumps({"sethvacwire": [_wire_doc(item) for item in request.items]})


def decode_request(data: bytes) -> ControlRequest:
    doc = _loads(data, RequestDecodeError)
    try:
        _request_validator().validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise RequestDecodeError(f"Invalid control request{where}: {exc.message}") from exc

    items: list[WireChange] = []
    for index, item in enumerate(doc.get("sethvacwire", [])):
        wire = item["wire"]
        # jsonschema's "integer" also admits whole floats such as 2.0.
        if not isinstance(wire, int) or isinstance(wire, bool):
            raise RequestDecodeError(
                f"Invalid control request (sethvacwire.{index}.wire): {wire!r} is not an integer"
            )
        items.append(WireChange(wire=wire, connect=item["connect"]))
    return ControlRequest(items=tuple(items))


def encode_reply(reply: ControlReply) -> bytes:
    return _dumps({"sethvacwiresuccess": list(reply.success)})


def decode_reply(data: bytes) -> ControlReply:
    doc = _loads(data, EventDecodeError)
    if not isinstance(doc, dict):
        raise EventDecodeError("Reply payload must be a JSON object")
    success = doc.get("sethvacwiresuccess", [])
    if not isinstance(success, list) or not all(isinstance(item, bool) for item in success):
        raise EventDecodeError("Reply field 'sethvacwiresuccess' must be a list of booleans")
    return ControlReply(success=tuple(success))
