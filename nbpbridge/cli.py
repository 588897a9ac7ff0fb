"""Typer CLI entrypoint."""

from __future__ import annotations

import dataclasses
import itertools
import logging
from pathlib import Path

import typer

from nbpbridge.core.config import DEFAULT_DEVICE_ID, load_config
from nbpbridge.core.errors import NbpBridgeError
from nbpbridge.core.model import HVACWire, OutboundEvent, WireChange, wire_label
from nbpbridge.core.service import client_endpoint, open_bridge, send_wire_request, watch_events

app = typer.Typer(help="Bridge a Nest-style HVAC backplate onto a ZeroMQ message bus")

_CONNECT_WORDS = {"on": True, "connect": True, "1": True, "true": True}
_DISCONNECT_WORDS = {"off": False, "disconnect": False, "0": False, "false": False}
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config.yaml")
DeviceIdOption = typer.Option(DEFAULT_DEVICE_ID, "--device-id", help="Device section in the config file")


def parse_wire_spec(spec: str) -> WireChange:
    """Parse ``WIRE=STATE`` where WIRE is a name (W1, G, ...) or number."""
    wire_text, sep, state_text = spec.partition("=")
    if not sep:
        raise typer.BadParameter(f"Expected WIRE=on|off, got '{spec}'")

    wire_text = wire_text.strip()
    if wire_text.isdigit():
        wire = int(wire_text)
    else:
        try:
            wire = HVACWire[wire_text.upper()]
        except KeyError:
            names = ", ".join(w.name for w in HVACWire)
            raise typer.BadParameter(f"Unknown wire '{wire_text}'. Known: {names}") from None

    state = state_text.strip().lower()
    if state in _CONNECT_WORDS:
        return WireChange(wire=int(wire), connect=True)
    if state in _DISCONNECT_WORDS:
        return WireChange(wire=int(wire), connect=False)
    raise typer.BadParameter(f"Unknown wire state '{state_text}'. Use on or off.")


def describe_event(event: OutboundEvent) -> str:
    parts: list[str] = []
    if event.weather is not None:
        parts.append(
            f"weather temperature={event.weather.temperature / 100:.2f}C "
            f"humidity={event.weather.humidity / 10:.1f}%"
        )
    if event.battery is not None:
        charging = "charging" if event.battery.charging else "discharging"
        parts.append(f"battery {event.battery.voltage / 1000:.3f}V {charging}")
    for change in event.wire_change:
        parts.append(f"wire {wire_label(change.wire)}={'on' if change.connect else 'off'}")
    return "; ".join(parts) if parts else "(no data)"


@app.command("run")
def run_bridge(
    config: Path | None = ConfigOption,
    device_id: str = DeviceIdOption,
    backplate: str | None = typer.Option(None, "--backplate", help="Override the backplate device path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run the bridge until terminated."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=_LOG_FORMAT)
    try:
        bridge_config = load_config(config, device_id)
        if backplate:
            bridge_config = dataclasses.replace(bridge_config, backplate_device=backplate)
        bridge = open_bridge(bridge_config)
        bridge.run()
    except NbpBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(
    config: Path | None = ConfigOption,
    device_id: str = DeviceIdOption,
) -> None:
    """Show the resolved configuration for a device."""
    try:
        bridge_config = load_config(config, device_id)
    except NbpBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"device: {bridge_config.device_id}")
    typer.echo(f"  backplate_device: {bridge_config.backplate_device}")
    typer.echo(f"  driver: {bridge_config.driver}")
    typer.echo(f"  control: {bridge_config.endpoints.control}")
    typer.echo(f"  events: {bridge_config.endpoints.events}")
    typer.echo(f"  periodic_interval_s: {bridge_config.periodic_interval_s:g}")
    typer.echo(f"  debug_frames: {str(bridge_config.debug_frames).lower()}")


@app.command("set-wire")
def set_wire(
    wires: list[str] = typer.Argument(..., help="One or more WIRE=on|off items, applied in order"),
    config: Path | None = ConfigOption,
    device_id: str = DeviceIdOption,
    timeout: float = typer.Option(5.0, "--timeout", help="Seconds to wait for the reply"),
) -> None:
    """Send a batched wire request to a running bridge."""
    items = [parse_wire_spec(spec) for spec in wires]
    try:
        bridge_config = load_config(config, device_id)
        reply = send_wire_request(
            client_endpoint(bridge_config.endpoints.control),
            items,
            timeout_s=timeout,
        )
    except NbpBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    for item, ok in zip(items, reply.success):
        state = "on" if item.connect else "off"
        typer.echo(f"{wire_label(item.wire)}={state}: {'ok' if ok else 'FAILED'}")
    if len(reply.success) != len(items) or not all(reply.success):
        raise typer.Exit(code=1)


@app.command("watch")
def watch(
    config: Path | None = ConfigOption,
    device_id: str = DeviceIdOption,
    count: int | None = typer.Option(None, "--count", "-n", help="Stop after this many events"),
    timeout: float | None = typer.Option(None, "--timeout", help="Give up after this many idle seconds"),
) -> None:
    """Print events published by a running bridge."""
    try:
        bridge_config = load_config(config, device_id)
        events = watch_events(client_endpoint(bridge_config.endpoints.events), timeout_s=timeout)
        if count is not None:
            events = itertools.islice(events, count)
        for event in events:
            typer.echo(describe_event(event))
    except NbpBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
