"""Configuration loading and validation for YAML-based bridge config files."""

from __future__ import annotations

import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from nbpbridge.core.errors import ConfigLoadError, ConfigValidationError
from nbpbridge.core.model import BridgeConfig, Endpoints

DEFAULT_DEVICE_ID = "nbp"
DEFAULT_BACKPLATE_DEVICE = "/dev/ttyO2"
DEFAULT_PERIODIC_INTERVAL_S = 30.0
LOGGER = logging.getLogger(__name__)


class StrictLoader(yaml.SafeLoader):
    """Safe loader that refuses a key repeated within one mapping."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=True)
            if key in seen:
                raise ConfigValidationError(f"Duplicate key '{key}' at line {key_node.start_mark.line + 1}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _load_schema_validator() -> Any:
    schema_text = resources.files("nbpbridge.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def config_search_paths() -> tuple[Path, ...]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "nbpbridge/config.yaml", Path("/etc/nbpbridge/config.yaml")


def find_config_file(explicit: Path | None = None) -> Path:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigLoadError(f"Config file {explicit} does not exist")
        return explicit
    for candidate in config_search_paths():
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(p) for p in config_search_paths())
    raise ConfigLoadError(f"No config file found. Searched: {searched}")


def build_config(doc: dict[str, Any], device_id: str, source: Path | str = "<config>") -> BridgeConfig:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    section = doc["devices"].get(device_id)
    if section is None:
        available = ", ".join(sorted(doc["devices"]))
        raise ConfigValidationError(
            f"Device '{device_id}' is not configured in {source}. Available: {available}"
        )

    return BridgeConfig(
        device_id=device_id,
        backplate_device=section.get("backplate_device", DEFAULT_BACKPLATE_DEVICE),
        driver=section["driver"],
        endpoints=Endpoints(
            control=section["endpoints"]["control"],
            events=section["endpoints"]["events"],
        ),
        periodic_interval_s=float(section.get("periodic_interval_s", DEFAULT_PERIODIC_INTERVAL_S)),
        debug_frames=section.get("debug_frames", False),
    )


def load_config(path: Path | None = None, device_id: str = DEFAULT_DEVICE_ID) -> BridgeConfig:
    source = find_config_file(path)
    LOGGER.debug("Loading config from %s", source)
    try:
        with source.open(encoding="utf-8") as handle:
            doc = yaml.load(handle, Loader=StrictLoader)
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(doc, dict):
        raise ConfigValidationError(f"Config file {source} must contain a mapping at root")
    return build_config(doc, device_id, source)
