"""Loading of the optional packaging configuration file."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence
import json
import tomllib

import yaml


ConfigLoader = Callable[[Any], Any]

FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""

_TABLE_KEYS: Dict[str, set[str]] = {
    "tools": {"cargo", "elf2tab"},
    "build": {"extra_args"},
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is malformed."""


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``."""

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(FILE_LOADERS))
        raise ConfigError(f"Unsupported configuration file extension: {suffix or '<none>'}. Supported: {supported}")

    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    try:
        with path.open(mode, **kwargs) as handle:
            data = loader(handle)
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file '{path}': {exc.strerror or exc}") from exc
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot parse configuration file '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration file '{path}' must contain a mapping at the root")
    return data


def normalize_string_list(value: Any, *, field_name: str) -> List[str]:
    """Coerce ``value`` into a list of trimmed strings."""

    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        return [text] if text else []

    if isinstance(value, Sequence):
        items: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigError(f"{field_name} entries must be strings")
            text = item.strip()
            if text:
                items.append(text)
        return items

    raise ConfigError(f"{field_name} must be a string or sequence of strings")


def _describe_keys(keys: Iterable[Any]) -> str:
    # YAML allows integer and boolean keys
    return ", ".join(sorted(str(key) for key in keys))


def _table(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, Mapping):
        raise ConfigError(f"[{name}] must be a table")
    unknown = set(table) - _TABLE_KEYS[name]
    if unknown:
        raise ConfigError(f"Unknown key(s) in [{name}]: {_describe_keys(unknown)}")
    return table


@dataclass(slots=True)
class PackagingConfig:
    """Commands used to invoke cargo and elf2tab, plus extra cargo arguments.

    The metadata elf2tab stamps into the bundle is not configurable.
    """

    cargo: List[str] = field(default_factory=lambda: ["cargo"])
    elf2tab: List[str] = field(default_factory=lambda: ["elf2tab"])
    cargo_args: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PackagingConfig":
        unknown = set(data) - set(_TABLE_KEYS)
        if unknown:
            raise ConfigError(f"Unknown configuration table(s): {_describe_keys(unknown)}")

        tools = _table(data, "tools")
        build = _table(data, "build")

        config = cls()
        for name in ("cargo", "elf2tab"):
            if name in tools:
                prefix = normalize_string_list(tools[name], field_name=f"tools.{name}")
                if not prefix:
                    raise ConfigError(f"tools.{name} must not be empty")
                setattr(config, name, prefix)

        config.cargo_args = normalize_string_list(build.get("extra_args"), field_name="build.extra_args")
        return config

    @classmethod
    def from_file(cls, path: Path) -> "PackagingConfig":
        return cls.from_mapping(load_config_file(path))


__all__ = [
    "ConfigError",
    "FILE_LOADERS",
    "PackagingConfig",
    "load_config_file",
    "normalize_string_list",
]
