"""Configuration loading and persistence."""

from __future__ import annotations

import copy
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]

from mbar_cli.core.constants import CATALOG_OPTION, DEFAULT_TIME_LIMIT
from mbar_cli.core.ratios import RatioCatalog

_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


class ConfigError(RuntimeError):
    """Raised when config file parsing fails."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_path(path_str: str) -> Path:
    """Expand user/env vars and return absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_data_dir() -> Path:
    """Resolve XDG-style data directory with env override."""
    raw = os.getenv("MBAR_DATA_DIR", "~/.local/share/mbar")
    return expand_path(raw)


def default_config_path() -> Path:
    """Get default config file path."""
    raw = os.getenv("MBAR_CONFIG_FILE", "~/.config/mbar/config.toml")
    return expand_path(raw)


def _default_config() -> Dict[str, Any]:
    data_dir = default_data_dir()
    return {
        "store": {
            "backend": "file",
            "library": str(data_dir / "library.json"),
        },
        "site": {
            "url": "",
            "username": "",
            "app_password_env": "MBAR_APP_PASSWORD",
        },
        "api": {
            "rate_limit_delay": 0.0,
            "max_retries": 3,
            "timeout_seconds": 30,
            "per_page": 100,
        },
        "measure": {
            "time_limit": DEFAULT_TIME_LIMIT,
        },
    }


def _read_config(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix in {".toml", ""}:
            loaded = tomllib.loads(text)
        else:
            loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except Exception as exc:
        if suffix in {".toml", ""}:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain an object/table at the root")
    return loaded


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from disk, merged with defaults."""
    cfg_path = path or default_config_path()
    cfg = _default_config()

    if cfg_path.exists():
        cfg = _deep_merge(cfg, _read_config(cfg_path))

    return cfg


def _toml_key(key: str) -> str:
    if _BARE_KEY_RE.match(key):
        return key
    return _toml_string(key)


def _toml_string(value: str) -> str:
    chars = []
    for char in value:
        if char in _TOML_ESCAPES:
            chars.append(_TOML_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            chars.append(f"\\u{ord(char):04X}")
        else:
            chars.append(char)
    return '"' + "".join(chars) + '"'


def _toml_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _toml_string(value)
    if isinstance(value, list):
        items = ", ".join(_toml_literal(item) for item in value if item is not None)
        return f"[{items}]"
    raise TypeError(f"Unsupported TOML value type: {type(value)!r}")


def _dict_to_toml(data: Dict[str, Any], prefix: Optional[str] = None) -> str:
    lines = []
    plain_keys = []
    nested_keys = []

    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            nested_keys.append((key, value))
        else:
            plain_keys.append((key, value))

    if prefix is not None:
        lines.append(f"[{prefix}]")

    for key, value in plain_keys:
        lines.append(f"{_toml_key(key)} = {_toml_literal(value)}")

    if plain_keys and nested_keys:
        lines.append("")

    for index, (key, value) in enumerate(nested_keys):
        table_name = _toml_key(key) if prefix is None else f"{prefix}.{_toml_key(key)}"
        lines.append(_dict_to_toml(value, prefix=table_name))
        if index != len(nested_keys) - 1:
            lines.append("")

    return "\n".join(lines)


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Save configuration to disk as TOML (default) or JSON."""
    cfg_path = path or default_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    if cfg_path.suffix.lower() == ".json":
        cfg_path.write_text(json.dumps(config, indent=2) + "\n")
        return cfg_path

    cfg_path.write_text(_dict_to_toml(config).strip() + "\n")
    return cfg_path


def load_catalog(config: Dict[str, Any]) -> RatioCatalog:
    """Build the aspect ratio catalog from its config entry (empty if unseeded)."""
    return RatioCatalog.from_option(config.get(CATALOG_OPTION))


def store_catalog(config: Dict[str, Any], catalog: RatioCatalog, path: Optional[Path] = None) -> Path:
    """Write the catalog into the config entry and persist the config file."""
    config[CATALOG_OPTION] = catalog.to_option()
    return save_config(config, path)


def resolve_library_path(config: Dict[str, Any], explicit: Optional[Path] = None) -> Path:
    """Resolve the media library file with CLI override first."""
    if explicit is not None:
        return explicit.expanduser().resolve()
    raw = os.getenv("MBAR_LIBRARY_FILE") or config.get("store", {}).get("library")
    if not raw:
        raw = str(default_data_dir() / "library.json")
    return expand_path(raw)


def resolve_app_password(config: Dict[str, Any]) -> Optional[str]:
    """Read the site application password from the configured env var."""
    env_name = config.get("site", {}).get("app_password_env") or "MBAR_APP_PASSWORD"
    return os.getenv(env_name) or None
