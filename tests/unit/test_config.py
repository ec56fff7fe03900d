from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from mbar_cli.core.config import (
    ConfigError,
    _deep_merge,
    default_config_path,
    default_data_dir,
    expand_path,
    load_catalog,
    load_config,
    resolve_app_password,
    resolve_library_path,
    save_config,
    store_catalog,
)
from mbar_cli.core.ratios import InvalidDimension, RatioCatalog


def test_deep_merge_nested_dicts() -> None:
    base = {"a": {"b": 1, "c": 2}, "x": 3}
    override = {"a": {"b": 9}, "y": 4}
    merged = _deep_merge(base, override)
    assert merged == {"a": {"b": 9, "c": 2}, "x": 3, "y": 4}
    assert base["a"]["b"] == 1


def test_expand_path_expands_home_and_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MBAR_TMP_PATH", str(tmp_path))
    expanded = expand_path("$MBAR_TMP_PATH/config.toml")
    assert expanded == (tmp_path / "config.toml").resolve()


def test_default_config_path_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "custom.toml"
    monkeypatch.setenv("MBAR_CONFIG_FILE", str(path))
    assert default_config_path() == path.resolve()


def test_default_data_dir_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "mbar-data"
    monkeypatch.setenv("MBAR_DATA_DIR", str(path))
    assert default_data_dir() == path.resolve()


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.toml")
    assert cfg["api"]["max_retries"] == 3
    assert cfg["store"]["backend"] == "file"
    assert cfg["store"]["library"].endswith("library.json")
    assert cfg["measure"]["time_limit"] == 30
    assert "aspect-ratios" not in cfg


def test_load_config_from_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"api": {"max_retries": 9}, "measure": {"time_limit": 120}}))
    cfg = load_config(path)
    assert cfg["api"]["max_retries"] == 9
    assert cfg["measure"]["time_limit"] == 120


def test_load_config_from_toml(write_temp_toml) -> None:
    path = write_temp_toml(
        "config.toml",
        """
[store]
backend = "rest"

[site]
url = "https://media.example.test"

[aspect-ratios."1.778"]
width = 16
height = 9
name = "Widescreen"
""",
    )
    cfg = load_config(path)
    assert cfg["store"]["backend"] == "rest"
    assert cfg["store"]["library"].endswith("library.json")
    assert cfg["site"]["url"] == "https://media.example.test"
    assert load_catalog(cfg).get("1.778").label == "Widescreen (16:9)"


def test_load_config_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{broken")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_invalid_toml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("[api\nmax_retries = 3")
    with pytest.raises(ConfigError):
        load_config(path)


def test_save_config_json(tmp_path: Path) -> None:
    payload: Dict[str, Any] = {"api": {"max_retries": 7}}
    path = save_config(payload, tmp_path / "config.json")
    assert path.exists()
    assert json.loads(path.read_text())["api"]["max_retries"] == 7


def test_save_config_toml_quotes_dotted_keys(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    cfg = load_config(path)
    store_catalog(cfg, RatioCatalog.defaults(), path)

    text = path.read_text()
    assert '[aspect-ratios."1.778"]' in text
    reloaded = load_config(path)
    assert load_catalog(reloaded).keys() == ["1", "1.333", "1.778", "1.6"]
    assert reloaded["api"]["max_retries"] == 3


def test_save_config_toml_escapes_control_characters(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    cfg = load_config(path)
    catalog = RatioCatalog()
    catalog.add(3, 2, "Classic\n35mm\t\"film\" \x01")
    store_catalog(cfg, catalog, path)

    reloaded = load_catalog(load_config(path))
    assert reloaded.get("1.5").name == "Classic\n35mm\t\"film\" \x01"


def test_load_catalog_unseeded_and_malformed() -> None:
    assert len(load_catalog({})) == 0
    with pytest.raises(InvalidDimension):
        load_catalog({"aspect-ratios": {"0": {"width": 0, "height": 9}}})


def test_resolve_library_path_prefers_explicit(tmp_path: Path) -> None:
    explicit = tmp_path / "media.json"
    cfg = {"store": {"library": "/tmp/ignored.json"}}
    assert resolve_library_path(cfg, explicit=explicit) == explicit.resolve()


def test_resolve_library_path_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MBAR_LIBRARY_FILE", str(tmp_path / "from-env.json"))
    cfg = {"store": {"library": "/tmp/ignored.json"}}
    assert resolve_library_path(cfg) == (tmp_path / "from-env.json").resolve()


def test_resolve_library_path_default_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("MBAR_LIBRARY_FILE", raising=False)
    monkeypatch.setenv("MBAR_DATA_DIR", str(tmp_path / "xdg"))
    assert resolve_library_path({"store": {}}) == (tmp_path / "xdg" / "library.json").resolve()


def test_resolve_app_password_reads_configured_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITE_APP_PASSWORD", "abcd efgh")
    assert resolve_app_password({"site": {"app_password_env": "SITE_APP_PASSWORD"}}) == "abcd efgh"
    monkeypatch.delenv("MBAR_APP_PASSWORD", raising=False)
    assert resolve_app_password({"site": {}}) is None
