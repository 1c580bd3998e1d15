"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from sqlalchemy.engine import URL

from realty_map.common.errors import ConfigError
from realty_map.common.fs import read_yaml
from realty_map.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"
DATABASE_ENV_KEYS = {
    "DB_HOST": "host",
    "DB_PORT": "port",
    "DB_NAME": "name",
    "DB_USER": "user",
    "DB_PASSWORD": "password",
}


@dataclass(frozen=True)
class ConfigBundle:
    settings: dict
    database_url: str

    @property
    def ingest(self) -> dict:
        return self.settings["ingest"]

    @property
    def clustering(self) -> dict:
        return self.settings["clustering"]

    @property
    def query(self) -> dict:
        return self.settings["query"]


def _merge_overlay(base: dict, overlay: dict) -> dict:
    """Overlay keys win; nested sections are merged key by key."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _merge_overlay(current, value)
        merged[key] = value
    return merged


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    return _merge_overlay(base, read_yaml(overlay_path))


def _apply_env_overrides(database: dict, env: Mapping[str, str]) -> dict:
    merged = dict(database)
    for env_key, field in DATABASE_ENV_KEYS.items():
        value = env.get(env_key)
        if value:
            merged[field] = value
    if env.get("DATABASE_URL"):
        merged["url"] = env["DATABASE_URL"]
    return merged


def build_database_url(database: dict) -> str:
    if database.get("url"):
        return str(database["url"])
    try:
        port = int(database["port"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"database.port must be an integer, got {database['port']!r}") from exc
    url = URL.create(
        drivername=database.get("driver") or "postgresql+psycopg2",
        username=str(database["user"]),
        password=str(database["password"]),
        host=str(database["host"]),
        port=port,
        database=str(database["name"]),
    )
    return url.render_as_string(hide_password=False)


def load_settings(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ConfigBundle:
    overlay_path = overlay_config_dir / SETTINGS_FILENAME if overlay_config_dir is not None else None
    cfg = _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path)
    settings = validate_settings_config(cfg, allow_unknown=allow_unknown)

    database = _apply_env_overrides(settings["database"], os.environ if env is None else env)
    settings = dict(settings, database=database)
    return ConfigBundle(settings=settings, database_url=build_database_url(database))
