"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from realty_map.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(obj: dict, key: str, ctx: str) -> None:
    value = obj[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{ctx}.{key} must be a positive integer")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"database", "ingest", "clustering", "query"}
    _assert_required_keys(cfg, top_required, "settings")
    _assert_no_unknown_keys(cfg, top_required, "settings", allow_unknown)

    database = cfg["database"]
    _assert_required_keys(database, {"host", "port", "name", "user", "password"}, "database")
    _assert_no_unknown_keys(database, {"url", "host", "port", "name", "user", "password", "driver"}, "database", allow_unknown)

    ingest = cfg["ingest"]
    ingest_keys = {"input_path", "batch_size", "workers", "queue_factor", "progress_every"}
    _assert_required_keys(ingest, ingest_keys, "ingest")
    _assert_no_unknown_keys(ingest, ingest_keys, "ingest", allow_unknown)
    for key in ("batch_size", "workers", "queue_factor", "progress_every"):
        _assert_positive_int(ingest, key, "ingest")

    clustering = cfg["clustering"]
    clustering_keys = {"zoom_offset", "tile_size_px"}
    _assert_required_keys(clustering, clustering_keys, "clustering")
    _assert_no_unknown_keys(clustering, clustering_keys, "clustering", allow_unknown)
    if not isinstance(clustering["zoom_offset"], int) or clustering["zoom_offset"] < 0:
        raise ConfigError("clustering.zoom_offset must be a non-negative integer")
    _assert_positive_int(clustering, "tile_size_px", "clustering")

    query = cfg["query"]
    _assert_required_keys(query, {"default_limit"}, "query")
    _assert_no_unknown_keys(query, {"default_limit"}, "query", allow_unknown)
    _assert_positive_int(query, "default_limit", "query")

    return cfg
