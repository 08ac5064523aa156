"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from city_seed.common.constants import DEFAULT_DATABASE_URL, PROGRESS_CADENCE, PROGRESS_DENOMINATOR
from city_seed.common.errors import ConfigError
from city_seed.common.fs import read_yaml
from city_seed.common.models import Endpoints
from city_seed.common.schema import validate_seed_config


@dataclass(frozen=True)
class SeedConfig:
    endpoints: Endpoints
    catalog_path: Path | None
    timeout_seconds: float | None
    max_attempts: int
    strip_backslashes: bool
    track_nesting: bool
    decode_policy: str
    progress_cadence: int
    progress_denominator: int
    database_url: str


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_seed_config(
    config_path: Path,
    *,
    allow_unknown: bool = False,
    overlay_path: Path | None = None,
) -> SeedConfig:
    cfg = validate_seed_config(_load_yaml_with_overlay(config_path, overlay_path), allow_unknown=allow_unknown)

    catalog_path = None
    raw_catalog_path = (cfg.get("catalog") or {}).get("path")
    if raw_catalog_path:
        catalog_path = Path(raw_catalog_path)
        if not catalog_path.is_absolute():
            catalog_path = config_path.parent / catalog_path

    http = cfg.get("http") or {}
    progress = cfg.get("progress") or {}
    tokenizer = cfg.get("tokenizer") or {}
    timeout = http.get("timeout_seconds")

    return SeedConfig(
        endpoints=Endpoints(
            location_data=cfg["endpoints"]["location_data"],
            occupation_data=cfg["endpoints"]["occupation_data"],
        ),
        catalog_path=catalog_path,
        timeout_seconds=float(timeout) if timeout is not None else None,
        max_attempts=int(http.get("max_attempts", 1)),
        strip_backslashes=bool(tokenizer.get("strip_backslashes", True)),
        track_nesting=bool(tokenizer.get("track_nesting", False)),
        decode_policy=(cfg.get("decode") or {}).get("policy", "default"),
        progress_cadence=int(progress.get("cadence", PROGRESS_CADENCE)),
        progress_denominator=int(progress.get("denominator", PROGRESS_DENOMINATOR)),
        database_url=(cfg.get("store") or {}).get("database_url") or DEFAULT_DATABASE_URL,
    )
