"""Minimal strict schema for the YAML seed config."""

from __future__ import annotations

from city_seed.common.errors import ConfigError

DECODE_POLICIES = ("default", "skip", "strict")

TOP_LEVEL_KEYS = {"endpoints", "catalog", "http", "tokenizer", "decode", "progress", "store"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
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


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_positive_int(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{ctx} must be a positive integer")


def validate_seed_config(cfg: object, *, allow_unknown: bool = False) -> dict:
    cfg = _assert_mapping(cfg, "seed config")
    _assert_required_keys(cfg, {"endpoints"}, "seed config")
    _assert_no_unknown_keys(cfg, TOP_LEVEL_KEYS, "seed config", allow_unknown)

    endpoints = _assert_mapping(cfg["endpoints"], "endpoints")
    _assert_required_keys(endpoints, {"location_data", "occupation_data"}, "endpoints")
    _assert_no_unknown_keys(endpoints, {"location_data", "occupation_data"}, "endpoints", allow_unknown)
    for key in ("location_data", "occupation_data"):
        if not isinstance(endpoints[key], str) or not endpoints[key]:
            raise ConfigError(f"endpoints.{key} must be a non-empty string")

    catalog = _assert_mapping(cfg.get("catalog") or {}, "catalog")
    _assert_no_unknown_keys(catalog, {"path"}, "catalog", allow_unknown)

    http = _assert_mapping(cfg.get("http") or {}, "http")
    _assert_no_unknown_keys(http, {"timeout_seconds", "max_attempts"}, "http", allow_unknown)
    if "max_attempts" in http:
        _assert_positive_int(http["max_attempts"], "http.max_attempts")
    timeout = http.get("timeout_seconds")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ConfigError("http.timeout_seconds must be a positive number")

    tokenizer = _assert_mapping(cfg.get("tokenizer") or {}, "tokenizer")
    _assert_no_unknown_keys(tokenizer, {"strip_backslashes", "track_nesting"}, "tokenizer", allow_unknown)
    for key in ("strip_backslashes", "track_nesting"):
        if key in tokenizer and not isinstance(tokenizer[key], bool):
            raise ConfigError(f"tokenizer.{key} must be true or false")

    decode = _assert_mapping(cfg.get("decode") or {}, "decode")
    _assert_no_unknown_keys(decode, {"policy"}, "decode", allow_unknown)
    if decode.get("policy", "default") not in DECODE_POLICIES:
        raise ConfigError(f"decode.policy must be one of: {', '.join(DECODE_POLICIES)}")

    progress = _assert_mapping(cfg.get("progress") or {}, "progress")
    _assert_no_unknown_keys(progress, {"cadence", "denominator"}, "progress", allow_unknown)
    for key in ("cadence", "denominator"):
        if key in progress:
            _assert_positive_int(progress[key], f"progress.{key}")

    store = _assert_mapping(cfg.get("store") or {}, "store")
    _assert_no_unknown_keys(store, {"database_url"}, "store", allow_unknown)

    return cfg
