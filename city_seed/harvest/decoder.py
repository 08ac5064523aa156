"""Decode raw brace-framed records into typed entities."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from city_seed.common.errors import MalformedRecordError
from city_seed.common.models import Entity, LocationRecord, OccupationRecord

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class DecodePolicy(str, Enum):
    # Zero-fill missing or invalid fields, the long-standing behavior.
    DEFAULT = "default"
    SKIP = "skip"
    STRICT = "strict"


@dataclass(frozen=True)
class DecodeResult:
    entity: Entity | None
    missing: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()
    error: str | None = None

    @property
    def is_clean(self) -> bool:
        return self.entity is not None and not self.missing and not self.invalid


class _Absent:
    pass


_ABSENT = _Absent()


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ValueError("not a string")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not numeric")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value)
    elif isinstance(value, str):
        parsed = int(float(value.strip()))
    else:
        raise ValueError("not numeric")
    # Integer columns hold 32-bit values.
    if not INT32_MIN <= parsed <= INT32_MAX:
        raise ValueError("out of 32-bit range")
    return parsed


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not numeric")
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        parsed = float(value.strip())
    else:
        raise ValueError("not numeric")
    if math.isnan(parsed) or math.isinf(parsed):
        raise ValueError("not finite")
    return parsed


_DEFAULTS: dict[Callable[[Any], Any], Any] = {_to_str: "", _to_int: 0, _to_float: 0.0}

# (entity attribute, payload field, coercion)
LOCATION_FIELDS = (
    ("name", "city", _to_str),
    ("state", "state", _to_str),
    ("studio", "studio", _to_int),
    ("onebr", "onebr", _to_int),
    ("twobr", "twobr", _to_int),
    ("threebr", "threebr", _to_int),
    ("fourbr", "fourbr", _to_int),
    ("walkscore", "walkscore", _to_float),
    ("population", "population", _to_int),
    ("occ_title", "occ_title", _to_str),
    ("hourly_wage", "hourly_wage", _to_float),
    ("annual_wage", "annual_wage", _to_int),
    ("climate_zone", "climate_zone", _to_str),
    ("simple_climate", "simple_climate", _to_str),
)

# city/state also arrive on this feed and are not part of the entity.
OCCUPATION_FIELDS = (
    ("occ_title", "occ_title", _to_str),
    ("jobs_1000", "jobs_1000", _to_float),
    ("loc_quotient", "loc_quotient", _to_float),
    ("hourly_wage", "hourly_wage", _to_float),
    ("annual_wage", "annual_wage", _to_int),
)


def _parse(raw: str) -> dict[str, Any] | None:
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _read_fields(payload: dict[str, Any], fields) -> tuple[dict[str, Any], tuple[str, ...], tuple[str, ...]]:
    values: dict[str, Any] = {}
    missing: list[str] = []
    invalid: list[str] = []
    for attr, key, coerce in fields:
        value = payload.get(key, _ABSENT)
        if value is _ABSENT or value is None:
            missing.append(key)
            values[attr] = _DEFAULTS[coerce]
            continue
        try:
            values[attr] = coerce(value)
        except (TypeError, ValueError, OverflowError):
            invalid.append(key)
            values[attr] = _DEFAULTS[coerce]
    return values, tuple(missing), tuple(invalid)


def _decode(raw: str, fields, factory) -> DecodeResult:
    payload = _parse(raw)
    if payload is None:
        return DecodeResult(entity=None, error="record is not a JSON object")
    values, missing, invalid = _read_fields(payload, fields)
    return DecodeResult(entity=factory(**values), missing=missing, invalid=invalid)


def decode_location_record(raw: str) -> DecodeResult:
    return _decode(raw, LOCATION_FIELDS, LocationRecord)


def decode_occupation_record(raw: str) -> DecodeResult:
    return _decode(raw, OCCUPATION_FIELDS, OccupationRecord)


def apply_policy(result: DecodeResult, policy: DecodePolicy) -> Entity | None:
    """Return the entity to persist, None to skip it, or raise under STRICT."""
    if result.is_clean:
        return result.entity

    if policy is DecodePolicy.STRICT:
        detail = result.error or _describe(result)
        raise MalformedRecordError(f"Malformed record: {detail}", missing=result.missing, invalid=result.invalid)
    if policy is DecodePolicy.SKIP:
        return None
    # DEFAULT keeps zero-filled entities; a record that is not JSON has nothing to fill.
    return result.entity


def _describe(result: DecodeResult) -> str:
    parts = []
    if result.missing:
        parts.append(f"missing {', '.join(result.missing)}")
    if result.invalid:
        parts.append(f"invalid {', '.join(result.invalid)}")
    return "; ".join(parts)
