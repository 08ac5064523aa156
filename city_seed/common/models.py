"""Entities produced by the record decoders."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Union


@dataclass(frozen=True)
class LocationRecord:
    name: str
    state: str
    studio: int
    onebr: int
    twobr: int
    threebr: int
    fourbr: int
    walkscore: float
    population: int
    occ_title: str
    hourly_wage: float
    annual_wage: int
    climate_zone: str
    simple_climate: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OccupationRecord:
    occ_title: str
    hourly_wage: float
    annual_wage: int
    jobs_1000: float
    loc_quotient: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


Entity = Union[LocationRecord, OccupationRecord]


@dataclass(frozen=True)
class Endpoints:
    """Base URLs of the two per-location feeds. Tokens are appended verbatim."""

    location_data: str
    occupation_data: str
