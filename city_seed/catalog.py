"""Ordered catalog of location tokens used to build feed URLs."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence
from urllib.parse import quote

from city_seed.common.errors import ConfigError
from city_seed.common.fs import read_yaml

# Locations known to return data from the provider, in request order.
DEFAULT_LOCATION_TOKENS = (
    "New%20York_NY",
    "Los%20Angeles_CA",
    "Chicago_IL",
    "Houston_TX",
    "Philadelphia_PA",
    "Phoenix_AZ",
    "San%20Antonio_TX",
    "San%20Diego_CA",
    "Dallas_TX",
    "San%20Jose_CA",
    "Indianapolis_IN",
    "Jacksonville_FL",
    "San%20Francisco_CA",
    "Austin_TX",
    "Charlotte_NC",
    "Detroit_MI",
    "EL%20Paso_TX",
    "Memphis_TN",
    "Baltimore_MD",
    "Boston_MA",
    "Washington_DC",
    "Denver_CO",
    "Milwaukee_WI",
    "Portland_OR",
    "Las%20Vegas_NV",
    "Oklahoma%20City_OK",
    "Albuquerque_NM",
    "Fresno_CA",
    "Sacramento_CA",
    "Kansas%20City_MO",
    "Virginia%20Beach_VA",
    "Atlanta_GA",
    "Colorado%20Springs_CO",
    "Omaha_NE",
    "Raleigh_NC",
    "Miami_FL",
    "Cleveland_OH",
    "Tulsa_OK",
    "Minneapolis_MN",
    "Wichita_KS",
    "Bakersfield_CA",
    "New%20Orleans_LA",
    "Tampa_FL",
    "Pittsburgh_PA",
    "Corpus%20Christi_TX",
    "Riverside_CA",
    "Cincinnati_OH",
    "Stockton_CA",
    "Toledo_OH",
    "Greensboro_NC",
    "Buffalo_NY",
    "Lincoln_NE",
    "Fort%20Wayne_IN",
    "Orlando_FL",
    "Laredo_TX",
    "Madison_WI",
    "Lubbock_TX",
    "Baton%20Rouge_LA",
    "Reno_NV",
    "Birmingham_AL",
    "Rochester_NY",
    "Spokane_WA",
    "Montgomery_AL",
    "Richmond_VA",
    "Des%20Moines_IA",
    "Fayetteville_NC",
    "Shreveport_LA",
    "Mobile_AL",
    "Amarillo_TX",
    "Grand%20Rapids_MI",
    "Salt%20Lake%20City_UT",
    "Worcester_MA",
    "Huntsville_AL",
    "Knoxville_TN",
    "Providence_RI",
    "Jackson_MS",
    "Chattanooga_TN",
    "Port%20St.%20Lucie_FL",
    "Eugene_OR",
    "Cape%20Coral_FL",
    "Salinas_CA",
    "Fort%20Collins_CO",
    "Dayton_OH",
    "Clarksville_TN",
    "New%20Haven_CT",
    "Columbia_SC",
    "Killeen_TX",
    "Topeka_KS",
    "Cedar%20Rapids_IA",
    "Waco_TX",
    "Abilene_TX",
    "Lansing_MI",
    "Ann%20Arbor_MI",
    "Manchester_NH",
    "Flint_MI",
    "Davenport_IA",
    "Las%20Cruces_NM",
    "Lakeland_FL",
    "Tyler_TX",
    "Lawton_OK",
    "College%20Station_TX",
    "Yuma_AZ",
    "Lawrence_KS",
    "Fort%20Smith_AR",
    "Trenton_NJ",
    "Allen_TX",
    "Kalamazoo_MI",
    "Muncie_IN",
    "Missoula_MT",
    "Warner%20Robins_GA",
    "Victoria_TX",
    "Santa%20Cruz_CA",
    "Cheyenne_WY",
    "Bowling%20Green_KY",
    "Ocala_FL",
    "Carson%20City_NV",
    "Valdosta_GA",
    "Corvallis_OR",
    "Grand%20Forks_ND",
    "Battle%20Creek_MI",
    "Manhattan_KS",
    "Saginaw_MI",
    "Harrisonburg_VA",
    "Olympia_WA",
    "Hattiesburg_MS",
    "Sierra%20Vista_AZ",
    "Charlottesville_VA",
    "Muskegon_MI",
    "Texarkana_TX",
    "Dover_DE",
    "Hinesville_GA",
    "Fairbanks_AK",
    "Naples_FL",
)


def make_location_token(place: str, region: str) -> str:
    """Build a transport-ready token such as ``Salt%20Lake%20City_UT``."""
    return f"{quote(place.strip(), safe='')}_{region.strip()}"


class LocationCatalog(Sequence[str]):
    """Immutable, restartable sequence of location tokens."""

    def __init__(self, tokens: Iterable[str] = DEFAULT_LOCATION_TOKENS) -> None:
        self._tokens = tuple(tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index):
        return self._tokens[index]

    def __repr__(self) -> str:
        return f"LocationCatalog({len(self._tokens)} locations)"


def load_catalog(path: Path) -> LocationCatalog:
    if not path.exists():
        raise ConfigError(f"Catalog file not found: {path}")
    payload = read_yaml(path)
    if isinstance(payload, dict):
        payload = payload.get("locations")
    if not isinstance(payload, list) or not payload:
        raise ConfigError(f"Catalog {path} must hold a non-empty list of locations")

    tokens = []
    for idx, value in enumerate(payload):
        if isinstance(value, dict):
            place = value.get("place")
            region = value.get("region")
            if not isinstance(place, str) or not place.strip() or not isinstance(region, str) or not region.strip():
                raise ConfigError(f"Catalog {path} entry {idx} needs non-empty place and region")
            tokens.append(make_location_token(place, region))
        elif isinstance(value, str) and value.strip():
            # Plain strings are taken as already-escaped tokens.
            tokens.append(value.strip())
        else:
            raise ConfigError(f"Catalog {path} entry {idx} must be a token or a place/region mapping")
    return LocationCatalog(tokens)


def resolve_catalog(path: Path | None) -> LocationCatalog:
    if path is None:
        return LocationCatalog()
    return load_catalog(path)
