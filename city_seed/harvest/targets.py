"""Request target construction for the two per-location feeds."""

from __future__ import annotations

from dataclasses import dataclass

from city_seed.common.constants import CATEGORY_LOCATION_DATA, CATEGORY_OCCUPATION_DATA
from city_seed.common.models import Endpoints


@dataclass(frozen=True)
class RequestTargets:
    location_data: str
    occupation_data: str

    def for_category(self, category: str) -> str:
        if category == CATEGORY_LOCATION_DATA:
            return self.location_data
        if category == CATEGORY_OCCUPATION_DATA:
            return self.occupation_data
        raise ValueError(f"Unknown category: {category}")


def build_request_targets(token: str, endpoints: Endpoints) -> RequestTargets:
    # Tokens arrive pre-escaped; concatenate as-is.
    return RequestTargets(
        location_data=endpoints.location_data + token,
        occupation_data=endpoints.occupation_data + token,
    )
