import pytest

from city_seed.common.models import Endpoints
from city_seed.harvest.targets import build_request_targets


def test_build_request_targets_concatenates_verbatim():
    endpoints = Endpoints(location_data="http://feed.test/static/", occupation_data="http://feed.test/bls_jobs/")
    targets = build_request_targets("Salt%20Lake%20City_UT", endpoints)
    assert targets.location_data == "http://feed.test/static/Salt%20Lake%20City_UT"
    assert targets.occupation_data == "http://feed.test/bls_jobs/Salt%20Lake%20City_UT"


def test_build_request_targets_does_not_escape_or_validate():
    endpoints = Endpoints(location_data="base-a/", occupation_data="base-b/")
    targets = build_request_targets("not a token", endpoints)
    assert targets.location_data == "base-a/not a token"


def test_for_category_rejects_unknown():
    targets = build_request_targets("A_ST", Endpoints("a/", "b/"))
    assert targets.for_category("location_data") == "a/A_ST"
    assert targets.for_category("occupation_data") == "b/A_ST"
    with pytest.raises(ValueError):
        targets.for_category("weather")
