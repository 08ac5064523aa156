"""Pins long-standing feed handling that downstream data already reflects."""

from __future__ import annotations

import io

import pytest

from city_seed.catalog import DEFAULT_LOCATION_TOKENS
from city_seed.harvest.decoder import DecodePolicy, apply_policy, decode_occupation_record
from city_seed.harvest.progress import ProgressReporter
from city_seed.harvest.runner import run_seed
from city_seed.harvest.tokenizer import iter_records
from city_seed.store.sink import MemorySink

ESCAPED_SLASH = '{"occ_title":"Sales Representatives, Wholesale and Manufacturing, Technical\\/Scientific","jobs_1000":2.1,"loc_quotient":1.4,"hourly_wage":48.3,"annual_wage":100460}'
ESCAPED_QUOTE = '{"occ_title":"Operators \\"Other\\"","jobs_1000":1.0,"loc_quotient":1.0,"hourly_wage":20.0,"annual_wage":41600}'


@pytest.mark.regression
def test_escaped_slash_survives_backslash_stripping():
    [raw] = list(iter_records([ESCAPED_SLASH]))
    entity = apply_policy(decode_occupation_record(raw), DecodePolicy.DEFAULT)
    assert entity.occ_title.endswith("Technical/Scientific")


@pytest.mark.regression
def test_escaped_quote_is_corrupted_by_stripping_and_skipped():
    [raw] = list(iter_records([ESCAPED_QUOTE]))
    assert '"Operators "Other""' in raw
    assert apply_policy(decode_occupation_record(raw), DecodePolicy.DEFAULT) is None


@pytest.mark.regression
def test_escaped_quote_decodes_when_stripping_disabled():
    [raw] = list(iter_records([ESCAPED_QUOTE], strip_backslashes=False))
    assert decode_occupation_record(raw).entity.occ_title == 'Operators "Other"'


@pytest.mark.regression
def test_reference_catalog_progress_tops_out_at_90_percent(feed_client, endpoints):
    bodies = {}
    for token in DEFAULT_LOCATION_TOKENS:
        bodies[endpoints.location_data + token] = '{"city":"X","state":"ST"}'
        bodies[endpoints.occupation_data + token] = '{"occ_title":"Y"}'
    out = io.StringIO()

    result = run_seed(DEFAULT_LOCATION_TOKENS, endpoints, feed_client(bodies), MemorySink(), reporter=ProgressReporter(out=out))

    assert result.successful_fetches == 266
    lines = out.getvalue().splitlines()
    assert lines[1:-1] == ["0%", "10%", "20%", "30%", "40%", "50%", "60%", "70%", "80%", "90%"]
    assert lines[-1] == "Up and running!"
