from __future__ import annotations

import io

import pytest
import requests

from city_seed.common.errors import StreamFailure
from city_seed.harvest.tokenizer import RecordTokenizer, ScanState, iter_records


class ClosingChunks:
    def __init__(self, chunks, fail_after: int | None = None, exc: Exception | None = None):
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.exc = exc or OSError("connection reset")
        self.closed = False

    def __iter__(self):
        for idx, chunk in enumerate(self.chunks):
            if self.fail_after is not None and idx == self.fail_after:
                raise self.exc
            yield chunk

    def close(self):
        self.closed = True


def test_emits_one_record_per_brace_pair():
    body = '{"city":"A"}{"city":"B"}{"city":"C"}'
    records = list(iter_records([body]))
    assert records == ['{"city":"A"}', '{"city":"B"}', '{"city":"C"}']


def test_text_between_records_is_discarded():
    records = list(iter_records(['garbage{"a":1}\n, junk {"b":2}trailing']))
    assert records == ['{"a":1}', '{"b":2}']


def test_records_split_across_chunks():
    chunks = ['{"ci', 'ty":"A', '"}{', '"city":"B"}']
    assert list(iter_records(chunks)) == ['{"city":"A"}', '{"city":"B"}']


def test_empty_stream_yields_nothing():
    assert list(iter_records([])) == []
    assert list(iter_records(io.StringIO(""))) == []


def test_reads_file_like_streams():
    stream = io.StringIO('{"a":1}{"b":2}')
    assert list(iter_records(stream)) == ['{"a":1}', '{"b":2}']
    assert stream.closed


def test_backslashes_are_stripped_inside_records():
    body = r'{"title":"Say \"hi\"","path":"C:\\dir"}'
    records = list(iter_records([body]))
    assert records == ['{"title":"Say "hi"","path":"C:dir"}']


def test_backslashes_kept_when_stripping_disabled():
    body = r'{"title":"Say \"hi\""}'
    assert list(iter_records([body], strip_backslashes=False)) == [body]


def test_nested_braces_cut_at_first_close_by_default():
    records = list(iter_records(['{"a":{"b":1},"c":2}']))
    assert records == ['{"a":{"b":1}']


def test_nested_braces_tracked_when_enabled():
    records = list(iter_records(['{"a":{"b":1},"c":2}{"d":3}'], track_nesting=True))
    assert records == ['{"a":{"b":1},"c":2}', '{"d":3}']


def test_unterminated_record_is_discarded_silently():
    tokenizer = RecordTokenizer()
    records = list(tokenizer.iter_records(['{"a":1}{"b":']))
    assert records == ['{"a":1}']
    assert tokenizer.discarded_partial == 1
    assert tokenizer.state is ScanState.OUTSIDE


def test_close_brace_outside_record_is_ignored():
    assert list(iter_records(['}}{"a":1}}'])) == ['{"a":1}']


def test_feed_tracks_state_between_chunks():
    tokenizer = RecordTokenizer()
    assert tokenizer.feed('xx{"a"') == []
    assert tokenizer.state is ScanState.INSIDE
    assert tokenizer.feed(':1}') == ['{"a":1}']
    assert tokenizer.state is ScanState.OUTSIDE
    assert tokenizer.emitted == 1


def test_stream_closed_after_exhaustion():
    stream = ClosingChunks(['{"a":1}'])
    list(iter_records(stream))
    assert stream.closed


def test_stream_closed_when_consumer_stops_early():
    stream = ClosingChunks(['{"a":1}{"b":2}'])
    records = iter_records(stream)
    assert next(records) == '{"a":1}'
    records.close()
    assert stream.closed


@pytest.mark.parametrize("exc", [OSError("reset"), requests.exceptions.ChunkedEncodingError("broken")])
def test_read_failure_surfaces_stream_failure_and_closes(exc):
    stream = ClosingChunks(['{"a":1}', '{"b":2}'], fail_after=1, exc=exc)
    seen = []
    with pytest.raises(StreamFailure):
        for record in iter_records(stream):
            seen.append(record)
    assert seen == ['{"a":1}']
    assert stream.closed


@pytest.mark.parametrize("count", [0, 1, 5, 40])
def test_record_count_matches_flat_pairs(count):
    body = "".join(f'{{"n":{i}}} ' for i in range(count))
    records = list(iter_records([body]))
    assert len(records) == count
    assert all(r.startswith("{") and r.endswith("}") for r in records)
