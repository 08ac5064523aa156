"""Brace-framed record tokenizer for the provider's concatenated-object feeds.

The provider answers with zero or more JSON-like objects written back to back,
with no array brackets and no separators. The only framing contract is the
brace pair, so the tokenizer is a two-state scanner:

    state    input   action                         next state
    -------  ------  -----------------------------  ----------
    OUTSIDE  '{'     start a new buffer with '{'    INSIDE
    OUTSIDE  other   discard                        OUTSIDE
    INSIDE   '\\'    drop (when strip_backslashes)  INSIDE
    INSIDE   '}'     append, emit buffer, clear     OUTSIDE
    INSIDE   '{'     append as plain content        INSIDE
    INSIDE   other   append                         INSIDE

With ``track_nesting=True`` an inner '{' raises a depth counter and only the
'}' that brings it back to zero emits the record.

Defaults reproduce the provider-facing behavior the seeding job has always
had: backslashes are dropped even inside string values (so an escaped quote
becomes a bare quote) and nested objects are cut at the first '}'. A stream
ending while INSIDE discards the partial buffer without error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import requests

from city_seed.common.errors import StreamFailure

OPEN_BRACE = "{"
CLOSE_BRACE = "}"
BACKSLASH = "\\"
DEFAULT_READ_SIZE = 8192


class ScanState(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


@dataclass(frozen=True)
class TokenizerOptions:
    strip_backslashes: bool = True
    track_nesting: bool = False

    def build(self) -> "RecordTokenizer":
        return RecordTokenizer(strip_backslashes=self.strip_backslashes, track_nesting=self.track_nesting)


class RecordTokenizer:
    def __init__(self, *, strip_backslashes: bool = True, track_nesting: bool = False) -> None:
        self.strip_backslashes = strip_backslashes
        self.track_nesting = track_nesting
        self.state = ScanState.OUTSIDE
        self.emitted = 0
        self.discarded_partial = 0
        self._buffer: list[str] = []
        self._depth = 0

    def feed(self, chunk: str) -> list[str]:
        """Scan one chunk of text and return the records it completed."""
        records: list[str] = []
        i = 0
        size = len(chunk)
        while i < size:
            if self.state is ScanState.OUTSIDE:
                start = chunk.find(OPEN_BRACE, i)
                if start < 0:
                    break
                self._buffer = [OPEN_BRACE]
                self._depth = 1
                self.state = ScanState.INSIDE
                i = start + 1
                continue

            ch = chunk[i]
            i += 1
            if ch == BACKSLASH and self.strip_backslashes:
                continue
            self._buffer.append(ch)
            if ch == OPEN_BRACE and self.track_nesting:
                self._depth += 1
            elif ch == CLOSE_BRACE:
                self._depth -= 1
                if self._depth == 0 or not self.track_nesting:
                    records.append("".join(self._buffer))
                    self._buffer = []
                    self._depth = 0
                    self.emitted += 1
                    self.state = ScanState.OUTSIDE
        return records

    def finish(self) -> None:
        """Mark end of stream. An unterminated record is dropped."""
        if self.state is ScanState.INSIDE:
            self.discarded_partial += 1
        self._buffer = []
        self._depth = 0
        self.state = ScanState.OUTSIDE

    def iter_records(self, stream, *, read_size: int = DEFAULT_READ_SIZE) -> Iterator[str]:
        """Lazily yield records from a text stream, closing it on every exit path.

        `stream` is either an iterable of text chunks or an object with
        ``read(size)``. Read errors surface as StreamFailure.
        """
        try:
            try:
                for chunk in _chunks(stream, read_size):
                    yield from self.feed(chunk)
            except (OSError, requests.RequestException) as exc:
                raise StreamFailure(f"Stream failed after {self.emitted} records: {exc}") from exc
            self.finish()
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()


def _chunks(stream, read_size: int) -> Iterator[str]:
    read = getattr(stream, "read", None)
    if callable(read):
        while True:
            chunk = read(read_size)
            if not chunk:
                return
            yield chunk
    else:
        yield from stream


def iter_records(
    stream,
    *,
    strip_backslashes: bool = True,
    track_nesting: bool = False,
) -> Iterator[str]:
    return RecordTokenizer(strip_backslashes=strip_backslashes, track_nesting=track_nesting).iter_records(stream)
