"""HTTP client that opens streamed GET responses for the record feeds."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from types import TracebackType
from typing import Iterator

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from city_seed.common.constants import USER_AGENT
from city_seed.common.errors import StageError

DEFAULT_CHARSET = "utf-8"
DEFAULT_CHUNK_SIZE = 8192


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float | None = None
    read: float | None = None

    def as_requests_timeout(self) -> tuple[float | None, float | None] | None:
        if self.connect is None and self.read is None:
            return None
        return (self.connect, self.read)


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class ResponseStream:
    """Open response body yielding decoded text chunks. Closing releases the connection."""

    def __init__(self, response: requests.Response, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.response = response
        self.chunk_size = chunk_size
        self.charset = _charset(response)
        self.closed = False

    def __iter__(self) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder(self.charset)(errors="replace")
        for chunk in self.response.iter_content(chunk_size=self.chunk_size):
            text = decoder.decode(chunk)
            if text:
                yield text
        tail = decoder.decode(b"", final=True)
        if tail:
            yield tail

    def close(self) -> None:
        if not self.closed:
            self.response.close()
            self.closed = True

    def __enter__(self) -> "ResponseStream":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one GET. `stream` is None when the provider had no data (any non-200 status)."""

    url: str
    status_code: int
    stream: ResponseStream | None

    @property
    def has_data(self) -> bool:
        return self.stream is not None


def _charset(response: requests.Response) -> str:
    content_type = (response.headers or {}).get("Content-Type", "")
    if "charset=" in content_type.lower() and response.encoding:
        try:
            codecs.lookup(response.encoding)
        except LookupError:
            return DEFAULT_CHARSET
        return response.encoding
    return DEFAULT_CHARSET


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.chunk_size = chunk_size
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT, "Accept": "application/json"}

    def _send(self, url: str) -> requests.Response:
        try:
            return self.session.request(
                method="GET",
                url=url,
                headers=self._headers(),
                timeout=self.timeout.as_requests_timeout(),
                stream=True,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RetryableHttpError(f"Transport failure for {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise HttpRequestError(f"Request failed for {url}: {exc}") from exc

    def open_stream(self, url: str) -> FetchOutcome:
        # Only transport errors are retried; a status code is a final answer.
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _wrapped() -> requests.Response:
            return self._send(url)

        response = _wrapped()
        if response.status_code != 200:
            response.close()
            return FetchOutcome(url=url, status_code=response.status_code, stream=None)
        return FetchOutcome(
            url=url,
            status_code=response.status_code,
            stream=ResponseStream(response, chunk_size=self.chunk_size),
        )
