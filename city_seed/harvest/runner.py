"""Seeding orchestration: fetch, tokenize, decode and persist per location."""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

from city_seed.common.constants import CATEGORIES, CATEGORY_LOCATION_DATA, CATEGORY_OCCUPATION_DATA
from city_seed.common.errors import StageError, StreamFailure
from city_seed.common.http import FetchOutcome, HttpRequestError
from city_seed.common.logging import log_event, log_warning
from city_seed.common.models import Endpoints
from city_seed.harvest.decoder import (
    DecodePolicy,
    DecodeResult,
    apply_policy,
    decode_location_record,
    decode_occupation_record,
)
from city_seed.harvest.progress import ProgressReporter
from city_seed.harvest.targets import build_request_targets
from city_seed.harvest.tokenizer import TokenizerOptions
from city_seed.store.sink import EntitySink

DECODERS: dict[str, Callable[[str], DecodeResult]] = {
    CATEGORY_LOCATION_DATA: decode_location_record,
    CATEGORY_OCCUPATION_DATA: decode_occupation_record,
}


class StreamOpener(Protocol):
    def open_stream(self, url: str) -> FetchOutcome:
        ...


@dataclass
class SeedResult:
    run_id: str
    locations: int = 0
    successful_fetches: int = 0
    rejected_fetches: list[dict[str, Any]] = field(default_factory=list)
    stream_failures: list[dict[str, Any]] = field(default_factory=list)
    persisted: dict[str, int] = field(default_factory=lambda: {category: 0 for category in CATEGORIES})
    zero_filled_records: int = 0
    skipped_records: int = 0
    discarded_partials: int = 0
    completed: bool = False

    @property
    def is_partial(self) -> bool:
        return bool(self.stream_failures) or self.skipped_records > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "locations": self.locations,
            "successful_fetches": self.successful_fetches,
            "rejected_fetches": list(self.rejected_fetches),
            "stream_failures": list(self.stream_failures),
            "persisted": dict(self.persisted),
            "zero_filled_records": self.zero_filled_records,
            "skipped_records": self.skipped_records,
            "discarded_partials": self.discarded_partials,
            "completed": self.completed,
        }


def _record_failure(
    result: SeedResult,
    logger: logging.Logger,
    exc: StageError,
    *,
    token: str,
    category: str,
    url: str,
) -> None:
    result.stream_failures.append(
        {
            "location": token,
            "category": category,
            "url": url,
            "error_code": exc.error_code,
            "message": str(exc),
        }
    )
    log_warning(
        logger,
        f"could not read {category} for {token}: {exc}",
        run_id=result.run_id,
        stage="seed",
        location=token,
        category=category,
        event="STREAM_FAILURE",
        status="error",
        error_code=exc.error_code,
    )


def _seed_category(
    token: str,
    category: str,
    url: str,
    client: StreamOpener,
    sink: EntitySink,
    reporter: ProgressReporter,
    result: SeedResult,
    logger: logging.Logger,
    policy: DecodePolicy,
    tokenizer_options: TokenizerOptions,
) -> None:
    try:
        outcome = client.open_stream(url)
    except HttpRequestError as exc:
        _record_failure(result, logger, exc, token=token, category=category, url=url)
        return

    if not outcome.has_data:
        result.rejected_fetches.append({"location": token, "category": category, "status_code": outcome.status_code})
        log_event(
            logger,
            f"no {category} for {token} (HTTP {outcome.status_code})",
            run_id=result.run_id,
            stage="seed",
            location=token,
            category=category,
            event="FETCH_REJECTED",
            status="skipped",
        )
        return

    result.successful_fetches += 1
    reporter.record_success()

    decode = DECODERS[category]
    tokenizer = tokenizer_options.build()
    persisted = 0
    try:
        with closing(tokenizer.iter_records(outcome.stream)) as records:
            for raw in records:
                decoded = decode(raw)
                entity = apply_policy(decoded, policy)
                if not decoded.is_clean:
                    log_warning(
                        logger,
                        f"malformed {category} record for {token}: "
                        f"missing={list(decoded.missing)} invalid={list(decoded.invalid)} error={decoded.error}",
                        run_id=result.run_id,
                        stage="seed",
                        location=token,
                        category=category,
                        event="RECORD_MALFORMED",
                        status="skipped" if entity is None else "defaulted",
                    )
                if entity is None:
                    result.skipped_records += 1
                    continue
                if not decoded.is_clean:
                    result.zero_filled_records += 1
                sink.persist(entity)
                persisted += 1
    except StreamFailure as exc:
        _record_failure(result, logger, exc, token=token, category=category, url=url)
        return
    finally:
        result.persisted[category] += persisted

    if tokenizer.discarded_partial:
        result.discarded_partials += tokenizer.discarded_partial
        log_warning(
            logger,
            f"unterminated {category} record dropped for {token}",
            run_id=result.run_id,
            stage="seed",
            location=token,
            category=category,
            event="PARTIAL_DISCARDED",
            status="skipped",
        )

    log_event(
        logger,
        f"{category} for {token} done",
        run_id=result.run_id,
        stage="seed",
        location=token,
        category=category,
        event="FETCH_OK",
        status="ok",
        records=persisted,
    )


def run_seed(
    catalog: Iterable[str],
    endpoints: Endpoints,
    client: StreamOpener,
    sink: EntitySink,
    *,
    reporter: ProgressReporter | None = None,
    logger: logging.Logger | None = None,
    run_id: str = "seed",
    policy: DecodePolicy = DecodePolicy.DEFAULT,
    tokenizer_options: TokenizerOptions | None = None,
    result: SeedResult | None = None,
) -> SeedResult:
    """Run the whole catalog in order, category A then B per location.

    Rejected fetches and unreadable streams are recorded and skipped. Sink
    failures and strict-policy decode failures propagate and end the run
    without the completion message. Pass `result` to keep the tally of an
    aborted run.
    """
    logger = logger or logging.getLogger("city_seed")
    reporter = reporter or ProgressReporter(logger=logger, run_id=run_id)
    tokenizer_options = tokenizer_options or TokenizerOptions()
    result = result if result is not None else SeedResult(run_id=run_id)

    reporter.start()
    log_event(logger, "seed run start", run_id=run_id, stage="seed", event="RUN_START", status="ok")

    for token in catalog:
        targets = build_request_targets(token, endpoints)
        for category in CATEGORIES:
            _seed_category(
                token,
                category,
                targets.for_category(category),
                client,
                sink,
                reporter,
                result,
                logger,
                policy,
                tokenizer_options,
            )
        result.locations += 1

    result.completed = True
    reporter.finish()
    log_event(
        logger,
        "seed run end",
        run_id=run_id,
        stage="seed",
        event="RUN_END",
        status="partial" if result.is_partial else "ok",
        records=sum(result.persisted.values()),
    )
    return result
