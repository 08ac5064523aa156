"""Operator-facing progress output for a seeding run."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from city_seed.common.constants import FINISH_MESSAGE, PROGRESS_CADENCE, PROGRESS_DENOMINATOR, START_MESSAGE
from city_seed.common.logging import log_event


def progress_percent(counter: int, denominator: int = PROGRESS_DENOMINATOR) -> int:
    return counter * 100 // denominator


class ProgressReporter:
    """Counts successful fetches and prints a percentage every `cadence` successes.

    The percentage is relative to a fixed denominator, not to the catalog size,
    so a run may finish below 100%.
    """

    def __init__(
        self,
        *,
        cadence: int = PROGRESS_CADENCE,
        denominator: int = PROGRESS_DENOMINATOR,
        out: TextIO | None = None,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ) -> None:
        self.cadence = cadence
        self.denominator = denominator
        self.out = out
        self.logger = logger
        self.run_id = run_id
        self.counter = 0
        self.reported: list[int] = []

    def _write(self, line: str) -> None:
        out = self.out if self.out is not None else sys.stdout
        out.write(line + "\n")
        out.flush()

    def start(self) -> None:
        self._write(START_MESSAGE)
        self._write("0%")

    def record_success(self) -> int | None:
        self.counter += 1
        if self.counter % self.cadence != 0:
            return None
        percent = progress_percent(self.counter, self.denominator)
        self.reported.append(percent)
        self._write(f"{percent}%")
        if self.logger is not None:
            log_event(
                self.logger,
                f"{percent}% complete",
                run_id=self.run_id,
                stage="seed",
                event="PROGRESS",
                status="ok",
                percent=percent,
            )
        return percent

    def finish(self) -> None:
        self._write(FINISH_MESSAGE)
