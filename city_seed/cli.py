"""CLI entrypoint for the city and occupation seeding job."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from city_seed.catalog import resolve_catalog
from city_seed.common.config_loader import load_seed_config
from city_seed.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from city_seed.common.errors import PipelineError
from city_seed.common.http import HttpClient, RetryConfig, TimeoutConfig
from city_seed.common.ids import generate_run_id
from city_seed.common.logging import build_logger, close_logger, log_event
from city_seed.harvest.decoder import DecodePolicy
from city_seed.harvest.progress import ProgressReporter
from city_seed.harvest.reports import write_run_summary
from city_seed.harvest.runner import SeedResult, run_seed
from city_seed.harvest.tokenizer import TokenizerOptions
from city_seed.store.sink import MemorySink, SqlAlchemySink


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=["seed"])
    parser.add_argument("--config", default="./config/seed.yml")
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--database-url", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--decode-policy", default=None, choices=[policy.value for policy in DecodePolicy])
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--dry-run", action="store_true", help="decode everything but keep entities in memory")
    return parser.parse_args(argv)


def _build_client(cfg) -> HttpClient:
    timeout = TimeoutConfig()
    if cfg.timeout_seconds is not None:
        timeout = TimeoutConfig(connect=cfg.timeout_seconds, read=cfg.timeout_seconds)
    return HttpClient(timeout=timeout, retry=RetryConfig(max_attempts=cfg.max_attempts))


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    overlay = Path(args.overlay_config) if args.overlay_config else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        cfg = load_seed_config(Path(args.config), overlay_path=overlay)
        catalog = resolve_catalog(cfg.catalog_path)
        sink = MemorySink() if args.dry_run else SqlAlchemySink.from_url(args.database_url or cfg.database_url)
    except PipelineError as exc:
        log_event(logger, f"startup failed: {exc}", run_id=run_id, event="RUN_FAIL", status="error", error_code=exc.error_code)
        close_logger(logger)
        return EXIT_HARD_FAIL

    policy = DecodePolicy(args.decode_policy or cfg.decode_policy)
    reporter = ProgressReporter(
        cadence=cfg.progress_cadence,
        denominator=cfg.progress_denominator,
        logger=logger,
        run_id=run_id,
    )
    result = SeedResult(run_id=run_id)

    error_code = None
    try:
        with _build_client(cfg) as client:
            run_seed(
                catalog,
                cfg.endpoints,
                client,
                sink,
                reporter=reporter,
                logger=logger,
                run_id=run_id,
                policy=policy,
                tokenizer_options=TokenizerOptions(
                    strip_backslashes=cfg.strip_backslashes,
                    track_nesting=cfg.track_nesting,
                ),
                result=result,
            )
    except PipelineError as exc:
        error_code = exc.error_code
    except Exception:
        error_code = "UNEXPECTED_ERROR"
        logger.exception("unexpected failure", extra={"run_id": run_id, "event": "RUN_FAIL", "status": "error"})
    finally:
        sink.close()

    if error_code is not None:
        log_event(
            logger,
            f"seed run aborted after {result.locations} locations",
            run_id=run_id,
            stage="seed",
            event="RUN_FAIL",
            status="error",
            error_code=error_code,
        )
    write_run_summary(data_dir, result, error_code=error_code)
    close_logger(logger)

    if error_code is not None:
        return EXIT_HARD_FAIL
    if result.is_partial:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
