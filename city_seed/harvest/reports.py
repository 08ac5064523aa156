"""Run summary output."""

from __future__ import annotations

from pathlib import Path

from city_seed.common.fs import write_json
from city_seed.harvest.runner import SeedResult


def write_run_summary(data_dir: Path, result: SeedResult, *, error_code: str | None = None) -> Path:
    status = "success"
    if error_code is not None or not result.completed:
        status = "error"
    elif result.is_partial:
        status = "partial"

    payload = result.to_dict()
    payload["status"] = status
    payload["error_code"] = error_code

    summary_path = data_dir / "run_meta" / f"{result.run_id}.summary.json"
    write_json(summary_path, payload)
    return summary_path
