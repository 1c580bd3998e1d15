"""Load run summary report."""

from __future__ import annotations

from pathlib import Path

from realty_map.common.fs import write_json
from realty_map.common.models import LoadSummary


def write_load_summary(data_dir: Path, *, run_id: str, input_path: Path, summary: LoadSummary) -> Path:
    summary_path = data_dir / "run_meta" / f"{run_id}.summary.json"
    payload = {
        "run_id": run_id,
        "input_path": str(input_path),
        "status": "success",
        **summary.to_dict(),
    }
    write_json(summary_path, payload)
    return summary_path
