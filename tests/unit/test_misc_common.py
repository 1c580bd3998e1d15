import json
import logging
from pathlib import Path

from realty_map.common.fs import write_json
from realty_map.common.logging import JsonLineFormatter, build_logger, log_event
from realty_map.common.time_utils import generate_run_id


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("load-")


def test_json_formatter_emits_stable_fields():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "batch lost", None, None)
    record.event = "BATCH_FAIL"
    record.worker_id = 3

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["event"] == "BATCH_FAIL"
    assert payload["worker_id"] == 3
    assert payload["level"] == "WARNING"
    assert payload["run_id"] is None
    assert payload["message"] == "batch lost"


def test_build_logger_writes_jsonl_file(tmp_path: Path):
    logger = build_logger("run-log", data_dir=tmp_path)
    log_event(logger, "hello", stage="load", event="TEST", status="ok")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run_meta" / "run-log.log.jsonl").read_text(encoding="utf-8").splitlines()
    last = json.loads(lines[-1])
    assert last["event"] == "TEST"
    assert last["run_id"] == "run-log"


def test_write_json_replaces_target_without_leftovers(tmp_path: Path):
    path = tmp_path / "nested" / "out.json"
    write_json(path, {"b": 1, "a": "Дом"})
    write_json(path, {"b": 2})

    assert json.loads(path.read_text(encoding="utf-8")) == {"b": 2}
    assert [child.name for child in path.parent.iterdir()] == ["out.json"]
