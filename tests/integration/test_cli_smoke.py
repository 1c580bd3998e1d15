import json
from pathlib import Path

import pytest

from realty_map.cli import main, parse_args, run_command
from realty_map.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS

HEADER = "id,geo_lat,geo_lng,price,name,rooms_type_id,total_area,realty_type_id"


def _common(tmp_path: Path) -> list[str]:
    return [
        "--config-dir",
        "config",
        "--data-dir",
        str(tmp_path / "data"),
        "--database-url",
        f"sqlite:///{tmp_path / 'listings.db'}",
    ]


@pytest.mark.integration
def test_cli_load_then_query(tmp_path: Path, capsys):
    csv_path = tmp_path / "ads.csv"
    csv_path.write_text(
        "\n".join([HEADER, "1,55.0,83.0,2000000,A,1,30,1", "2,55.00001,83.00001,4000000,B,2,60,2", "3,0,0,1,C,,,1"]) + "\n",
        encoding="utf-8",
    )

    load_args = parse_args(["load", "--input", str(csv_path), "--workers", "2", "--create-schema", "--run-id", "run-test", *_common(tmp_path)])
    assert run_command(load_args) == EXIT_SUCCESS

    summary = json.loads((tmp_path / "data" / "run_meta" / "run-test.summary.json").read_text(encoding="utf-8"))
    assert summary["inserted"] == 2
    assert summary["status"] == "success"
    capsys.readouterr()

    cluster_args = parse_args(
        ["clusters", "--min-lat", "54.7", "--max-lat", "55.2", "--min-lng", "82.8", "--max-lng", "83.2", "--zoom", "10", *_common(tmp_path)]
    )
    assert run_command(cluster_args) == EXIT_SUCCESS
    clusters = json.loads(capsys.readouterr().out)
    assert len(clusters) == 1
    assert clusters[0]["point_count"] == 2
    assert clusters[0]["avg_price"] == 3000000.0

    property_args = parse_args(
        ["properties", "--min-lat", "54.7", "--max-lat", "55.2", "--min-lng", "82.8", "--max-lng", "83.2", "--limit", "1", *_common(tmp_path)]
    )
    assert run_command(property_args) == EXIT_SUCCESS
    properties = json.loads(capsys.readouterr().out)
    assert [item["id"] for item in properties] == [1]


@pytest.mark.integration
def test_cli_rejects_incomplete_cluster_query(tmp_path: Path):
    args = parse_args(["clusters", "--min-lat", "54.7", "--zoom", "10", *_common(tmp_path)])
    assert run_command(args) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_load_missing_input_is_hard_fail(tmp_path: Path):
    args = parse_args(["load", "--input", str(tmp_path / "absent.csv"), "--create-schema", *_common(tmp_path)])
    assert run_command(args) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_rejects_zoom_beyond_deepest_level(tmp_path: Path, capsys):
    argv = ["clusters", "--min-lat", "54.7", "--max-lat", "55.2", "--min-lng", "82.8", "--max-lng", "83.2", "--zoom", "1100", *_common(tmp_path)]
    assert main(argv) == EXIT_HARD_FAIL
    assert capsys.readouterr().out == ""
