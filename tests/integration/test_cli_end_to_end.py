from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from data_alchemist.cli import main as cli_main


def _json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


def _args(files: dict[str, Path]) -> list[str]:
    args: list[str] = []
    for name, path in files.items():
        args += [f"--{name}", str(path)]
    return args


def test_search_prints_matching_rows(sample_files, capsys):
    code = cli_main(_args(sample_files) + ["search", "clients", "priority > 4"])
    out = capsys.readouterr().out
    assert code == 0
    assert [r["ClientID"] for r in _json_lines(out)] == ["C2"]
    assert "INFO search clients: 1/3 rows match" in out


def test_modify_preview_only_does_not_export(sample_files, temp_workdir: Path, capsys):
    code = cli_main(_args(sample_files) + ["modify", "Set MaxLoadPerPhase to 1 for GroupA workers"])
    docs = _json_lines(capsys.readouterr().out)
    assert code == 0
    assert docs == [
        {
            "command": "set MaxLoadPerPhase to 1 on workers where WorkerGroup equals GroupA",
            "dataset": "workers",
            "affected_rows": 1,
        }
    ]
    assert not (temp_workdir / "export").exists()


def test_modify_apply_exports_changed_rows(sample_files, temp_workdir: Path, capsys):
    code = cli_main(_args(sample_files) + ["modify", "Change all PriorityLevels to 2", "--apply", "--output", "out"])
    assert code == 0
    with (temp_workdir / "out" / "clients.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["PriorityLevel"] for r in rows] == ["2", "2", "2"]


def test_modify_not_understood_is_fatal(sample_files, capsys):
    code = cli_main(_args(sample_files) + ["modify", "shuffle everything"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR Could not understand the command." in out


def test_recommend_and_accept(sample_files, temp_workdir: Path, capsys):
    code = cli_main(_args(sample_files) + ["recommend", "--accept", "coRun-T1-T2", "--output", "out"])
    docs = _json_lines(capsys.readouterr().out)
    assert code == 0
    assert [d["id"] for d in docs] == ["coRun-T1-T2"]
    rules = json.loads((temp_workdir / "out" / "rules.json").read_text(encoding="utf-8"))
    assert rules["metadata"]["totalRules"] == 1


def test_recommend_unknown_id(sample_files, capsys):
    assert cli_main(_args(sample_files) + ["recommend", "--accept", "nope"]) == 1


def test_scan_reports_skill_gap(sample_files, temp_workdir: Path, capsys):
    tasks = sample_files["tasks"]
    tasks.write_text(tasks.read_text(encoding="utf-8").replace("ETL,2,python", "ETL,2,rust"), encoding="utf-8")
    code = cli_main(_args(sample_files) + ["scan"])
    docs = _json_lines(capsys.readouterr().out)
    assert code == 0
    assert docs == [
        {
            "severity": "error",
            "message": "Missing worker skills: rust",
            "field": "RequiredSkills",
            "suggested_fix": "Add workers with skills: rust",
        }
    ]


def test_correct_apply_fixes_clients(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "clients.csv"
    f.write_text(
        "ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON\n"
        "C1,Acme,3,\"T1,oops\",GroupA,\"{tier: 'gold'}\"\n",
        encoding="utf-8",
    )
    code = cli_main(["--clients", str(f), "correct", "clients", "--apply", "--output", "out"])
    out = capsys.readouterr().out
    assert code == 0
    assert [d["suggestion"] for d in _json_lines(out)] == ["T1", '{"tier": "gold"}']
    with (temp_workdir / "out" / "clients.csv").open(encoding="utf-8") as f_out:
        row = next(csv.DictReader(f_out))
    assert row["RequestedTaskIDs"] == "T1"
    assert row["AttributesJSON"] == '{"tier": "gold"}'


def test_missing_column_scenario(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "workers.csv"
    f.write_text(
        "WorkerID,WorkerName,Skills,AvailableSlots,MaxLoadPerPhase,WorkerGroup\n"
        "W1,Alice,python,\"[1,2]\",2,GroupA\n"
        "W2,Bob,java,\"[3]\",1,GroupB\n",
        encoding="utf-8",
    )
    code = cli_main(["--workers", str(f), "validate"])
    docs = _json_lines(capsys.readouterr().out)
    assert code == 2
    assert docs == [{"dataset": "workers", "row": -1, "message": "Missing required columns: QualificationLevel"}]


@pytest.mark.parametrize("flag", ["--debug"])
def test_debug_flag_enables_debug_lines(sample_files, capsys, flag):
    code = cli_main([flag] + _args(sample_files) + ["validate"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG validated clients" in out
