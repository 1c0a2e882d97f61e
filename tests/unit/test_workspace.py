from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from data_alchemist.ai.service import NO_LATENCY, StubAIService
from data_alchemist.commands.parser import NOT_UNDERSTOOD_MESSAGE
from data_alchemist.models.dataset import DatasetKind
from data_alchemist.services.workspace import COMMAND_FAILED_MESSAGE, Workspace, WorkspaceError
from data_alchemist.tabular.reader import UnsupportedFileTypeError


@pytest.fixture()
def ws() -> Workspace:
    return Workspace(ai=StubAIService(latency=NO_LATENCY))


@pytest.fixture()
def loaded(ws: Workspace, sample_files: dict[str, Path]) -> Workspace:
    ws.load_files({DatasetKind.parse(k): p for k, p in sample_files.items()})
    return ws


class ExplodingAI(StubAIService):
    async def parse_modification_command(self, command):
        raise RuntimeError("backend down")

    async def generate_rule_recommendations(self, datasets):
        raise RuntimeError("backend down")

    async def generate_validation_insights(self, datasets):
        raise RuntimeError("backend down")

    async def suggest_correction(self, message, row, kind):
        raise RuntimeError("backend down")


def test_new_workspace_is_empty(ws: Workspace):
    assert not ws.has_data
    assert all(rows == [] for rows in ws.snapshot().values())
    assert ws.weights.priority_level == 5


def test_load_files_validates_each_dataset(loaded: Workspace):
    assert loaded.has_data
    assert len(loaded.rows("clients")) == 3
    assert all(issues == [] for issues in loaded.all_issues().values())


def test_failed_load_keeps_previous_snapshot(loaded: Workspace, temp_workdir: Path):
    before = loaded.rows("clients")
    bad = temp_workdir / "clients.txt"
    bad.write_text("x", encoding="utf-8")
    with pytest.raises(UnsupportedFileTypeError):
        loaded.load_file("clients", bad)
    assert loaded.rows("clients") is before


def test_edit_cell_replaces_snapshot_and_revalidates(loaded: Workspace):
    before = loaded.rows("clients")
    issues = loaded.edit_cell("clients", 0, "PriorityLevel", "9")
    assert [i.message for i in issues] == ['Row 1: PriorityLevel must be 1-5, got "9"']
    assert before[0]["PriorityLevel"] == "3"
    assert loaded.rows("clients")[0]["PriorityLevel"] == "9"
    assert loaded.rows("clients") is not before


def test_edit_cell_out_of_range(loaded: Workspace):
    with pytest.raises(WorkspaceError):
        loaded.edit_cell("clients", 10, "PriorityLevel", "1")


def test_search_view(loaded: Workspace):
    assert loaded.view("clients") is loaded.rows("clients")
    rows = loaded.set_query("clients", "priority > 4")
    assert [r["ClientID"] for r in rows] == ["C2"]
    assert [r["ClientID"] for r in loaded.view("clients")] == ["C2"]


def test_submit_apply_command(loaded: Workspace):
    preview = asyncio.run(loaded.submit_command("Set MaxLoadPerPhase to 5 for GroupB workers"))
    assert preview is not None
    assert preview.affected_rows == 1
    # プレビュー中はデータ不変
    assert loaded.rows("workers")[1]["MaxLoadPerPhase"] == "3"

    loaded.apply_preview()
    assert loaded.pending_preview is None
    assert loaded.rows("workers")[1]["MaxLoadPerPhase"] == 5
    assert loaded.rows("workers")[0]["MaxLoadPerPhase"] == "2"


def test_cancel_preview(loaded: Workspace):
    asyncio.run(loaded.submit_command("Change all PriorityLevels to 1"))
    loaded.cancel_preview()
    with pytest.raises(WorkspaceError):
        loaded.apply_preview()
    assert loaded.rows("clients")[1]["PriorityLevel"] == "5"


def test_submit_unrecognized_command(loaded: Workspace):
    assert asyncio.run(loaded.submit_command("make it better")) is None
    assert loaded.command_error == NOT_UNDERSTOOD_MESSAGE


def test_ai_failures_degrade_to_empty_results(sample_files: dict[str, Path]):
    ws = Workspace(ai=ExplodingAI(latency=NO_LATENCY))
    ws.load_files({DatasetKind.parse(k): p for k, p in sample_files.items()})
    ws.edit_cell("clients", 0, "AttributesJSON", "{bad: 1}")

    assert asyncio.run(ws.submit_command("Change all PriorityLevels to 1")) is None
    assert ws.command_error == COMMAND_FAILED_MESSAGE
    assert asyncio.run(ws.generate_recommendations()) == []
    assert asyncio.run(ws.run_smart_scan()) == []
    assert asyncio.run(ws.generate_corrections("clients")) == {}


def test_recommendations_accept_and_ignore(loaded: Workspace):
    recs = asyncio.run(loaded.generate_recommendations())
    assert [r.id for r in recs] == ["coRun-T1-T2"]
    rule_id = loaded.accept_recommendation("coRun-T1-T2")
    assert loaded.recommendations == []
    assert [r.parameters for _, r in loaded.rules.items()] == [{"taskIds": ["T1", "T2"]}]
    assert rule_id == 1
    with pytest.raises(WorkspaceError):
        loaded.accept_recommendation("coRun-T1-T2")

    asyncio.run(loaded.generate_recommendations())
    loaded.ignore_recommendation("coRun-T1-T2")
    assert loaded.recommendations == []


def test_smart_scan_replaces_previous_results(loaded: Workspace):
    assert asyncio.run(loaded.run_smart_scan()) == []
    loaded.edit_cell("tasks", 0, "RequiredSkills", "rust")
    insights = asyncio.run(loaded.run_smart_scan())
    assert [i.message for i in insights] == ["Missing worker skills: rust"]


def test_corrections_generate_and_apply(loaded: Workspace):
    loaded.edit_cell("clients", 1, "AttributesJSON", "{tier: 'silver'}")
    loaded.edit_cell("clients", 2, "RequestedTaskIDs", "T4,bogus")
    suggestions = asyncio.run(loaded.generate_corrections("clients"))
    assert suggestions == {0: '{"tier": "silver"}', 1: "T4"}

    issues = loaded.apply_correction("clients", 0)
    assert loaded.rows("clients")[1]["AttributesJSON"] == '{"tier": "silver"}'
    assert len(issues) == 1
    # 再検証で候補は破棄される
    assert loaded.corrections[DatasetKind.CLIENTS] == {}
    with pytest.raises(WorkspaceError):
        loaded.apply_correction("clients", 0)


def test_apply_all_corrections(loaded: Workspace):
    loaded.edit_cell("clients", 1, "AttributesJSON", "{tier: 'silver'}")
    loaded.edit_cell("clients", 2, "RequestedTaskIDs", "T4,bogus")
    asyncio.run(loaded.generate_corrections("clients"))
    assert loaded.apply_all_corrections("clients") == []
    assert loaded.rows("clients")[2]["RequestedTaskIDs"] == "T4"


def test_set_weight_accepts_both_names(ws: Workspace):
    ws.set_weight("skillFit", 1)
    ws.set_weight("cost", 2)
    ws.set_weight("max_concurrent", 9)
    assert ws.weights.to_dict()["skillFit"] == 1
    assert ws.weights.cost == 2
    assert ws.weights.max_concurrent == 9
    with pytest.raises(WorkspaceError):
        ws.set_weight("speed", 3)
    with pytest.raises(ValueError):
        ws.set_weight("cost", 11)


def test_export_writes_artifacts(loaded: Workspace, temp_workdir: Path):
    loaded.rules.add_rule("phaseWindow", "T1 early", {"taskId": "T1", "phases": [1, 2]})
    paths = loaded.export(temp_workdir / "export")
    assert sorted(p.name for p in paths) == sorted(
        ["clients.csv", "workers.csv", "tasks.csv", "rules.json", "prioritization.json"]
    )
