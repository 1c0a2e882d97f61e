from __future__ import annotations

import pytest

from data_alchemist.commands.parser import COMMAND_EXAMPLES, NOT_UNDERSTOOD_MESSAGE, parse_command
from data_alchemist.commands.preview import condition_matches, preview_command
from data_alchemist.models.command import CommandAction, Condition, ConditionOperator
from data_alchemist.models.dataset import DatasetKind


def test_change_all_priority_levels():
    cmd = parse_command("Change all PriorityLevels to 5")
    assert cmd is not None
    assert cmd.action is CommandAction.CHANGE
    assert (cmd.field, cmd.value, cmd.dataset, cmd.condition) == ("PriorityLevel", 5, DatasetKind.CLIENTS, None)


def test_set_max_load_for_group_keeps_typed_case():
    cmd = parse_command("Set MaxLoadPerPhase to 2 for GroupB workers")
    assert cmd is not None
    assert cmd.action is CommandAction.SET
    assert (cmd.field, cmd.value, cmd.dataset) == ("MaxLoadPerPhase", 2, DatasetKind.WORKERS)
    assert cmd.condition == Condition("WorkerGroup", ConditionOperator.EQUALS, "GroupB")


def test_update_group_clients_priority():
    cmd = parse_command("update all GroupA clients priority to 4")
    assert cmd is not None
    assert cmd.action is CommandAction.UPDATE
    assert (cmd.field, cmd.value, cmd.dataset) == ("PriorityLevel", 4, DatasetKind.CLIENTS)
    assert cmd.condition == Condition("GroupTag", ConditionOperator.EQUALS, "GroupA")


@pytest.mark.parametrize("text", ["", "delete everything", "change some PriorityLevels to 5", "set Duration to 3"])
def test_unrecognized_text_returns_none(text):
    assert parse_command(text) is None


def test_examples_are_understood_and_quoted_in_help():
    for example in COMMAND_EXAMPLES:
        assert parse_command(example) is not None
        assert example in NOT_UNDERSTOOD_MESSAGE


def test_preview_does_not_mutate_input():
    rows = [{"WorkerID": "W1", "WorkerGroup": "GroupB", "MaxLoadPerPhase": "4"}]
    cmd = parse_command("Set MaxLoadPerPhase to 2 for GroupB workers")
    preview = preview_command(cmd, rows)
    assert rows[0]["MaxLoadPerPhase"] == "4"
    assert preview.rows[0]["MaxLoadPerPhase"] == 2
    assert preview.rows[0] is not rows[0]


def test_preview_only_touches_matching_rows():
    rows = [
        {"WorkerID": "W1", "WorkerGroup": "GroupB", "MaxLoadPerPhase": 4},
        {"WorkerID": "W2", "WorkerGroup": "GroupA", "MaxLoadPerPhase": 4},
        {"WorkerID": "W3", "WorkerGroup": "groupb", "MaxLoadPerPhase": 4},
        {"WorkerID": "W4", "WorkerGroup": "GroupB", "MaxLoadPerPhase": 2},
    ]
    preview = preview_command(parse_command("Set MaxLoadPerPhase to 2 for GroupB workers"), rows)
    assert [r["MaxLoadPerPhase"] for r in preview.rows] == [2, 4, 4, 2]
    # W4 は既に 2 なので変更なし
    assert preview.affected_rows == 1


def test_preview_without_condition_rewrites_every_row():
    rows = [{"ClientID": "C1", "PriorityLevel": 1}, {"ClientID": "C2", "PriorityLevel": 5}]
    preview = preview_command(parse_command("change all prioritylevel to 5"), rows)
    assert [r["PriorityLevel"] for r in preview.rows] == [5, 5]
    assert preview.affected_rows == 1


def test_condition_operators():
    row = {"Skills": "Python,SQL", "Duration": "4"}
    assert condition_matches(None, row)
    assert condition_matches(Condition("Skills", ConditionOperator.CONTAINS, "sql"), row)
    assert condition_matches(Condition("Duration", ConditionOperator.GREATER, 3), row)
    assert not condition_matches(Condition("Duration", ConditionOperator.LESS, 3), row)
    assert condition_matches(Condition("Duration", ConditionOperator.EQUALS, 4), row)


def test_lowercase_phrasing_keeps_group_as_typed():
    cmd = parse_command("set maxloadperphase to 2 for groupb workers")
    assert cmd is not None
    assert cmd.condition == Condition("WorkerGroup", ConditionOperator.EQUALS, "groupb")


@pytest.mark.parametrize(
    "text",
    [
        "Update all café clients priority to 3",
        "Set MaxLoadPerPhase to ３ for GroupA workers",
    ],
)
def test_templates_only_take_ascii_words_and_digits(text):
    assert parse_command(text) is None
