from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..ai.corrections import apply_correction as apply_correction_to_rows
from ..ai.service import AIService, StubAIService
from ..commands.parser import NOT_UNDERSTOOD_MESSAGE
from ..commands.preview import preview_command
from ..models.command import MutationPreview
from ..models.dataset import Dataset, DatasetKind, Row
from ..models.insights import RuleRecommendation, ValidationInsight
from ..models.rules import WEIGHT_EXPORT_NAMES, PrioritizationWeights
from ..models.validation_issue import ValidationIssue
from ..query.search import filter_rows
from ..tabular.reader import read_table
from ..tabular.writer import export_all
from ..validation.validators import validate_dataset
from .progress import ProgressTracker
from .rules_builder import RulesBuilder

"""Workspace: the current snapshot of all three datasets.

Every mutation (file load, cell edit, applied command, applied correction)
replaces the whole row list of one dataset and recomputes that dataset's
validation issues from scratch. Search results, previews, recommendations,
insights and correction suggestions are derived views; re-running one of the
analyses replaces the previous result set.

Analysis calls go through an AIService. A failing call is logged and degrades
to an empty result; the workspace stays usable.
"""

logger = logging.getLogger(__name__)

COMMAND_FAILED_MESSAGE = "Failed to process command. Please try again."


class WorkspaceError(Exception):
    """Raised for invalid workspace operations (bad row index, no pending preview...)."""


class Workspace:
    def __init__(
        self,
        ai: AIService | None = None,
        weights: PrioritizationWeights | None = None,
    ) -> None:
        self.ai: AIService = ai if ai is not None else StubAIService()
        self.weights = weights if weights is not None else PrioritizationWeights()
        self.rules = RulesBuilder()
        self._datasets: dict[DatasetKind, Dataset] = {k: Dataset(kind=k) for k in DatasetKind}
        self._issues: dict[DatasetKind, list[ValidationIssue]] = {k: [] for k in DatasetKind}
        self._queries: dict[DatasetKind, str] = {k: "" for k in DatasetKind}
        self.pending_preview: MutationPreview | None = None
        self.command_error: str | None = None
        self.recommendations: list[RuleRecommendation] = []
        self.insights: list[ValidationInsight] = []
        self.corrections: dict[DatasetKind, dict[int, str]] = {k: {} for k in DatasetKind}

    # ------------------------------------------------------------------
    # snapshots
    # ------------------------------------------------------------------
    def dataset(self, kind: DatasetKind | str) -> Dataset:
        return self._datasets[DatasetKind.parse(kind)]

    def rows(self, kind: DatasetKind | str) -> list[Row]:
        return self.dataset(kind).rows

    def issues(self, kind: DatasetKind | str) -> list[ValidationIssue]:
        return list(self._issues[DatasetKind.parse(kind)])

    def all_issues(self) -> dict[DatasetKind, list[ValidationIssue]]:
        return {k: list(v) for k, v in self._issues.items()}

    def snapshot(self) -> dict[DatasetKind, list[Row]]:
        """Rows of every dataset, keyed by kind (input for the analyses)."""
        return {k: d.rows for k, d in self._datasets.items()}

    @property
    def has_data(self) -> bool:
        return any(not d.is_empty for d in self._datasets.values())

    def _install(self, dataset: Dataset) -> Dataset:
        kind = dataset.kind
        self._datasets[kind] = dataset
        self._issues[kind] = validate_dataset(kind, dataset.rows)
        # 行番号がずれるため過去の修正候補は破棄
        self.corrections[kind] = {}
        logger.debug(f"{kind.value}: rows={len(dataset)} issues={len(self._issues[kind])}")
        return dataset

    def load_file(self, kind: DatasetKind | str, path: Path) -> Dataset:
        """Replace a dataset with the contents of a CSV/XLSX file.

        Raises:
            UnsupportedFileTypeError / TableReadError: the load is aborted and
            the previous snapshot is kept
        """
        dataset = read_table(path, kind)
        logger.info(f"loaded {dataset.kind.value} from {path.name}: {len(dataset)} rows")
        return self._install(dataset)

    def load_files(self, paths: Mapping[DatasetKind, Path]) -> dict[DatasetKind, Dataset]:
        loaded: dict[DatasetKind, Dataset] = {}
        with ProgressTracker(len(paths), label="Loading") as progress:
            for kind, path in paths.items():
                with progress.step(path.name):
                    loaded[kind] = self.load_file(kind, path)
                progress.note(rows=sum(len(d) for d in loaded.values()))
        return loaded

    def replace_rows(self, kind: DatasetKind | str, rows: list[Row]) -> list[ValidationIssue]:
        """Replace a dataset's rows wholesale and revalidate."""
        current = self.dataset(kind)
        self._install(current.with_rows(list(rows)))
        return self.issues(current.kind)

    def edit_cell(self, kind: DatasetKind | str, row_index: int, column: str, value: Any) -> list[ValidationIssue]:
        """Grid edit: copy-on-write update of a single cell."""
        rows = self.rows(kind)
        if not 0 <= row_index < len(rows):
            raise WorkspaceError(f"row index out of range: {row_index} (rows={len(rows)})")
        updated = list(rows)
        new_row = dict(updated[row_index])
        new_row[column] = value
        updated[row_index] = new_row
        return self.replace_rows(kind, updated)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------
    def set_query(self, kind: DatasetKind | str, query: str) -> list[Row]:
        self._queries[DatasetKind.parse(kind)] = query
        return self.view(kind)

    def view(self, kind: DatasetKind | str) -> list[Row]:
        """Rows currently visible for a dataset (search applied)."""
        kind = DatasetKind.parse(kind)
        return filter_rows(self._queries[kind], self._datasets[kind].rows)

    # ------------------------------------------------------------------
    # natural-language modification
    # ------------------------------------------------------------------
    async def submit_command(self, text: str) -> MutationPreview | None:
        """Parse a modification sentence and compute its preview.

        Returns None when the sentence is not understood or processing fails;
        command_error then holds the message to show. No dataset changes.
        """
        self.command_error = None
        self.pending_preview = None
        try:
            command = await self.ai.parse_modification_command(text)
        except Exception as e:
            logger.warning(f"command parsing failed: {e}")
            self.command_error = COMMAND_FAILED_MESSAGE
            return None
        if command is None:
            self.command_error = NOT_UNDERSTOOD_MESSAGE
            return None
        preview = preview_command(command, self.rows(command.dataset))
        logger.info(f"preview: {command.describe()} affected_rows={preview.affected_rows}")
        self.pending_preview = preview
        return preview

    def apply_preview(self) -> Dataset:
        """Commit the pending preview as the new dataset snapshot."""
        preview = self.pending_preview
        if preview is None:
            raise WorkspaceError("no pending preview to apply")
        self.pending_preview = None
        self.replace_rows(preview.command.dataset, preview.rows)
        return self.dataset(preview.command.dataset)

    def cancel_preview(self) -> None:
        self.pending_preview = None

    # ------------------------------------------------------------------
    # analyses
    # ------------------------------------------------------------------
    async def generate_recommendations(self) -> list[RuleRecommendation]:
        try:
            self.recommendations = await self.ai.generate_rule_recommendations(self.snapshot())
        except Exception as e:
            logger.warning(f"failed to generate recommendations: {e}")
            self.recommendations = []
        return list(self.recommendations)

    def accept_recommendation(self, recommendation_id: str) -> int:
        """Turn a recommendation into a rule and drop it from the list."""
        for rec in self.recommendations:
            if rec.id == recommendation_id:
                self.recommendations = [r for r in self.recommendations if r.id != recommendation_id]
                return self.rules.accept(rec)
        raise WorkspaceError(f"unknown recommendation: {recommendation_id}")

    def ignore_recommendation(self, recommendation_id: str) -> None:
        self.recommendations = [r for r in self.recommendations if r.id != recommendation_id]

    async def run_smart_scan(self) -> list[ValidationInsight]:
        try:
            self.insights = await self.ai.generate_validation_insights(self.snapshot())
        except Exception as e:
            logger.warning(f"failed to generate insights: {e}")
            self.insights = []
        return list(self.insights)

    async def generate_corrections(self, kind: DatasetKind | str) -> dict[int, str]:
        """Correction suggestions keyed by issue index (position in issues(kind))."""
        kind = DatasetKind.parse(kind)
        rows = self.rows(kind)
        suggestions: dict[int, str] = {}
        try:
            for index, issue in enumerate(self._issues[kind]):
                row_index = issue.row_index
                if row_index is None or not 0 <= row_index < len(rows):
                    continue
                suggestion = await self.ai.suggest_correction(issue.message, rows[row_index], kind)
                if suggestion:
                    suggestions[index] = suggestion
        except Exception as e:
            logger.warning(f"failed to generate corrections: {e}")
            suggestions = {}
        self.corrections[kind] = suggestions
        return dict(suggestions)

    def apply_all_corrections(self, kind: DatasetKind | str) -> list[ValidationIssue]:
        """Apply every pending suggestion of a dataset in one snapshot replacement."""
        kind = DatasetKind.parse(kind)
        rows = self.rows(kind)
        applied = 0
        for index, suggestion in sorted(self.corrections[kind].items()):
            updated = apply_correction_to_rows(self._issues[kind][index].message, rows, suggestion)
            if updated is not None:
                rows = updated
                applied += 1
        if applied == 0:
            return self.issues(kind)
        logger.info(f"{kind.value}: applied {applied} corrections")
        return self.replace_rows(kind, rows)

    def apply_correction(self, kind: DatasetKind | str, issue_index: int) -> list[ValidationIssue]:
        """Write a suggested correction into its row and revalidate."""
        kind = DatasetKind.parse(kind)
        suggestion = self.corrections[kind].get(issue_index)
        if suggestion is None:
            raise WorkspaceError(f"no correction for issue {issue_index} in {kind.value}")
        issue = self._issues[kind][issue_index]
        updated = apply_correction_to_rows(issue.message, self.rows(kind), suggestion)
        if updated is None:
            raise WorkspaceError(f"issue {issue_index} does not reference a correctable cell")
        return self.replace_rows(kind, updated)

    # ------------------------------------------------------------------
    # configuration / export
    # ------------------------------------------------------------------
    def set_weight(self, name: str, value: int) -> PrioritizationWeights:
        """Update one weight by field or export name (priority_level / priorityLevel)."""
        if name in WEIGHT_EXPORT_NAMES.values():
            field_name: str | None = name
        else:
            field_name = WEIGHT_EXPORT_NAMES.get(name)
        if field_name is None:
            raise WorkspaceError(f"unknown weight: {name}")
        self.weights = dataclasses.replace(self.weights, **{field_name: value})
        return self.weights

    def export(self, directory: Path) -> list[Path]:
        paths = export_all(self._datasets.values(), self.rules.rules, self.weights, directory)
        logger.info(f"exported {len(paths)} files to {directory}")
        return paths
