from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.dataset import Dataset
from ..models.rules import PrioritizationWeights, Rule, build_rules_export
from ..services.progress import ProgressTracker

"""Export writers.

Artifacts:
- {clients|workers|tasks}.csv for every non-empty dataset
- rules.json (version / rules / metadata)
- prioritization.json (six weights, raw integers)
"""

__all__ = [
    "RULES_FILE",
    "WEIGHTS_FILE",
    "write_dataset_csv",
    "write_json",
    "export_all",
]

logger = logging.getLogger(__name__)

RULES_FILE = "rules.json"
WEIGHTS_FILE = "prioritization.json"


def write_dataset_csv(dataset: Dataset, directory: Path) -> Path:
    """Write one dataset as {kind}.csv, keeping the declared column order."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{dataset.kind.value}.csv"
    columns = dataset.columns or (list(dataset.rows[0].keys()) if dataset.rows else [])
    df = pd.DataFrame(dataset.rows, columns=columns)
    df.to_csv(path, index=False, encoding="utf-8")
    return path


def write_json(path: Path, document: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def export_all(
    datasets: Iterable[Dataset],
    rules: list[Rule],
    weights: PrioritizationWeights,
    directory: Path,
) -> list[Path]:
    """Write every export artifact into directory.

    Empty datasets are skipped; rules.json and prioritization.json are always
    written.

    Returns:
        Paths written, in write order
    """
    to_write = [d for d in datasets if not d.is_empty]
    written: list[Path] = []
    with ProgressTracker(len(to_write) + 2, label="Exporting") as progress:
        for dataset in to_write:
            with progress.step(f"{dataset.kind.value}.csv"):
                path = write_dataset_csv(dataset, directory)
            written.append(path)
            logger.debug(f"exported {dataset.kind.value}: rows={len(dataset)} -> {path}")

        with progress.step(RULES_FILE):
            written.append(write_json(directory / RULES_FILE, build_rules_export(rules)))
        with progress.step(WEIGHTS_FILE):
            written.append(write_json(directory / WEIGHTS_FILE, weights.to_dict()))
    return written
